"""Validated entry points chaining quantise -> learn -> generate.

Nothing here holds state between calls: :func:`train` returns a fresh
palette and model, and :func:`synthesize` only reads the model it is
handed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from pixel_markov.errors import ModelNotReadyError, ValidationError
from pixel_markov.markov import TransitionModel, learn
from pixel_markov.palette import Palette, quantize
from pixel_markov.synthesis import generate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingResult:
    palette: Palette
    model: TransitionModel


def validate_positive_int(name: str, value) -> int:
    """Parse *value* as a strictly positive integer.

    Accepts ints and integral strings (``"32"``); rejects bools, floats
    with a fractional part, non-numeric input, and values ``<= 0``.
    """
    if isinstance(value, bool):
        msg = f"{name} must be a positive integer, got {value!r}"
        raise ValidationError(msg)
    try:
        if isinstance(value, str):
            parsed = int(value.strip())
        elif isinstance(value, (int, np.integer)):
            parsed = int(value)
        elif isinstance(value, (float, np.floating)) and float(value).is_integer():
            parsed = int(value)
        else:
            raise TypeError(type(value).__name__)
    except (TypeError, ValueError) as exc:
        msg = f"{name} must be a positive integer, got {value!r}"
        raise ValidationError(msg) from exc
    if parsed <= 0:
        msg = f"{name} must be a positive integer, got {value!r}"
        raise ValidationError(msg)
    return parsed


def train(
    grids: Sequence[np.ndarray],
    color_count,
    rng: np.random.Generator | int | None = None,
    max_iterations: int = 20,
    tolerance: float = 1.0,
) -> TrainingResult:
    """Quantise the pooled sample pixels and learn a transition model.

    Raises:
        ValidationError: empty *grids* or a bad *color_count*.
    """
    k = validate_positive_int("color_count", color_count)
    if grids is None or len(grids) == 0:
        msg = "Select at least one sample image"
        raise ValidationError(msg)

    arrays = [np.asarray(g) for g in grids]
    pixels = np.concatenate([a[..., :3].reshape(-1, 3) for a in arrays])

    logger.info("Quantizing %d pixels from %d image(s) to %d colours ...", len(pixels), len(arrays), k)
    palette = quantize(pixels, k, rng=rng, max_iterations=max_iterations, tolerance=tolerance)

    logger.info("Learning transition model ...")
    model = learn(arrays, palette)
    logger.info("Model has %d unique colours", len(model))
    return TrainingResult(palette=palette, model=model)


def synthesize(
    model: TransitionModel | None,
    width,
    height,
    rng: np.random.Generator | int | None = None,
) -> np.ndarray:
    """Generate a new image from a trained model.

    Raises:
        ValidationError: bad *width* / *height*.
        ModelNotReadyError: no model, or an empty one.
    """
    w = validate_positive_int("width", width)
    h = validate_positive_int("height", height)
    if model is None or model.is_empty:
        msg = "Process sample images and learn a model first"
        raise ModelNotReadyError(msg)

    logger.info("Generating %dx%d image ...", w, h)
    return generate(model, w, h, rng=rng)
