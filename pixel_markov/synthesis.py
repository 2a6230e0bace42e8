"""Stochastic raster-order image synthesis from a transition model."""

from __future__ import annotations

import logging
import time

import numpy as np

from pixel_markov.color_utils import from_color_key
from pixel_markov.errors import PreconditionViolation
from pixel_markov.markov import TransitionModel

logger = logging.getLogger(__name__)


def _dense_table(model: TransitionModel) -> tuple[list[str], np.ndarray, np.ndarray]:
    """Lay the model out over one sorted key universe.

    Returns:
        ``(keys, table, sources)`` where ``table[i]`` is the outgoing
        distribution of ``keys[i]`` (all zeros when it is not a source)
        and ``sources`` lists the indices of source keys in sorted order.
    """
    keys = sorted(
        set(model.source_keys())
        | {dst for dests in model.transitions.values() for dst in dests}
    )
    index = {key: i for i, key in enumerate(keys)}

    table = np.zeros((len(keys), len(keys)), dtype=np.float64)
    for src, dst, p in model.to_records():
        table[index[src], index[dst]] = p

    sources = np.array([index[src] for src in model.source_keys()], dtype=np.intp)
    return keys, table, sources


def weighted_pick(weights: np.ndarray, rng: np.random.Generator) -> int:
    """Draw an index with probability proportional to *weights*.

    Candidates are the strictly positive entries, scanned in index
    order; the first whose running total reaches ``u * total`` wins.
    """
    candidates = np.flatnonzero(weights > 0)
    cumulative = np.cumsum(weights[candidates])
    draw = rng.random() * cumulative[-1]
    pos = int(np.searchsorted(cumulative, draw, side="left"))
    return int(candidates[min(pos, len(candidates) - 1)])


def generate(
    model: TransitionModel,
    width: int,
    height: int,
    rng: np.random.Generator | int | None = None,
) -> np.ndarray:
    """Synthesise a *width* x *height* image from *model*.

    Pixels are filled row by row, left to right. The first pixel is a
    uniformly chosen source colour; every later pixel is drawn from the
    sum of the left and top neighbours' outgoing distributions. The two
    distributions are added without renormalising, so a colour favoured
    by both neighbours gets their combined weight. When neither
    neighbour has outgoing edges a source colour is picked uniformly.

    Args:
        model:  Non-empty transition model.
        width:  Output width, ``>= 1``.
        height: Output height, ``>= 1``.
        rng:    NumPy generator or seed.

    Returns:
        (height, width, 3) uint8 array.
    """
    if model.is_empty:
        msg = "generate() needs a non-empty transition model"
        raise PreconditionViolation(msg)
    if width < 1 or height < 1:
        msg = f"generate() needs positive dimensions, got {width}x{height}"
        raise PreconditionViolation(msg)

    rng = np.random.default_rng(rng)
    t0 = time.perf_counter()

    keys, table, sources = _dense_table(model)
    colors = np.array([from_color_key(k) for k in keys], dtype=np.uint8)

    cells = np.empty((height, width), dtype=np.intp)
    fallbacks = 0

    for y in range(height):
        for x in range(width):
            if x == 0 and y == 0:
                cells[0, 0] = sources[rng.integers(len(sources))]
                continue

            merged = np.zeros(len(keys), dtype=np.float64)
            if x > 0:
                merged += table[cells[y, x - 1]]
            if y > 0:
                merged += table[cells[y - 1, x]]

            if not merged.any():
                merged[sources[rng.integers(len(sources))]] = 1.0
                fallbacks += 1

            cells[y, x] = weighted_pick(merged, rng)

    logger.info(
        "Generated %dx%d image (%d fallback pick(s))  (%.2f s)",
        width, height, fallbacks, time.perf_counter() - t0,
    )
    return colors[cells]
