"""
Pixel Markov
============

Learn how colours sit next to each other in a handful of sample images
and synthesise new images with the same local colour structure.
Three stages:

- **Quantise** the sample pixels to a small palette (k-means in RGB)
- **Learn** a right/bottom neighbour transition model over that palette
- **Generate** a new image in raster order from the model
"""

__version__ = "1.0.0"

from pixel_markov.config import MarkovConfig
from pixel_markov.errors import (
    ModelNotReadyError,
    PixelMarkovError,
    PreconditionViolation,
    ValidationError,
)
from pixel_markov.image_io import (
    load_and_resize,
    load_samples,
    make_comparison_grid,
    save_palette,
    save_upscaled,
)
from pixel_markov.markov import TransitionModel, learn, load_model, save_model
from pixel_markov.palette import Palette, quantize
from pixel_markov.pipeline import TrainingResult, synthesize, train
from pixel_markov.synthesis import generate

__all__ = [
    "MarkovConfig",
    "ModelNotReadyError",
    "Palette",
    "PixelMarkovError",
    "PreconditionViolation",
    "TrainingResult",
    "TransitionModel",
    "ValidationError",
    "generate",
    "learn",
    "load_and_resize",
    "load_model",
    "load_samples",
    "make_comparison_grid",
    "quantize",
    "save_model",
    "save_palette",
    "save_upscaled",
    "synthesize",
    "train",
]
