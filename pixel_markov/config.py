"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class MarkovConfig:
    """All tuneable parameters for a training / generation run.

    Attributes:
        width:          Width every sample is resized to, and of the output.
        height:         Height every sample is resized to, and of the output.
        color_count:    Palette size requested from the quantiser (K).
        seed:           Random seed (None = non-deterministic).
        max_iterations: Cap on k-means refinement rounds.
        tolerance:      Squared RGB distance below which a centroid counts as settled.
        pixel_upscale:  Each logical pixel becomes n x n in the output image.
        output_format:  Image format for saved files.
        save_palette:   Persist a swatch of the learned palette.
        save_model:     Persist the palette + transition model as JSON.
        save_comparison: Generate a side-by-side comparison grid.
        input_dir:      Folder to scan for sample images.
        output_dir:     Folder for results.
    """

    # Sample / output size
    width: int = 32
    height: int = 32

    # Quantisation
    color_count: int = 16
    seed: int | None = 42
    max_iterations: int = 20
    tolerance: float = 1.0

    # Output
    pixel_upscale: int = 12
    output_format: str = "png"
    save_palette: bool = True
    save_model: bool = True
    save_comparison: bool = True

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif"}
    )
