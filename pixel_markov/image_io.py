"""Image loading, saving, and comparison-grid generation."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from pixel_markov.palette import Palette


def load_and_resize(path: str | Path, width: int = 32, height: int = 32) -> np.ndarray:
    """Load an image and stretch it to exactly *width* x *height*.

    Every sample of a training run must share one size, so the aspect
    ratio is not preserved.

    Returns:
        (H, W, 3) uint8 array.
    """
    img = Image.open(path).convert("RGB")
    img = img.resize((width, height), Image.LANCZOS)
    return np.array(img, dtype=np.uint8)


def load_samples(
    paths: Sequence[str | Path],
    width: int = 32,
    height: int = 32,
) -> list[np.ndarray]:
    """Load every path in *paths* at the same size."""
    return [load_and_resize(p, width, height) for p in paths]


def save_upscaled(
    array: np.ndarray,
    path: str | Path,
    pixel_upscale: int = 12,
) -> None:
    """Save a small array as a nearest-neighbour-upscaled image."""
    img = Image.fromarray(array.astype(np.uint8))
    h, w = array.shape[:2]
    img = img.resize((w * pixel_upscale, h * pixel_upscale), Image.NEAREST)
    img.save(path)


def palette_swatch(palette: Palette) -> np.ndarray:
    """Lay the palette out as a single (1, K, 3) row of pixels."""
    return palette.colors.reshape(1, -1, 3).copy()


def save_palette(
    palette: Palette,
    path: str | Path,
    pixel_upscale: int = 12,
) -> None:
    save_upscaled(palette_swatch(palette), path, pixel_upscale)


def make_comparison_grid(
    samples: Sequence[np.ndarray],
    palette: Palette,
    generated: np.ndarray,
    output_path: str | Path,
    pixel_upscale: int = 12,
) -> None:
    """Create a panel strip: Sample 1..n | Palette | Generated.

    Each panel is upscaled by *pixel_upscale*; panels may differ in size
    and are top-aligned under their labels.
    """
    label_height = 36

    panels = [
        Image.fromarray(s.astype(np.uint8)) for s in samples
    ] + [
        Image.fromarray(palette_swatch(palette)),
        Image.fromarray(generated.astype(np.uint8)),
    ]
    panels = [
        p.resize((p.width * pixel_upscale, p.height * pixel_upscale), Image.NEAREST)
        for p in panels
    ]
    labels = [f"Sample {i}" for i in range(1, len(samples) + 1)] + [
        f"Palette ({len(palette)})",
        f"Generated {generated.shape[1]}x{generated.shape[0]}",
    ]

    gap = 8
    total_w = sum(p.width for p in panels) + (len(panels) - 1) * gap
    total_h = max(p.height for p in panels) + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    x = 0
    for panel, label in zip(panels, labels, strict=True):
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel.width - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)
        x += panel.width + gap

    canvas.save(output_path)
