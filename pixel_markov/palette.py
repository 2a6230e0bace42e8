"""Colour quantisation: reduce the sample pixels to a small palette.

Lloyd-style k-means in plain RGB. Centroids are seeded from the pixels
themselves, refined for a bounded number of rounds, and finally rounded
to integer colours.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np

from pixel_markov.color_utils import Color, as_pixels, nearest_index, to_color_key, to_uint8
from pixel_markov.errors import PreconditionViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Palette:
    """Ordered, read-only set of representative colours.

    Attributes:
        colors: (K, 3) uint8 array. Not writeable.
    """

    colors: np.ndarray

    def __post_init__(self) -> None:
        colors = np.array(self.colors, dtype=np.uint8).reshape(-1, 3)
        colors.setflags(write=False)
        object.__setattr__(self, "colors", colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[Color]:
        for c in self.colors:
            yield int(c[0]), int(c[1]), int(c[2])

    @property
    def keys(self) -> list[str]:
        return [to_color_key(c) for c in self.colors]

    def to_list(self) -> list[list[int]]:
        return [list(c) for c in self]

    @classmethod
    def from_list(cls, colors: Sequence[Sequence[int]]) -> Palette:
        return cls(np.asarray(colors, dtype=np.uint8))


def distinct_colors(pixels) -> np.ndarray:
    """Unique colours of *pixels* in order of first occurrence.

    Returns:
        (D, 3) uint8 array.
    """
    flat = to_uint8(as_pixels(pixels))
    _, first = np.unique(flat, axis=0, return_index=True)
    return flat[np.sort(first)]


def refine_centroids(
    points: np.ndarray,
    centroids: np.ndarray,
    max_iterations: int = 20,
    tolerance: float = 1.0,
) -> tuple[np.ndarray, int]:
    """Lloyd refinement of *centroids* over *points*.

    A centroid that attracts no points keeps its previous value.

    Returns:
        ``(centroids, rounds)`` with float64 (K, 3) centroids.
    """
    points = np.asarray(points, dtype=np.float64)
    centroids = np.array(centroids, dtype=np.float64)
    k = len(centroids)

    iterations = 0
    changed = True
    while changed and iterations < max_iterations:
        labels = nearest_index(points, centroids)

        counts = np.bincount(labels, minlength=k)
        sums = np.zeros((k, 3), dtype=np.float64)
        np.add.at(sums, labels, points)

        occupied = counts > 0
        updated = centroids.copy()
        updated[occupied] = sums[occupied] / counts[occupied, np.newaxis]

        moved = np.sum((updated - centroids) ** 2, axis=1)
        changed = bool(np.any(moved > tolerance))
        centroids = updated
        iterations += 1

        logger.debug(
            "k-means round %d: max shift %.3f, %d empty cluster(s)",
            iterations, float(moved.max()), int(k - occupied.sum()),
        )
    return centroids, iterations


def quantize(
    pixels,
    k: int,
    rng: np.random.Generator | int | None = None,
    max_iterations: int = 20,
    tolerance: float = 1.0,
) -> Palette:
    """Reduce *pixels* to at most *k* representative colours.

    If the input has fewer than *k* distinct colours they are returned
    as-is (first-occurrence order). Otherwise exactly *k* centroids are
    returned; clusters that collapse onto the same colour are not merged.

    Args:
        pixels: (N, 3) colours (any shape ending in 3 is flattened).
        k: Requested palette size, ``>= 1``.
        rng: NumPy generator or seed used for centroid seeding.
        max_iterations: Cap on refinement rounds.
        tolerance: A round is the last one once no centroid moved by
            more than this squared distance.

    Returns:
        :class:`Palette` of integer colours.
    """
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        msg = f"quantize() needs k >= 1, got {k!r}"
        raise PreconditionViolation(msg)
    points = as_pixels(pixels).astype(np.float64)
    if len(points) == 0:
        msg = "quantize() needs at least one pixel"
        raise PreconditionViolation(msg)

    distinct = distinct_colors(points)
    if len(distinct) < k:
        logger.info(
            "Only %d distinct colours for k=%d, skipping clustering",
            len(distinct), k,
        )
        return Palette(distinct)

    rng = np.random.default_rng(rng)
    t0 = time.perf_counter()

    # Seed centroids with random pixels (with replacement)
    seeds = points[rng.integers(0, len(points), size=k)]
    centroids, iterations = refine_centroids(points, seeds, max_iterations, tolerance)

    logger.info(
        "Quantised %d pixels to %d colours in %d round(s)  (%.2f s)",
        len(points), k, iterations, time.perf_counter() - t0,
    )
    return Palette(to_uint8(centroids))
