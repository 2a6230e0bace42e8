"""Colour keys, rounding, and nearest-colour lookup in RGB."""

from __future__ import annotations

import numpy as np

Color = tuple[int, int, int]


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer, halves away from zero for [0, 255]."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round float colours and clamp them into (N, 3) uint8."""
    return np.clip(round_half_up(values), 0, 255).astype(np.uint8)


def to_color_key(color) -> str:
    """Canonical ``"r,g,b"`` key of a colour (channels rounded)."""
    r, g, b = (int(v) for v in round_half_up(np.asarray(color)[:3]))
    return f"{r},{g},{b}"


def from_color_key(key: str) -> Color:
    """Inverse of :func:`to_color_key`."""
    r, g, b = (int(part) for part in key.split(","))
    return r, g, b


def as_pixels(pixels) -> np.ndarray:
    """Coerce any colour array (list of triples, (H, W, 3), ...) to (N, 3)."""
    arr = np.asarray(pixels)
    if arr.size == 0:
        return arr.reshape(0, 3)
    return arr.reshape(-1, arr.shape[-1])[:, :3]


def squared_distances(
    points: np.ndarray,
    centroids: np.ndarray,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Pairwise squared Euclidean RGB distance.

    Args:
        points:    (N, 3) colours.
        centroids: (K, 3) colours.
        chunk_size: Rows computed per batch (controls peak RAM).

    Returns:
        (N, K) float64 distance matrix.
    """
    p = points.astype(np.float64)
    c = centroids.astype(np.float64)

    n = len(p)
    dist = np.empty((n, len(c)), dtype=np.float64)
    for i in range(0, n, chunk_size):
        j = min(i + chunk_size, n)
        diff = p[i:j, np.newaxis, :] - c[np.newaxis, :, :]
        dist[i:j] = np.sum(diff ** 2, axis=2)
    return dist


def nearest_index(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the closest centroid for every point.

    Ties resolve to the lowest centroid index (``argmin`` returns the
    first minimum).
    """
    return np.argmin(squared_distances(points, centroids), axis=1)
