"""Directional colour-transition model learned from sample grids."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import numpy as np

from pixel_markov.color_utils import nearest_index
from pixel_markov.errors import PreconditionViolation
from pixel_markov.palette import Palette

logger = logging.getLogger(__name__)

Record = tuple[str, str, float]


@dataclass(frozen=True)
class TransitionModel:
    """Per-source probability tables over colour keys.

    ``transitions[src][dst]`` is the probability that a pixel of colour
    *src* has a right or bottom neighbour of colour *dst*. Only colours
    with at least one outgoing edge appear as sources.
    """

    transitions: Mapping[str, Mapping[str, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for src, dests in self.transitions.items():
            weights = [float(p) for p in dests.values()]
            if not weights or not all(p > 0 for p in weights):
                msg = f"Source {src!r} needs positive transition probabilities"
                raise PreconditionViolation(msg)
            total = sum(weights)
            if not abs(total - 1.0) <= 1e-6:
                msg = f"Probabilities of source {src!r} sum to {total}, expected 1"
                raise PreconditionViolation(msg)

        frozen = {
            src: MappingProxyType({dst: float(p) for dst, p in sorted(dests.items())})
            for src, dests in sorted(self.transitions.items())
        }
        object.__setattr__(self, "transitions", MappingProxyType(frozen))

    def __len__(self) -> int:
        return len(self.transitions)

    def __contains__(self, key: object) -> bool:
        return key in self.transitions

    def __iter__(self) -> Iterator[str]:
        return iter(self.transitions)

    @property
    def is_empty(self) -> bool:
        return not self.transitions

    def source_keys(self) -> list[str]:
        """Source colour keys in sorted order."""
        return sorted(self.transitions)

    def distribution(self, key: str) -> Mapping[str, float]:
        """Outgoing distribution of *key*, empty if it never had an edge."""
        return self.transitions.get(key, MappingProxyType({}))

    def probability(self, src: str, dst: str) -> float:
        return self.distribution(src).get(dst, 0.0)

    def to_records(self) -> list[Record]:
        return [
            (src, dst, p)
            for src, dests in self.transitions.items()
            for dst, p in dests.items()
        ]

    @classmethod
    def from_records(cls, records: Iterable[Sequence]) -> TransitionModel:
        table: dict[str, dict[str, float]] = {}
        for src, dst, p in records:
            table.setdefault(str(src), {})[str(dst)] = float(p)
        return cls(table)


def _check_grids(grids: Sequence[np.ndarray]) -> list[np.ndarray]:
    if len(grids) == 0:
        msg = "learn() needs at least one sample grid"
        raise PreconditionViolation(msg)
    arrays = [np.asarray(g) for g in grids]
    shape = arrays[0].shape
    if len(shape) != 3 or shape[2] < 3 or shape[0] < 1 or shape[1] < 1:
        msg = f"Sample grids must be (H, W, 3), got {shape}"
        raise PreconditionViolation(msg)
    for i, arr in enumerate(arrays[1:], 1):
        if arr.shape != shape:
            msg = f"Grid {i} has shape {arr.shape}, expected {shape}"
            raise PreconditionViolation(msg)
    return arrays


def count_transitions(grids: Sequence[np.ndarray], palette: Palette) -> np.ndarray:
    """Raw edge counts between palette indices.

    Returns:
        (K, K) int64 matrix; ``counts[i, j]`` is the number of right or
        bottom neighbours of colour *j* next to a pixel of colour *i*.
    """
    arrays = _check_grids(grids)
    if len(palette) == 0:
        msg = "learn() needs a non-empty palette"
        raise PreconditionViolation(msg)

    k = len(palette)
    counts = np.zeros((k, k), dtype=np.int64)
    for arr in arrays:
        h, w = arr.shape[:2]
        labels = nearest_index(arr[..., :3].reshape(-1, 3), palette.colors).reshape(h, w)

        # Right neighbours, then bottom neighbours
        np.add.at(counts, (labels[:, :-1].ravel(), labels[:, 1:].ravel()), 1)
        np.add.at(counts, (labels[:-1, :].ravel(), labels[1:, :].ravel()), 1)
    return counts


def learn(grids: Sequence[np.ndarray], palette: Palette) -> TransitionModel:
    """Build a transition model from sample grids quantised to *palette*.

    Args:
        grids:   Non-empty list of (H, W, 3) arrays sharing one shape.
        palette: Colours every pixel is snapped to (nearest in RGB).

    Returns:
        Normalised :class:`TransitionModel`.
    """
    t0 = time.perf_counter()
    counts = count_transitions(grids, palette)
    keys = palette.keys

    # Fold palette indices onto colour keys; duplicate palette colours share one key
    merged: dict[str, dict[str, int]] = {}
    for i, j in zip(*np.nonzero(counts), strict=True):
        dests = merged.setdefault(keys[i], {})
        dests[keys[j]] = dests.get(keys[j], 0) + int(counts[i, j])

    table: dict[str, dict[str, float]] = {}
    for src in sorted(merged):
        dests = merged[src]
        total = sum(dests.values())
        table[src] = {dst: n / total for dst, n in sorted(dests.items())}

    logger.info(
        "Learned %d transitions over %d source colours from %d grid(s)  (%.2f s)",
        int(counts.sum()), len(table), len(grids), time.perf_counter() - t0,
    )
    return TransitionModel(table)


# -- Persistence -------------------------------------------------------


def save_model(
    path: str | Path,
    model: TransitionModel,
    palette: Palette | None = None,
) -> None:
    """Write *model* (and optionally its palette) as JSON."""
    payload = {
        "palette": palette.to_list() if palette is not None else None,
        "transitions": [list(r) for r in model.to_records()],
    }
    Path(path).write_text(json.dumps(payload, indent=1))


def load_model(path: str | Path) -> tuple[TransitionModel, Palette | None]:
    """Read a file written by :func:`save_model`."""
    payload = json.loads(Path(path).read_text())
    palette = payload.get("palette")
    return (
        TransitionModel.from_records(payload.get("transitions", [])),
        Palette.from_list(palette) if palette else None,
    )
