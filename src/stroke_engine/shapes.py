"""Shape signatures: direction-only descriptions of a stroke path."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from stroke_engine.dtw import dtw_distance, dtw_distance_banded
from stroke_engine.vectors import as_vectors, normalize_rows


class Shape:
    """An ordered sequence of unit motion vectors.

    The moves are copied and normalized on construction, so a Shape never
    aliases the caller's buffer and is insensitive to the scale and speed
    of the original stroke. A zero-length move stays the zero vector; in
    DTW it costs |v| against every component v it is aligned with, where a
    unit vector would cost |u - v|.
    """

    __slots__ = ("_moves",)

    def __init__(self, moves=()):
        normalized = normalize_rows(as_vectors(moves))
        normalized.flags.writeable = False
        self._moves = normalized

    @property
    def moves(self) -> np.ndarray:
        """Read-only (N, 2) array of normalized moves."""
        return self._moves

    @property
    def xs(self) -> np.ndarray:
        return self._moves[:, 0]

    @property
    def ys(self) -> np.ndarray:
        return self._moves[:, 1]

    @property
    def is_empty(self) -> bool:
        return len(self._moves) == 0

    @property
    def degenerate_count(self) -> int:
        """Number of zero vectors that could not be normalized."""
        return int(np.count_nonzero(~self._moves.any(axis=1)))

    def distance_to(self, other: Shape, window: Optional[int] = None) -> float:
        """Distance between two shapes.

        DTW runs independently on the x and y components and the two costs
        are combined as orthogonal error terms: sqrt(dx^2 + dy^2).

        Args:
            other: Shape to compare against.
            window: Sakoe-Chiba band for DTW, or None for unconstrained DTW.
        """
        if window is None:
            dx = dtw_distance(self.xs, other.xs)
            dy = dtw_distance(self.ys, other.ys)
        else:
            dx = dtw_distance_banded(self.xs, other.xs, window)
            dy = dtw_distance_banded(self.ys, other.ys, window)
        return math.sqrt(dx * dx + dy * dy)

    def __len__(self) -> int:
        return len(self._moves)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return np.array_equal(self._moves, other._moves)

    def __hash__(self):
        return hash(self._moves.tobytes())

    def __repr__(self) -> str:
        return f"Shape({self._moves.tolist()})"


@dataclass(frozen=True)
class NamedShape:
    """A labelled reference shape (one exemplar of a gesture class)."""
    name: str
    shape: Shape

    @classmethod
    def from_moves(cls, moves, name: str) -> NamedShape:
        return cls(name=name, shape=Shape(moves))

    def distance_to(self, other: Shape, window: Optional[int] = None) -> float:
        return self.shape.distance_to(other, window=window)

    def __str__(self) -> str:
        return f"NamedShape({self.name})"


@dataclass(frozen=True)
class Match:
    """A reference shape paired with its distance to a query."""
    distance: float
    gesture: NamedShape

    @property
    def name(self) -> str:
        return self.gesture.name
