"""Gesture database with nearest-neighbour recognition.

Stores labelled exemplar shapes and classifies a query by its closest
exemplar, rejecting the query when even the closest one is too far away.

Usage:
    db = GestureDatabase.with_defaults()
    db.add_gesture([(1, 1), (1, -1), (1, 1)], "wave")

    result = db.recognize(query_shape)
    if result.ok:
        print(f"{result.name} (distance={result.distance:.2f})")
    else:
        print(f"No match: {result.failure.reason.value}")
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

from stroke_engine.shapes import Match, NamedShape, Shape

logger = logging.getLogger("stroke_engine.database")

DEFAULT_REJECTION_THRESHOLD = 3.0


class RejectReason(Enum):
    EMPTY_DATABASE = "empty_database"
    ABOVE_THRESHOLD = "above_threshold"
    EMPTY_QUERY = "empty_query"


class NoMatchFound(Exception):
    """No exemplar is close enough to the query gesture."""

    def __init__(self, reason: RejectReason, best: Optional[Match] = None):
        self.reason = reason
        self.best = best
        if best is not None:
            message = f"no gesture matched ({reason.value}, best: {best.name} at {best.distance:.3f})"
        else:
            message = f"no gesture matched ({reason.value})"
        super().__init__(message)


@dataclass(frozen=True)
class Recognition:
    """Outcome of a recognition query: either a match or a NoMatchFound."""
    match: Optional[Match] = None
    failure: Optional[NoMatchFound] = None

    @property
    def ok(self) -> bool:
        return self.match is not None

    @property
    def gesture(self) -> Optional[NamedShape]:
        return self.match.gesture if self.match else None

    @property
    def name(self) -> Optional[str]:
        return self.match.name if self.match else None

    @property
    def distance(self) -> Optional[float]:
        return self.match.distance if self.match else None

    def unwrap(self) -> NamedShape:
        """Return the matched exemplar, raising NoMatchFound otherwise."""
        if self.match is None:
            raise self.failure or NoMatchFound(RejectReason.EMPTY_DATABASE)
        return self.match.gesture


class GestureDatabase:
    """Insertion-ordered collection of labelled exemplar shapes.

    Several exemplars may share a label; each one is a separate reference
    for the same gesture class. Exemplars are only ever appended.

    Ranking can fan the distance computations out over a thread pool
    (max_workers > 1); the result is the same fully sorted list either way.
    """

    def __init__(
        self,
        rejection_threshold: float = DEFAULT_REJECTION_THRESHOLD,
        dtw_window: Optional[int] = None,
        max_workers: Optional[int] = None,
    ):
        self.rejection_threshold = rejection_threshold
        self.dtw_window = dtw_window
        self.max_workers = max_workers

        self._data: list[NamedShape] = []
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[Match], None]] = []

    def add_gesture(self, moves, name: str) -> NamedShape:
        """Build an exemplar from raw moves and append it."""
        gesture = NamedShape.from_moves(moves, name)
        self.add_named(gesture)
        return gesture

    def add_named(self, gesture: NamedShape):
        """Append an already built exemplar."""
        with self._lock:
            self._data.append(gesture)

    def on_match(self, callback: Callable[[Match], None]):
        """Register a callback invoked with every successful match."""
        with self._lock:
            self._callbacks.append(callback)

    def _snapshot(self) -> tuple[NamedShape, ...]:
        with self._lock:
            return tuple(self._data)

    def rank_matches(self, query: Shape) -> list[Match]:
        """All exemplars paired with their distance to query, closest first.

        Exemplars at equal distance keep their insertion order.
        """
        exemplars = self._snapshot()
        window = self.dtw_window

        def measure(gesture: NamedShape) -> Match:
            return Match(distance=gesture.distance_to(query, window=window), gesture=gesture)

        if self.max_workers and self.max_workers > 1 and len(exemplars) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                matches = list(pool.map(measure, exemplars))
        else:
            matches = [measure(g) for g in exemplars]

        matches.sort(key=lambda m: m.distance)
        return matches

    def recognize(self, query: Shape) -> Recognition:
        """Classify query by its nearest exemplar.

        Returns a Recognition holding the best Match, or a NoMatchFound when
        the database is empty, the query has no moves, or the best distance
        exceeds the rejection threshold.
        """
        if query.is_empty:
            logger.debug("Rejected empty query gesture")
            return Recognition(failure=NoMatchFound(RejectReason.EMPTY_QUERY))

        matches = self.rank_matches(query)
        if not matches:
            logger.debug("Rejected query: gesture database is empty")
            return Recognition(failure=NoMatchFound(RejectReason.EMPTY_DATABASE))

        best = matches[0]
        if best.distance > self.rejection_threshold:
            logger.debug(
                "Rejected query: best %s at %.3f exceeds threshold %.3f",
                best.name, best.distance, self.rejection_threshold,
            )
            return Recognition(failure=NoMatchFound(RejectReason.ABOVE_THRESHOLD, best=best))

        logger.info("Matched gesture: %s (distance: %.3f)", best.name, best.distance)
        with self._lock:
            callbacks = tuple(self._callbacks)
        for cb in callbacks:
            cb(best)

        return Recognition(match=best)

    @property
    def names(self) -> list[str]:
        """Distinct labels in the order they were first added."""
        return list(dict.fromkeys(g.name for g in self._snapshot()))

    def counts(self) -> dict[str, int]:
        """Number of exemplars per label."""
        return dict(Counter(g.name for g in self._snapshot()))

    def exemplars(self, name: str) -> list[NamedShape]:
        return [g for g in self._snapshot() if g.name == name]

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __iter__(self) -> Iterator[NamedShape]:
        return iter(self._snapshot())

    @classmethod
    def with_defaults(cls, **kwargs) -> GestureDatabase:
        """Create a database seeded with the built-in stroke exemplars.

        hline and vline get one exemplar per direction, zet is a single
        right / down-left / right zigzag, and the vup/vdown check marks are
        swept over x and y in 0.5..2.0 (step 0.25), giving 49 exemplars each.
        """
        db = cls(**kwargs)

        db.add_gesture([(-1, 0)], "hline")
        db.add_gesture([(1, 0)], "hline")

        db.add_gesture([(0, -1)], "vline")
        db.add_gesture([(0, 1)], "vline")

        db.add_gesture([(1, 0), (-1, -1), (1, 0)], "zet")

        sweep = [0.5 + 0.25 * i for i in range(7)]
        for x in sweep:
            for y in sweep:
                db.add_gesture([(x, y), (x, -y)], "vup")
                db.add_gesture([(x, -y), (x, y)], "vdown")

        return db


_shared: Optional[GestureDatabase] = None
_shared_lock = threading.Lock()


def shared_database() -> GestureDatabase:
    """Process-wide default database, built once on first use.

    Prefer constructing a GestureDatabase and passing it where needed;
    this exists for callers that have nowhere to hold one.
    """
    global _shared
    if _shared is None:
        with _shared_lock:
            if _shared is None:
                _shared = GestureDatabase.with_defaults()
    return _shared
