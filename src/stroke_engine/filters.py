"""Raw trace → motion vectors, with jitter and direction filtering.

A captured stroke is a list of absolute positions. Consecutive deltas give
motion vectors; tiny deltas are sensor noise or idle time between strokes
and are dropped, and runs of moves in roughly the same direction collapse
into the first move of the run.

Usage:
    signal = SignalFilter(magnitude_threshold=5.0, angle_threshold=20.0)
    shape = signal.shape_from_points([(0, 0), (0, 40), (0, 90)])
"""

from __future__ import annotations

import numpy as np

from stroke_engine.shapes import Shape
from stroke_engine.vectors import angle_between, as_vectors

DEFAULT_MAGNITUDE_THRESHOLD = 5.0
DEFAULT_ANGLE_THRESHOLD = 20.0


def to_motion_vectors(points) -> np.ndarray:
    """Deltas between consecutive positions, projected to 2D.

    Returns an (N-1, 2) array, or an empty (0, 2) array for fewer than
    two points.
    """
    pts = as_vectors(points)
    if len(pts) < 2:
        return np.zeros((0, 2), dtype=np.float64)
    return np.diff(pts, axis=0)


def filter_by_magnitude(
    vectors, threshold: float = DEFAULT_MAGNITUDE_THRESHOLD
) -> np.ndarray:
    """Drop vectors whose length is <= threshold."""
    vecs = as_vectors(vectors)
    if len(vecs) == 0:
        return vecs
    keep = np.linalg.norm(vecs, axis=1) > threshold
    return vecs[keep]


def filter_by_direction(
    vectors, angle_threshold: float = DEFAULT_ANGLE_THRESHOLD
) -> np.ndarray:
    """Collapse consecutive moves that continue the same direction.

    The first vector is always kept. Each later vector is compared with the
    last vector *kept* (not the last one seen) and kept only if the angle
    between them exceeds angle_threshold degrees.
    """
    vecs = as_vectors(vectors)
    if len(vecs) < 2:
        return vecs

    kept = [vecs[0]]
    for b in vecs[1:]:
        if angle_between(kept[-1], b) > angle_threshold:
            kept.append(b)

    return np.array(kept, dtype=np.float64)


def filter_accelerations(
    vectors,
    magnitude_threshold: float = DEFAULT_MAGNITUDE_THRESHOLD,
    angle_threshold: float = DEFAULT_ANGLE_THRESHOLD,
) -> np.ndarray:
    """Magnitude filtering first, then direction collapse on the survivors."""
    return filter_by_direction(
        filter_by_magnitude(vectors, magnitude_threshold),
        angle_threshold,
    )


class SignalFilter:
    """Turns captured point traces into shapes using fixed thresholds."""

    def __init__(
        self,
        magnitude_threshold: float = DEFAULT_MAGNITUDE_THRESHOLD,
        angle_threshold: float = DEFAULT_ANGLE_THRESHOLD,
    ):
        self.magnitude_threshold = magnitude_threshold
        self.angle_threshold = angle_threshold

    def motion_vectors(self, points) -> np.ndarray:
        """Filtered motion vectors for a raw trace."""
        return filter_accelerations(
            to_motion_vectors(points),
            magnitude_threshold=self.magnitude_threshold,
            angle_threshold=self.angle_threshold,
        )

    def shape_from_points(self, points) -> Shape:
        return Shape(self.motion_vectors(points))
