"""2D vector helpers used by the filters and shape normalization."""

from __future__ import annotations

import math

import numpy as np


def as_vectors(values) -> np.ndarray:
    """Coerce an array-like of 2D/3D vectors to a new float64 (N, 2) array."""
    arr = np.array(values, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.ndim != 2 or arr.shape[1] < 2:
        raise ValueError(f"expected vectors of shape (N, 2) or (N, 3), got {arr.shape}")
    return np.ascontiguousarray(arr[:, :2])


def magnitude(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


def normalize(v: np.ndarray) -> np.ndarray:
    """Return v scaled to unit length. The zero vector stays zero."""
    v = np.asarray(v, dtype=np.float64)
    mag = np.linalg.norm(v)
    if mag == 0.0:
        return np.zeros_like(v)
    return v / mag


def normalize_rows(vectors: np.ndarray) -> np.ndarray:
    """Normalize every row of an (N, 2) array into a new array.

    Rows with exactly zero magnitude are left as zero vectors.
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    mags = np.linalg.norm(vectors, axis=1, keepdims=True)
    out = np.zeros_like(vectors)
    np.divide(vectors, mags, out=out, where=mags != 0.0)
    return out


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Unsigned angle between two vectors in degrees, in [0, 180].

    Returns 0 when either vector has zero length.
    """
    denom = math.sqrt(float(np.dot(a, a)) * float(np.dot(b, b)))
    if denom < 1e-15:
        return 0.0
    cos_angle = float(np.dot(a, b)) / denom
    return math.degrees(math.acos(float(np.clip(cos_angle, -1.0, 1.0))))
