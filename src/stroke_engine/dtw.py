"""Dynamic Time Warping over 1-D numeric series.

Shapes are compared one axis at a time, so both functions here take plain
scalar sequences and use the absolute difference as local cost. The cost is
the raw accumulated alignment cost, not normalized by path length.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def _empty_alignment_cost(s: np.ndarray, t: np.ndarray) -> float:
    """Cost when one side has no samples: every sample of the other is unmatched."""
    return float(np.sum(np.abs(s)) + np.sum(np.abs(t)))


def dtw_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Compute the classic (unconstrained) DTW cost between two series.

    Uses O(N*M) DP. The warping path is anchored at both ends.
    """
    s = np.asarray(a, dtype=np.float64).ravel()
    t = np.asarray(b, dtype=np.float64).ravel()
    n, m = len(s), len(t)
    if n == 0 or m == 0:
        return _empty_alignment_cost(s, t)

    cost = np.full((n + 1, m + 1), float("inf"), dtype=np.float64)
    cost[0, 0] = 0.0

    for i in range(1, n + 1):
        for j in range(1, m + 1):
            d = abs(s[i - 1] - t[j - 1])
            cost[i, j] = d + min(cost[i - 1, j], cost[i, j - 1], cost[i - 1, j - 1])

    return float(cost[n, m])


def dtw_distance_banded(a: Sequence[float], b: Sequence[float], window: int = 10) -> float:
    """DTW with Sakoe-Chiba band constraint for speed.

    The band is widened to the length difference of the two series so the
    end cell stays reachable. A window at least as long as both series gives
    the same result as dtw_distance.
    """
    if window < 0:
        raise ValueError(f"window must be non-negative, got {window}")

    s = np.asarray(a, dtype=np.float64).ravel()
    t = np.asarray(b, dtype=np.float64).ravel()
    n, m = len(s), len(t)
    if n == 0 or m == 0:
        return _empty_alignment_cost(s, t)

    window = max(window, abs(n - m))

    cost = np.full((n + 1, m + 1), float("inf"), dtype=np.float64)
    cost[0, 0] = 0.0

    for i in range(1, n + 1):
        j_start = max(1, i - window)
        j_end = min(m, i + window)
        for j in range(j_start, j_end + 1):
            d = abs(s[i - 1] - t[j - 1])
            cost[i, j] = d + min(cost[i - 1, j], cost[i, j - 1], cost[i - 1, j - 1])

    return float(cost[n, m])
