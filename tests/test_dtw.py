"""Tests for per-axis dynamic time warping."""

import numpy as np
import pytest

from stroke_engine.dtw import dtw_distance, dtw_distance_banded


class TestEmptySeries:
    def test_both_empty(self):
        assert dtw_distance([], []) == 0.0

    def test_left_empty(self):
        assert dtw_distance([], [3.0]) == 3.0

    def test_right_empty(self):
        assert dtw_distance([-2.0], []) == 2.0

    def test_sums_absolute_values(self):
        assert dtw_distance([], [1.0, -0.5, 0.25]) == pytest.approx(1.75)

    def test_banded_empty(self):
        assert dtw_distance_banded([], [-4.0], window=0) == 4.0


class TestDTW:
    def test_identical_constant(self):
        assert dtw_distance([1, 1, 1], [1, 1, 1]) == 0.0

    def test_single_values(self):
        assert dtw_distance([0], [5]) == 5.0

    def test_warping_absorbs_repeats(self):
        assert dtw_distance([0, 1, 2], [0, 1, 1, 2]) == 0.0

    def test_known_cost(self):
        # path (1,1) (2,1) (3,2) (3,3): 1 + 0 + 0 + 1
        assert dtw_distance([1, 2, 3], [2, 3, 4]) == pytest.approx(2.0)

    def test_accumulated_not_averaged(self):
        assert dtw_distance([0, 0, 0], [1, 1, 1]) == pytest.approx(3.0)

    def test_identical_random(self):
        rng = np.random.default_rng(42)
        s = rng.random(12)
        assert dtw_distance(s, s) == pytest.approx(0.0, abs=1e-12)

    def test_inputs_not_mutated(self):
        a = np.array([0.5, -0.5])
        b = np.array([1.0, 0.0, -1.0])
        dtw_distance(a, b)
        np.testing.assert_array_equal(a, [0.5, -0.5])
        np.testing.assert_array_equal(b, [1.0, 0.0, -1.0])

    def test_non_negative(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            assert dtw_distance(rng.normal(size=5), rng.normal(size=8)) >= 0.0


class TestBandedDTW:
    def test_wide_window_matches_full(self):
        rng = np.random.default_rng(42)
        s = rng.random(15)
        t = rng.random(11)
        assert dtw_distance_banded(s, t, window=20) == pytest.approx(dtw_distance(s, t), abs=1e-12)

    def test_zero_window_is_diagonal(self):
        assert dtw_distance_banded([1, 2, 3], [2, 3, 4], window=0) == pytest.approx(3.0)

    def test_window_widened_for_length_difference(self):
        assert dtw_distance_banded([0, 0, 0], [0], window=0) == 0.0

    def test_negative_window(self):
        with pytest.raises(ValueError):
            dtw_distance_banded([1], [1], window=-1)

    def test_never_below_full(self):
        rng = np.random.default_rng(1)
        s = rng.normal(size=10)
        t = rng.normal(size=10)
        assert dtw_distance_banded(s, t, window=2) >= dtw_distance(s, t) - 1e-12
