"""Tests for the end-to-end stroke recognizer."""

import numpy as np
import pytest

from stroke_engine.config import RecognizerConfig
from stroke_engine.database import GestureDatabase, RejectReason
from stroke_engine.metrics import MetricsCollector
from stroke_engine.recognizer import StrokeRecognizer

VERTICAL_STROKE = [(0, 0), (0, 2), (0, 40), (0, 80), (0, 120)]
ZIGZAG_STROKE = [(0, 0), (60, 0), (120, 1), (60, -60), (0, -120), (60, -120), (120, -121)]
IDLE_TRACE = [(10, 10), (11, 10), (11, 12), (12, 12)]


def noisy_trace(n: int = 21, seed: int = 3) -> np.ndarray:
    rng = np.random.default_rng(seed)
    angles = rng.uniform(0, 2 * np.pi, n - 1)
    steps = 50.0 * np.column_stack([np.cos(angles), np.sin(angles)])
    return np.vstack([[0.0, 0.0], np.cumsum(steps, axis=0)])


class TestStrokeRecognizer:
    def test_vertical_stroke(self):
        result = StrokeRecognizer().recognize_points(VERTICAL_STROKE)
        assert result.name == "vline"
        assert result.distance == pytest.approx(0.0)

    def test_zigzag_stroke(self):
        result = StrokeRecognizer().recognize_points(ZIGZAG_STROKE)
        assert result.name == "zet"

    def test_shape_from_points_collapses_stroke(self):
        shape = StrokeRecognizer().shape_from_points(VERTICAL_STROKE)
        np.testing.assert_allclose(shape.moves, [[0, 1]])

    def test_idle_trace_rejected(self):
        result = StrokeRecognizer().recognize_points(IDLE_TRACE)
        assert result.failure.reason is RejectReason.EMPTY_QUERY

    def test_too_few_points(self):
        result = StrokeRecognizer().recognize_points([(5, 5)])
        assert not result.ok

    def test_noise_rejected(self):
        result = StrokeRecognizer().recognize_points(noisy_trace())
        assert result.failure.reason is RejectReason.ABOVE_THRESHOLD

    def test_rank_points(self):
        matches = StrokeRecognizer().rank_points(VERTICAL_STROKE)
        assert len(matches) == 103
        assert matches[0].name == "vline"

    def test_callbacks(self):
        recognizer = StrokeRecognizer()
        matched, rejected = [], []
        recognizer.on_match(matched.append)
        recognizer.on_reject(rejected.append)

        recognizer.recognize_points(VERTICAL_STROKE)
        recognizer.recognize_points(IDLE_TRACE)

        assert [m.name for m in matched] == ["vline"]
        assert [f.reason for f in rejected] == [RejectReason.EMPTY_QUERY]


class TestInjection:
    def test_uses_given_database(self):
        db = GestureDatabase()
        db.add_gesture([(1, 0)], "right")
        recognizer = StrokeRecognizer(database=db)
        assert recognizer.database is db
        assert recognizer.recognize_points([(0, 0), (100, 0)]).name == "right"

    def test_empty_database_not_replaced(self):
        db = GestureDatabase()
        recognizer = StrokeRecognizer(database=db)
        assert recognizer.database is db
        result = recognizer.recognize_points(VERTICAL_STROKE)
        assert result.failure.reason is RejectReason.EMPTY_DATABASE

    def test_unseeded_config(self):
        recognizer = StrokeRecognizer(config=RecognizerConfig(seed_defaults=False))
        assert len(recognizer.database) == 0

    def test_config_applied(self):
        config = RecognizerConfig(
            magnitude_threshold=1.0,
            angle_threshold=45.0,
            rejection_threshold=0.5,
            dtw_window=6,
            max_workers=2,
        )
        recognizer = StrokeRecognizer(config=config)
        assert recognizer.signal.magnitude_threshold == 1.0
        assert recognizer.signal.angle_threshold == 45.0
        assert recognizer.database.rejection_threshold == 0.5
        assert recognizer.database.dtw_window == 6
        assert recognizer.database.max_workers == 2


class TestStats:
    def test_counts(self):
        recognizer = StrokeRecognizer()
        recognizer.recognize_points(VERTICAL_STROKE)
        recognizer.recognize_points(IDLE_TRACE)
        stats = recognizer.stats
        assert stats.total_queries == 2
        assert stats.total_matches == 1
        assert stats.total_rejections == 1
        assert stats.exemplars == 103
        assert stats.avg_latency_ms >= 0.0

    def test_profiler_stages(self):
        recognizer = StrokeRecognizer()
        recognizer.recognize_points(VERTICAL_STROKE)
        summary = recognizer.stats.profiler_summary
        assert {"filter", "ranking", "total"} <= set(summary)

    def test_shape_recognition_profiled(self):
        recognizer = StrokeRecognizer()
        shape = recognizer.shape_from_points(VERTICAL_STROKE)
        recognizer.reset()
        recognizer.recognize(shape)
        summary = recognizer.stats.profiler_summary
        assert summary["total"]["calls"] == 1
        assert summary["ranking"]["calls"] == 1
        assert "filter" not in summary

    def test_profiling_disabled(self):
        recognizer = StrokeRecognizer(enable_profiling=False)
        recognizer.recognize_points(VERTICAL_STROKE)
        assert recognizer.stats.profiler_summary == {}

    def test_reset(self):
        recognizer = StrokeRecognizer()
        recognizer.recognize_points(VERTICAL_STROKE)
        recognizer.reset()
        stats = recognizer.stats
        assert stats.total_queries == 0
        assert stats.exemplars == 103

    def test_metrics(self):
        metrics = MetricsCollector()
        recognizer = StrokeRecognizer(metrics=metrics)
        recognizer.recognize_points(VERTICAL_STROKE)
        recognizer.recognize_points(VERTICAL_STROKE)
        recognizer.recognize_points(IDLE_TRACE)
        assert metrics.recognition_counts == {"vline": 2}
        assert metrics.rejection_counts == {"empty_query": 1}
        assert "stroke_engine_exemplars 103" in metrics.render()
