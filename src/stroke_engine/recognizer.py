"""End-to-end stroke recognition: raw trace → filtering → shape → database."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional

from stroke_engine.config import RecognizerConfig
from stroke_engine.database import GestureDatabase, NoMatchFound, Recognition
from stroke_engine.filters import SignalFilter
from stroke_engine.metrics import MetricsCollector
from stroke_engine.profiler import StageProfiler
from stroke_engine.shapes import Match, Shape


@dataclass
class RecognizerStats:
    """Runtime statistics."""
    total_queries: int
    total_matches: int
    total_rejections: int
    avg_latency_ms: float
    exemplars: int
    profiler_summary: dict = field(default_factory=dict)


class StrokeRecognizer:
    """Recognizes finished strokes against a gesture database.

    The database is passed in by the owner; when omitted, a new one is built
    from the config (seeded with the built-in exemplars unless
    config.seed_defaults is false). One recognizer may serve several
    threads; counters and callback lists are lock-guarded.

    Usage:
        recognizer = StrokeRecognizer()
        recognizer.on_match(lambda m: print(m.name, m.distance))
        result = recognizer.recognize_points(captured_points)
    """

    def __init__(
        self,
        database: Optional[GestureDatabase] = None,
        config: Optional[RecognizerConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        enable_profiling: bool = True,
    ):
        self.config = config or RecognizerConfig()
        if database is None:
            database = self._build_database(self.config)
        self.database = database
        self.signal = SignalFilter(
            magnitude_threshold=self.config.magnitude_threshold,
            angle_threshold=self.config.angle_threshold,
        )
        self.metrics = metrics
        self.profiler = StageProfiler()
        self.profiler.enabled = enable_profiling

        self._match_callbacks: list[Callable[[Match], None]] = []
        self._reject_callbacks: list[Callable[[NoMatchFound], None]] = []
        self._latencies: deque = deque(maxlen=120)
        self._total_queries = 0
        self._total_matches = 0
        self._total_rejections = 0
        self._lock = threading.Lock()

    @staticmethod
    def _build_database(config: RecognizerConfig) -> GestureDatabase:
        kwargs = dict(
            rejection_threshold=config.rejection_threshold,
            dtw_window=config.dtw_window,
            max_workers=config.max_workers,
        )
        if config.seed_defaults:
            return GestureDatabase.with_defaults(**kwargs)
        return GestureDatabase(**kwargs)

    def on_match(self, callback: Callable[[Match], None]):
        """Register a callback for successful recognitions."""
        with self._lock:
            self._match_callbacks.append(callback)

    def on_reject(self, callback: Callable[[NoMatchFound], None]):
        """Register a callback for rejected queries."""
        with self._lock:
            self._reject_callbacks.append(callback)

    def shape_from_points(self, points) -> Shape:
        with self.profiler.stage("filter"):
            return self.signal.shape_from_points(points)

    def rank_points(self, points) -> list[Match]:
        """Rank every exemplar against a raw trace, closest first."""
        shape = self.shape_from_points(points)
        with self.profiler.stage("ranking"):
            return self.database.rank_matches(shape)

    def recognize_points(self, points) -> Recognition:
        """Filter a raw trace into a shape and recognize it."""
        started = time.perf_counter()
        shape = self.shape_from_points(points)
        return self._classify(shape, started)

    def recognize(self, shape: Shape) -> Recognition:
        """Recognize an already built shape."""
        return self._classify(shape, time.perf_counter())

    def _classify(self, shape: Shape, started: float) -> Recognition:
        t0 = time.perf_counter()
        result = self.database.recognize(shape)
        done = time.perf_counter()
        self.profiler.record("ranking", done - t0)
        self.profiler.record("total", done - started)
        latency = done - started

        with self._lock:
            self._total_queries += 1
            self._latencies.append(latency)
            if result.ok:
                self._total_matches += 1
                callbacks = tuple(self._match_callbacks)
            else:
                self._total_rejections += 1
                callbacks = tuple(self._reject_callbacks)

        if self.metrics is not None:
            if result.ok:
                self.metrics.record_recognition(result.name, latency)
            else:
                self.metrics.record_rejection(result.failure.reason.value, latency)
            self.metrics.set_exemplars(len(self.database))

        payload = result.match if result.ok else result.failure
        for cb in callbacks:
            cb(payload)

        return result

    @property
    def stats(self) -> RecognizerStats:
        with self._lock:
            latencies = list(self._latencies)
            queries = self._total_queries
            matches = self._total_matches
            rejections = self._total_rejections

        avg_latency = sum(latencies) / len(latencies) if latencies else 0.0

        return RecognizerStats(
            total_queries=queries,
            total_matches=matches,
            total_rejections=rejections,
            avg_latency_ms=avg_latency * 1000,
            exemplars=len(self.database),
            profiler_summary=self.profiler.summary(),
        )

    def reset(self):
        """Clear statistics (the database is left untouched)."""
        with self._lock:
            self._latencies.clear()
            self._total_queries = 0
            self._total_matches = 0
            self._total_rejections = 0
        self.profiler.reset()
