"""Rolling latency figures for the recognition stages.

The recognizer reports three stages per query: "filter" (trace → shape),
"ranking" (DTW against every exemplar, plus rejection) and "total".
"""

from __future__ import annotations

import threading
import time
from collections import Counter, deque
from contextlib import contextmanager
from typing import Iterator

import numpy as np


class StageProfiler:
    """Keeps the most recent durations of each recognition stage.

    Stages are created on first use. A timed block that raises is still
    recorded. Safe to share between threads recognizing concurrently.
    """

    def __init__(self, window_size: int = 120):
        self.enabled = True
        self._window_size = window_size
        self._samples: dict[str, deque] = {}
        self._calls: Counter = Counter()
        self._lock = threading.Lock()

    def record(self, name: str, seconds: float):
        """Add one duration for a stage."""
        if not self.enabled:
            return
        with self._lock:
            samples = self._samples.get(name)
            if samples is None:
                samples = self._samples[name] = deque(maxlen=self._window_size)
            samples.append(seconds)
            self._calls[name] += 1

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, time.perf_counter() - t0)

    def summary(self) -> dict[str, dict]:
        """Per-stage milliseconds over the recent window, in first-use order."""
        with self._lock:
            windows = {name: np.array(s) * 1000.0 for name, s in self._samples.items() if s}
            calls = dict(self._calls)

        return {
            name: {
                "avg_ms": round(float(ms.mean()), 3),
                "p95_ms": round(float(np.percentile(ms, 95)), 3),
                "max_ms": round(float(ms.max()), 3),
                "calls": calls[name],
            }
            for name, ms in windows.items()
        }

    def reset(self):
        with self._lock:
            self._samples.clear()
            self._calls.clear()
