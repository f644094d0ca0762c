"""Prometheus-compatible metrics for StrokeEngine.

Renders the Prometheus text exposition format directly.

Tracked metrics:
- stroke_engine_recognitions_total (counter, by gesture name)
- stroke_engine_rejections_total (counter, by reject reason)
- stroke_engine_recognition_latency_seconds (histogram)
- stroke_engine_exemplars (gauge)
"""

from __future__ import annotations

import threading
import time
from collections import Counter


class _Histogram:
    """Simple histogram with configurable buckets."""

    def __init__(self, buckets: list[float]):
        self.buckets = sorted(buckets)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0
        self._lock = threading.Lock()

    def observe(self, value: float):
        with self._lock:
            self.count += 1
            self.sum += value
            for i, b in enumerate(self.buckets):
                if value <= b:
                    self.bucket_counts[i] += 1
                    break

    def render(self, name: str, help_text: str) -> str:
        lines = [
            f"# HELP {name} {help_text}",
            f"# TYPE {name} histogram",
        ]
        with self._lock:
            cumulative = 0
            for i, b in enumerate(self.buckets):
                cumulative += self.bucket_counts[i]
                lines.append(f'{name}_bucket{{le="{b}"}} {cumulative}')
            lines.append(f'{name}_bucket{{le="+Inf"}} {self.count}')
            lines.append(f"{name}_sum {self.sum:.6f}")
            lines.append(f"{name}_count {self.count}")
        return "\n".join(lines)


class MetricsCollector:
    """Collects recognition outcomes and latencies."""

    def __init__(self):
        self._recognitions: Counter = Counter()
        self._rejections: Counter = Counter()
        self._exemplars = 0
        self._lock = threading.Lock()

        # Latency buckets from 100us to 1s; DTW ranking is quadratic in stroke length
        self._latency = _Histogram(
            [0.0001, 0.0005, 0.001, 0.005, 0.010, 0.050, 0.100, 0.500, 1.0]
        )

        self._start_time = time.time()

    def record_recognition(self, name: str, latency_seconds: float):
        with self._lock:
            self._recognitions[name] += 1
        self._latency.observe(latency_seconds)

    def record_rejection(self, reason: str, latency_seconds: float):
        with self._lock:
            self._rejections[reason] += 1
        self._latency.observe(latency_seconds)

    def set_exemplars(self, count: int):
        self._exemplars = count

    def render(self) -> str:
        """Render all metrics in Prometheus text exposition format."""
        lines: list[str] = []

        uptime = time.time() - self._start_time
        lines.append("# HELP stroke_engine_uptime_seconds Time since collector start")
        lines.append("# TYPE stroke_engine_uptime_seconds gauge")
        lines.append(f"stroke_engine_uptime_seconds {uptime:.1f}")
        lines.append("")

        lines.append("# HELP stroke_engine_recognitions_total Successful recognitions by gesture name")
        lines.append("# TYPE stroke_engine_recognitions_total counter")
        with self._lock:
            for name, count in sorted(self._recognitions.items()):
                lines.append(f'stroke_engine_recognitions_total{{gesture="{name}"}} {count}')
        lines.append("")

        lines.append("# HELP stroke_engine_rejections_total Rejected queries by reason")
        lines.append("# TYPE stroke_engine_rejections_total counter")
        with self._lock:
            for reason, count in sorted(self._rejections.items()):
                lines.append(f'stroke_engine_rejections_total{{reason="{reason}"}} {count}')
        lines.append("")

        lines.append(self._latency.render(
            "stroke_engine_recognition_latency_seconds",
            "Recognition latency in seconds",
        ))
        lines.append("")

        lines.append("# HELP stroke_engine_exemplars Exemplars in the gesture database")
        lines.append("# TYPE stroke_engine_exemplars gauge")
        lines.append(f"stroke_engine_exemplars {self._exemplars}")
        lines.append("")

        return "\n".join(lines) + "\n"

    @property
    def recognition_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._recognitions)

    @property
    def rejection_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._rejections)
