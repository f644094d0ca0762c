"""StrokeEngine CLI.

Usage:
    stroke-engine recognize TRACE    Recognize a stroke from a JSON trace file
    stroke-engine rank TRACE         Show the nearest exemplars for a trace
    stroke-engine exemplars          List the built-in gesture labels
    stroke-engine benchmark          Time recognition on synthetic strokes

A trace file holds the captured positions, either as a bare list
([[x, y], ...]) or as {"points": [[x, y], ...]}. A third coordinate is ignored.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

try:
    import typer
except ImportError:
    raise ImportError("typer is required for CLI. Install with: pip install typer")

from stroke_engine.config import RecognizerConfig, load_config
from stroke_engine.recognizer import StrokeRecognizer
from stroke_engine.vectors import as_vectors

app = typer.Typer(
    name="stroke-engine",
    help="Freehand stroke gesture recognition with DTW matching.",
    add_completion=False,
)

logger = logging.getLogger("stroke_engine.cli")


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _build_recognizer(config_path: Optional[str]) -> StrokeRecognizer:
    config = RecognizerConfig()
    if config_path:
        try:
            config = load_config(config_path)
        except (OSError, ValueError) as e:
            typer.echo(f"Invalid config {config_path}: {e}", err=True)
            raise typer.Exit(2)
    return StrokeRecognizer(config=config)


def _read_trace(path: str):
    trace_path = Path(path)
    if not trace_path.exists():
        typer.echo(f"Trace not found: {path}", err=True)
        raise typer.Exit(2)

    try:
        data = json.loads(trace_path.read_text())
    except json.JSONDecodeError as e:
        typer.echo(f"Malformed trace {path}: {e}", err=True)
        raise typer.Exit(2)

    if isinstance(data, dict):
        data = data.get("points")
    if not isinstance(data, list) or not all(
        isinstance(p, (list, tuple)) and len(p) >= 2 for p in data
    ):
        typer.echo(f"Malformed trace {path}: expected a list of [x, y] points", err=True)
        raise typer.Exit(2)

    try:
        points = as_vectors(data)
    except (TypeError, ValueError) as e:
        typer.echo(f"Malformed trace {path}: {e}", err=True)
        raise typer.Exit(2)

    logger.debug("Loaded %d points from %s", len(points), path)
    return points


@app.command()
def recognize(
    trace: str = typer.Argument(..., help="Path to a JSON trace file"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to recognizer YAML config"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Recognize a single finished stroke."""
    _setup_logging(log_level)
    recognizer = _build_recognizer(config)
    points = _read_trace(trace)

    result = recognizer.recognize_points(points)
    if not result.ok:
        typer.echo(f"No match ({result.failure.reason.value})")
        raise typer.Exit(1)

    typer.echo(f"{result.name} (distance: {result.distance:.3f})")


@app.command()
def rank(
    trace: str = typer.Argument(..., help="Path to a JSON trace file"),
    top: int = typer.Option(5, help="Number of exemplars to show"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to recognizer YAML config"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Show the nearest exemplars for a stroke."""
    _setup_logging(log_level)
    recognizer = _build_recognizer(config)
    points = _read_trace(trace)

    shape = recognizer.shape_from_points(points)
    typer.echo(f"Shape: {len(shape)} move(s)")
    matches = recognizer.database.rank_matches(shape)
    threshold = recognizer.database.rejection_threshold
    for i, match in enumerate(matches[:top], start=1):
        marker = "" if match.distance <= threshold else "  (rejected)"
        typer.echo(f"{i:3d}. {match.name:10s} {match.distance:8.3f}{marker}")


@app.command()
def exemplars(
    config: Optional[str] = typer.Option(None, "--config", help="Path to recognizer YAML config"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """List the gesture labels and their exemplar counts."""
    _setup_logging(log_level)
    recognizer = _build_recognizer(config)
    counts = recognizer.database.counts()
    for name in recognizer.database.names:
        typer.echo(f"{name:10s} {counts[name]}")
    typer.echo(f"{'total':10s} {len(recognizer.database)}")


@app.command()
def benchmark(
    iterations: int = typer.Option(100, help="Number of strokes to recognize"),
    length: int = typer.Option(8, help="Moves per synthetic stroke"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to recognizer YAML config"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Run recognition on synthetic random strokes and report timings."""
    import numpy as np

    _setup_logging(log_level)
    recognizer = _build_recognizer(config)
    rng = np.random.default_rng(42)

    typer.echo(
        f"Running benchmark: {iterations} strokes of {length} moves "
        f"against {len(recognizer.database)} exemplars"
    )

    times = []
    for _ in range(iterations):
        steps = rng.normal(scale=40.0, size=(length, 2))
        points = np.vstack([[0.0, 0.0], np.cumsum(steps, axis=0)])
        t0 = time.perf_counter()
        recognizer.recognize_points(points)
        times.append(time.perf_counter() - t0)

    avg_ms = sum(times) / len(times) * 1000 if times else 0.0
    p95_ms = sorted(times)[int(len(times) * 0.95)] * 1000 if times else 0.0
    stats = recognizer.stats

    typer.echo("\nResults:")
    typer.echo(f"   Average latency: {avg_ms:.2f} ms")
    typer.echo(f"   P95 latency:     {p95_ms:.2f} ms")
    typer.echo(f"   Matched:         {stats.total_matches}/{stats.total_queries}")

    typer.echo("\nStage breakdown:")
    for name, stage in stats.profiler_summary.items():
        typer.echo(f"   {name:10s} avg={stage['avg_ms']:.3f}ms  p95={stage['p95_ms']:.3f}ms")


def main():
    app()


if __name__ == "__main__":
    main()
