"""StrokeEngine - Freehand stroke gesture recognition with DTW matching."""

__version__ = "0.1.0"

from stroke_engine.shapes import Shape, NamedShape, Match
from stroke_engine.dtw import dtw_distance, dtw_distance_banded
from stroke_engine.filters import SignalFilter, filter_accelerations, to_motion_vectors
from stroke_engine.database import (
    GestureDatabase, NoMatchFound, Recognition, RejectReason, shared_database,
)
from stroke_engine.config import RecognizerConfig, load_config, save_config
from stroke_engine.recognizer import StrokeRecognizer, RecognizerStats
from stroke_engine.metrics import MetricsCollector
from stroke_engine.profiler import StageProfiler
