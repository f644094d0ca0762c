"""Recognizer configuration, loadable from YAML.

Example config.yml:

    magnitude_threshold: 5.0
    angle_threshold: 20.0
    rejection_threshold: 3.0
    dtw_window: null        # null = unconstrained DTW
    max_workers: 4          # parallel ranking; null/0/1 = in-thread
    seed_defaults: true
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger("stroke_engine.config")


@dataclass
class RecognizerConfig:
    """Tunable thresholds for filtering and matching."""
    magnitude_threshold: float = 5.0  # moves this short or shorter are jitter
    angle_threshold: float = 20.0  # degrees; smaller turns continue a stroke
    rejection_threshold: float = 3.0  # best distance above this → no match
    dtw_window: Optional[int] = None
    max_workers: Optional[int] = None
    seed_defaults: bool = True

    def __post_init__(self):
        for name in ("magnitude_threshold", "angle_threshold", "rejection_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
            setattr(self, name, float(value))

        for name in ("dtw_window", "max_workers"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer or null, got {value!r}")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> RecognizerConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(path: str | Path) -> RecognizerConfig:
    """Load a RecognizerConfig from a YAML file. Missing keys keep defaults."""
    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")

    return RecognizerConfig.from_dict(data)


def save_config(config: RecognizerConfig, path: str | Path):
    """Save a RecognizerConfig to YAML."""
    with open(path, "w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
