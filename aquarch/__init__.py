"""Aquarch progress and certification engine.

Turns a learner's game session history into per-game progress, a weighted
overall completion, a certification status, newly earned achievements, and
recommendations. All computation is in-process and side-effect free; the
caller owns persistence.

Typical use:
    tracker = ProgressTracker(ProgressConfig.from_yaml("progress.yaml"))
    result = tracker.calculate_progress(sessions, previous_snapshot)
"""

from __future__ import annotations

from .config import ProgressConfig, default_achievement_definitions
from .exceptions import ConfigurationError, InvalidInputError, ProgressError
from .tracker import ProgressTracker

__all__ = [
    "ConfigurationError",
    "InvalidInputError",
    "ProgressConfig",
    "ProgressError",
    "ProgressTracker",
    "default_achievement_definitions",
]
