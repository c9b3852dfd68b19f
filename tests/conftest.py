"""Shared fixtures for Aquarch tests."""

from __future__ import annotations

import pytest

from aquarch import ProgressConfig, ProgressTracker
from tests.helpers import REACHABLE_MINIMUM_LEVELS


@pytest.fixture
def default_config() -> ProgressConfig:
    """Return a configuration built entirely from defaults."""
    return ProgressConfig()


@pytest.fixture
def reachable_config() -> ProgressConfig:
    """Return a configuration whose minimum levels can all be completed."""
    return ProgressConfig(minimum_levels=dict(REACHABLE_MINIMUM_LEVELS))


@pytest.fixture
def tracker() -> ProgressTracker:
    """Return a tracker with the default configuration."""
    return ProgressTracker()


@pytest.fixture
def reachable_tracker(reachable_config: ProgressConfig) -> ProgressTracker:
    """Return a tracker whose certification gate can be passed."""
    return ProgressTracker(reachable_config)
