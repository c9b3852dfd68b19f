"""Test helpers for Aquarch tests.

This module re-exports the record builders for convenient imports:

    from tests.helpers import (
        NOW,
        make_session,
        make_progress,
        make_snapshot,
        make_definition,
    )

See builders.py for full documentation.
"""

from tests.helpers.builders import (
    NOW,
    REACHABLE_MINIMUM_LEVELS,
    make_attempt,
    make_definition,
    make_progress,
    make_session,
    make_snapshot,
)

__all__ = [
    "NOW",
    "REACHABLE_MINIMUM_LEVELS",
    "make_attempt",
    "make_definition",
    "make_progress",
    "make_session",
    "make_snapshot",
]
