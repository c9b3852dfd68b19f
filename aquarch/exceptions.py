"""Error types raised by the Aquarch progress engine.

Every outward-facing failure is a ProgressError. The ``category`` attribute
tells callers whether the engine was misconfigured or handed data it cannot
use, so they can alert on the former and log the latter.
"""

from __future__ import annotations

ERROR_CATEGORY_CONFIGURATION = "configuration"
ERROR_CATEGORY_INPUT = "input"


class ProgressError(Exception):
    """Base error for progress calculation failures.

    Attributes:
        category: ERROR_CATEGORY_CONFIGURATION or ERROR_CATEGORY_INPUT
        field: Name of the offending config key or record field, if known
    """

    category: str = ERROR_CATEGORY_INPUT

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize ProgressError.

        Args:
            message: Human-readable description of the failure
            field: Config key or record field that caused the failure
        """
        self.field = field
        super().__init__(message)

    @property
    def is_configuration_error(self) -> bool:
        """Return True when the failure is a configuration problem."""
        return self.category == ERROR_CATEGORY_CONFIGURATION


class ConfigurationError(ProgressError):
    """Raised when weights, thresholds, or level counts are unusable."""

    category = ERROR_CATEGORY_CONFIGURATION


class InvalidInputError(ProgressError):
    """Raised when a session record or snapshot has an unusable shape."""

    category = ERROR_CATEGORY_INPUT
