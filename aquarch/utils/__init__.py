# File: utils/__init__.py
"""Pure Python utilities for Aquarch.

Submodules:
    - dt_utils: Timestamp parsing, UTC normalization, elapsed-time helpers
    - math_utils: Half-up rounding, safe ratios, percentage calculations

Usage:
    from . import dt_utils
    from .math_utils import round_half_up
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
