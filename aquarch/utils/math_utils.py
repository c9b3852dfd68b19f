# File: utils/math_utils.py
"""Math and calculation utilities for Aquarch.

Pure Python math functions shared by the engines.

Scores, percentages, and minutes are reported as integers rounded half-up
(2.5 -> 3), not with Python's round-half-to-even.

Functions:
    - round_half_up: Integer rounding with ties away from zero for positives
    - safe_ratio: Division that returns a default for non-positive denominators
    - calculate_percentage: Progress percentage calculations
    - clamp: Bound a value to a range
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
import math


def round_half_up(value: float) -> int:
    """Round a value to the nearest integer, ties rounding up.

    Args:
        value: Value to round

    Returns:
        Rounded integer

    Examples:
        round_half_up(2.5) → 3
        round_half_up(2.4999) → 2
        round_half_up(89.5) → 90
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value: {value}")
    return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide numerator by denominator, returning default if denominator <= 0.

    Examples:
        safe_ratio(3, 5) → 0.6
        safe_ratio(3, 0) → 0.0
        safe_ratio(3, 0, default=1.0) → 1.0
    """
    if denominator <= 0:
        return default
    return numerator / denominator


def calculate_percentage(current: float, target: float) -> float:
    """Calculate unrounded progress percentage.

    Args:
        current: Current progress value
        target: Target/total value

    Returns:
        Percentage, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 4) → 25.0
        calculate_percentage(5, 0) → 0.0  # Division by zero protection
    """
    return safe_ratio(current, target) * 100


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
        clamp(50, 0, 100) → 50
    """
    return max(min_val, min(value, max_val))
