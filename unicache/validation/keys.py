"""
Unicache — Key and Expiration Validators
"""

import math
from typing import Any

from ..errors import InvalidKeyError


def validate_key(key: Any) -> str:
    """
    Ensure a cache key is a non-empty string.

    Args:
        key: Candidate cache key

    Returns:
        The key, unchanged

    Raises:
        InvalidKeyError: If key is None, not a string, or empty
    """
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(key)
    return key


def validate_minutes(minutes: float | None) -> float | None:
    """
    Ensure an expiration in minutes is a finite, non-negative number.

    None passes through and means "never expires".

    Raises:
        ValueError: If minutes is negative, NaN or infinite
    """
    if minutes is None:
        return None
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        raise ValueError(f"minutes must be a number, got {type(minutes).__name__}")
    if not math.isfinite(minutes) or minutes < 0:
        raise ValueError(f"minutes must be a finite non-negative number, got {minutes}")
    return float(minutes)
