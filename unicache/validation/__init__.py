"""
Unicache — Validation Module

Input validation shared by every keyed cache operation.
"""

from .keys import validate_key, validate_minutes

__all__ = [
    "validate_key",
    "validate_minutes",
]
