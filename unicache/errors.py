"""
Unicache — Core Error Types

Defines the exception hierarchy for the unified cache facade.
All exceptions inherit from UnicacheError for consistent error handling.

Backend-native failures (e.g. redis.exceptions.ConnectionError) are NOT part of
this hierarchy; they propagate to callers unchanged.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes attached to cache errors.

    Used for structured error handling and caller-side recovery decisions.
    """

    # Input validation errors
    INVALID_KEY = "INVALID_KEY"
    INVALID_PARAMETER_VALUE = "INVALID_PARAMETER_VALUE"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    NO_CONNECTION = "NO_CONNECTION"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"
    TYPE_MISMATCH = "TYPE_MISMATCH"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class UnicacheError(Exception):
    """Base exception for all Unicache errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured logging or responses."""
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(UnicacheError):
    """Raised when configuration or a connection string is invalid."""

    error_code = ErrorCode.CONFIGURATION_ERROR


class CacheError(UnicacheError):
    """Base exception for cache-related errors."""

    error_code = ErrorCode.CACHE_FAILURE


class InvalidKeyError(CacheError):
    """Raised when a cache key is None or empty."""

    error_code = ErrorCode.INVALID_KEY

    def __init__(self, key: Any = None, details: dict[str, Any] | None = None):
        message = "The key is null or empty"
        error_details = {"key": key}
        error_details.update(details or {})
        super().__init__(message, error_details)
        self.key = key


class NoConnectionConfiguredError(CacheError):
    """Raised when a distributed operation runs before a connection string is set."""

    error_code = ErrorCode.NO_CONNECTION

    def __init__(self, operation: str | None = None):
        message = "The redis connection is null or empty"
        details: dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
        self.operation = operation


class SerializationError(CacheError):
    """Raised when a value cannot be encoded, or decoded into the requested type."""

    error_code = ErrorCode.SERIALIZATION_FAILURE


class CacheTypeMismatchError(CacheError):
    """Raised when a stored local value is not an instance of the requested type."""

    error_code = ErrorCode.TYPE_MISMATCH

    def __init__(self, key: str, expected: Any, actual: type):
        # Unions and other hints have no __name__
        expected_name = getattr(expected, "__name__", None) or repr(expected)
        message = f"Cached value for '{key}' is {actual.__name__}, not {expected_name}"
        super().__init__(
            message,
            {"key": key, "expected": expected_name, "actual": actual.__name__},
        )
        self.key = key
        self.expected = expected
        self.actual = actual


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract the appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        ErrorCode for Unicache errors, INTERNAL_ERROR for anything else
    """
    if isinstance(error, UnicacheError):
        return error.error_code

    if isinstance(error, ValueError):
        return ErrorCode.INVALID_PARAMETER_VALUE

    return ErrorCode.INTERNAL_ERROR
