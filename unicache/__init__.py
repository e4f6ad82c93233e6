"""
Unicache — Unified Cache Facade

One key-value API over a process-local store and Redis, routed by whether a
Redis connection string is configured.
"""

__version__ = "1.0.0"

from .cache import (
    Cache,
    CacheContext,
    ExpirationPolicy,
    close_all_caches,
    create_cache,
    get_cache,
)
from .config import CacheBackend
from .errors import (
    CacheError,
    CacheTypeMismatchError,
    ConfigurationError,
    InvalidKeyError,
    NoConnectionConfiguredError,
    SerializationError,
    UnicacheError,
)

__all__ = [
    "Cache",
    "CacheBackend",
    "CacheContext",
    "ExpirationPolicy",
    "create_cache",
    "get_cache",
    "close_all_caches",
    "UnicacheError",
    "ConfigurationError",
    "CacheError",
    "InvalidKeyError",
    "NoConnectionConfiguredError",
    "SerializationError",
    "CacheTypeMismatchError",
]
