"""
Unicache — Cache Module

Unified cache facade over a local in-process store and Redis.

Canonical exports:
- facade.py: Cache, the single entry point
- context.py: CacheContext, the engines a facade routes between
- factory.py: named facades built from configuration
- policy.py: ExpirationPolicy for local entries
- serialization.py: text payload encoding/decoding

Usage:
    from unicache.cache import create_cache

    cache = create_cache()
    cache.add("key", {"a": 1}, minutes=5)
    value = cache.get("key", dict)
"""

from .context import CacheContext
from .facade import Cache
from .factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import CacheEngine
from .policy import ExpirationPolicy

__all__ = [
    # Facade
    "Cache",
    "CacheContext",
    "ExpirationPolicy",
    # Factory functions
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface
    "CacheEngine",
]
