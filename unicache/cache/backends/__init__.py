"""
Unicache — Storage Engines

Local (cachetools) and distributed (Redis) engines behind the facade.
"""

from .memory import LocalEntry, LocalStoreEngine
from .redis import DistributedStoreEngine, RedisConnection

__all__ = [
    "LocalEntry",
    "LocalStoreEngine",
    "DistributedStoreEngine",
    "RedisConnection",
]
