"""
Unicache — Cache Context

Holds the backend-selection state a facade routes against: the local store,
built once, and the distributed engine, whose connection string can change
at any time.
"""

from __future__ import annotations

from ..config.schemas import CacheBackend, CacheConfig
from .backends.memory import LocalStoreEngine
from .backends.redis import DistributedStoreEngine


class CacheContext:
    """Engines shared by every facade built on this context."""

    def __init__(
        self,
        connection_string: str | None = None,
        max_entries: int = 100_000,
        local: LocalStoreEngine | None = None,
        distributed: DistributedStoreEngine | None = None,
    ) -> None:
        self.local = local if local is not None else LocalStoreEngine(max_entries=max_entries)
        self.distributed = distributed if distributed is not None else DistributedStoreEngine()
        if connection_string:
            self.distributed.set_connection(connection_string)

    @classmethod
    def from_config(cls, config: CacheConfig) -> CacheContext:
        return cls(
            connection_string=config.connection_string,
            max_entries=config.max_entries,
        )

    @property
    def backend(self) -> CacheBackend:
        """Backend serving calls right now. Evaluated on every access."""
        if self.distributed.has_connection_string():
            return CacheBackend.REDIS
        return CacheBackend.MEMORY
