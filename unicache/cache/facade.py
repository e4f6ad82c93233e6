"""
Unicache — Cache Facade

Single entry point over the local and distributed engines.

Every call checks, at call time, whether a Redis connection string is set:
if it is, Redis serves the call; otherwise the local store does, under its
lock. Values are normalized to text on the way in (primitives as their
natural text, everything else as JSON), so get() returns the same text from
either backend and get(key, cls) decodes it the same way.

The *_async local paths run the locked local call on a worker thread
(asyncio.to_thread). They keep the event loop free, they do not make the
local store asynchronous.

Usage:
    cache = Cache()
    cache.add("item", "cachedItem")
    cache.get("item")                     # "cachedItem", local store

    cache.set_connection("localhost:6379")
    await cache.add_async("user:1", user, minutes=5)
    await cache.get_async("user:1", User)  # from redis
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Any, TypeVar

from ..config.schemas import CacheBackend
from ..validation import validate_key, validate_minutes
from .context import CacheContext
from .policy import ExpirationPolicy
from .serialization import decode, to_text

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Cache:
    """
    Unified cache facade.

    Expiration in minutes follows one rule on both backends:
    None -> the facade's default_minutes, 0 -> never expires,
    positive -> absolute expiry that many minutes from now.
    """

    def __init__(
        self,
        context: CacheContext | None = None,
        default_minutes: float = 1.0,
    ) -> None:
        """
        Initialize the facade.

        Args:
            context: Engines to route between (a fresh local-only context if omitted)
            default_minutes: Expiration used when add() gets minutes=None
        """
        self.context = context if context is not None else CacheContext()
        self.default_minutes = validate_minutes(default_minutes) or 0.0

    # ------------ Routing ------------

    def set_connection(self, connection_string: str | None) -> None:
        """Point the facade at Redis; None or "" routes back to the local store."""
        self.context.distributed.set_connection(connection_string)

    def has_connection(self) -> bool:
        return self.context.distributed.has_connection_string()

    @property
    def backend(self) -> CacheBackend:
        return self.context.backend

    def _use_distributed(self, operation: str, key: str | None = None) -> bool:
        distributed = self.context.distributed.has_connection_string()
        logger.debug(
            "Routing %s to %s",
            operation,
            "redis" if distributed else "memory",
            extra={"operation": operation, "key": key},
        )
        return distributed

    def _resolve_minutes(self, minutes: float | None) -> float:
        resolved = validate_minutes(minutes)
        return self.default_minutes if resolved is None else resolved

    @staticmethod
    def _ttl(minutes: float) -> timedelta | None:
        return timedelta(minutes=minutes) if minutes > 0 else None

    # ------------ Local store (always under its lock) ------------

    def _add_local(self, key: str, text: str, policy: ExpirationPolicy) -> None:
        local = self.context.local
        with local.lock:
            local.add(key, text, policy=policy)

    def _get_local(self, key: str) -> str | None:
        local = self.context.local
        with local.lock:
            value = local.get(key)
        # Values put straight into the engine may be native; report them as text
        return None if value is None else to_text(value)

    def _exists_local(self, key: str) -> bool:
        local = self.context.local
        with local.lock:
            return local.exists(key)

    def _remove_local(self, key: str) -> bool:
        local = self.context.local
        with local.lock:
            return local.remove(key)

    def _clear_local(self) -> None:
        local = self.context.local
        with local.lock:
            local.clear()

    # ------------ Blocking API ------------

    def add(
        self,
        key: str,
        value: Any,
        minutes: float | None = None,
        *,
        policy: ExpirationPolicy | None = None,
    ) -> None:
        """
        Insert or overwrite an entry.

        Args:
            key: Cache key
            value: Primitive or JSON-serializable value
            minutes: Expiration in minutes (None = default, 0 = never)
            policy: Custom expiration policy; always stored in the local store

        Raises:
            InvalidKeyError: If key is None or empty
            SerializationError: If value cannot be serialized
            ValueError: If minutes is invalid or both minutes and policy are given
        """
        validate_key(key)
        if policy is not None:
            if minutes is not None:
                raise ValueError("Pass either minutes or policy, not both")
            self._add_local(key, to_text(value), policy)
            return

        resolved = self._resolve_minutes(minutes)
        text = to_text(value)

        if self._use_distributed("add", key):
            self.context.distributed.add(key, text, self._ttl(resolved))
        else:
            self._add_local(key, text, ExpirationPolicy.in_minutes(resolved))

    def update(self, key: str, value: Any) -> None:
        """
        Overwrite a local entry's value, keeping its expiration.

        A key that is not live is inserted without expiration. Always targets
        the local store.
        """
        validate_key(key)
        text = to_text(value)
        local = self.context.local
        with local.lock:
            local.set_item(key, text)

    def get(self, key: str, cls: type[T] | None = None) -> T | str | None:
        """
        Retrieve an entry.

        Args:
            key: Cache key
            cls: Type to decode the stored text into; None returns the raw text

        Returns:
            Stored text or decoded value, None if the key is missing

        Raises:
            InvalidKeyError: If key is None or empty
            SerializationError: If stored text does not fit cls
        """
        validate_key(key)
        if self._use_distributed("get", key):
            text = self.context.distributed.get(key)
        else:
            text = self._get_local(key)

        if cls is None:
            return text
        return decode(text, cls)

    def exists(self, key: str) -> bool:
        validate_key(key)
        if self._use_distributed("exists", key):
            return self.context.distributed.exists(key)
        return self._exists_local(key)

    def remove(self, key: str) -> bool:
        """Delete an entry. Returns True if one existed."""
        validate_key(key)
        if self._use_distributed("remove", key):
            return self.context.distributed.remove(key)
        return self._remove_local(key)

    def clear(self) -> None:
        """
        Remove every entry from the backend currently selected.

        On Redis this is FLUSHALL on every endpoint, not a scoped delete.
        """
        if self._use_distributed("clear"):
            self.context.distributed.clear()
        else:
            self._clear_local()

    def close(self) -> None:
        """Release the blocking Redis client, if one was built."""
        self.context.distributed.close()

    # ------------ Awaitable API ------------

    async def add_async(
        self,
        key: str,
        value: Any,
        minutes: float | None = None,
        *,
        policy: ExpirationPolicy | None = None,
    ) -> None:
        """Awaitable add(); same arguments and errors."""
        validate_key(key)
        if policy is not None:
            if minutes is not None:
                raise ValueError("Pass either minutes or policy, not both")
            await asyncio.to_thread(self._add_local, key, to_text(value), policy)
            return

        resolved = self._resolve_minutes(minutes)
        text = to_text(value)

        if self._use_distributed("add_async", key):
            await self.context.distributed.add_async(key, text, self._ttl(resolved))
        else:
            await asyncio.to_thread(self._add_local, key, text, ExpirationPolicy.in_minutes(resolved))

    async def get_async(self, key: str, cls: type[T] | None = None) -> T | str | None:
        """Awaitable get(); same arguments and errors."""
        validate_key(key)
        if self._use_distributed("get_async", key):
            text = await self.context.distributed.get_async(key)
        else:
            text = await asyncio.to_thread(self._get_local, key)

        if cls is None:
            return text
        return decode(text, cls)

    async def exists_async(self, key: str) -> bool:
        validate_key(key)
        if self._use_distributed("exists_async", key):
            return await self.context.distributed.exists_async(key)
        return await asyncio.to_thread(self._exists_local, key)

    async def remove_async(self, key: str) -> bool:
        validate_key(key)
        if self._use_distributed("remove_async", key):
            return await self.context.distributed.remove_async(key)
        return await asyncio.to_thread(self._remove_local, key)

    async def clear_async(self) -> None:
        if self._use_distributed("clear_async"):
            await self.context.distributed.clear_async()
        else:
            await asyncio.to_thread(self._clear_local)

    async def aclose(self) -> None:
        """Release both Redis clients, if built."""
        await self.context.distributed.aclose()
