"""
Unicache — Local Store Engine

In-process cache built on cachetools.TLRUCache, whose per-item time-to-use
callback lets every entry carry its own expiration policy.
Single-process and volatile; thread-safe through one coarse re-entrant lock.
"""

from __future__ import annotations

import logging
import threading
import time
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from cachetools import TLRUCache

from ...config.schemas import CacheBackend
from ...errors import CacheTypeMismatchError
from ..interface import CacheEngine
from ..policy import ExpirationPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


def _instance_check(cls: Any) -> type | tuple[type, ...]:
    """Reduce a type hint to what isinstance() accepts (generics to their origin, unions to their members)."""
    origin = typing.get_origin(cls)
    if origin is typing.Union or origin is types.UnionType:
        return tuple(typing.get_origin(arg) or arg for arg in typing.get_args(cls))
    return origin or cls


@dataclass(frozen=True)
class LocalEntry:
    """A stored value tagged with its runtime type and expiration policy."""

    value: Any
    policy: ExpirationPolicy

    @property
    def value_type(self) -> type:
        return type(self.value)

    def unwrap(self, key: str, cls: type[T] | None = None) -> T | Any:
        """
        Return the value, checking it against the requested type.

        Raises:
            CacheTypeMismatchError: If cls is given and the value is not an instance of it
        """
        if cls is None or cls is Any or self.value is None:
            return self.value
        if not isinstance(self.value, _instance_check(cls)):
            raise CacheTypeMismatchError(key, cls, self.value_type)
        return self.value


class LocalStoreEngine(CacheEngine):
    """
    In-memory engine with policy-driven expiration.

    Features:
    - Absolute and sliding expiration per entry (reads renew sliding entries)
    - Expired entries are dropped by the store itself, never by callers
    - LRU eviction once max_entries live entries are held
    - Checked typed reads via get(key, cls)

    Every method takes `lock`; callers that need several calls to act as one
    (check-then-add) hold `lock` around them, it is re-entrant.
    """

    backend = CacheBackend.MEMORY

    def __init__(
        self,
        max_entries: int = 100_000,
        timer: Callable[[], float] = time.time,
    ):
        """
        Initialize the local store.

        Args:
            max_entries: Maximum number of live entries (LRU eviction when exceeded)
            timer: POSIX-time clock used to evaluate deadlines
        """
        self.max_entries = max_entries
        self.lock = threading.RLock()
        self._store: TLRUCache[str, LocalEntry] = TLRUCache(
            maxsize=max_entries,
            ttu=self._time_to_use,
            timer=timer,
        )

    @staticmethod
    def _time_to_use(key: str, entry: LocalEntry, now: float) -> float:
        return entry.policy.deadline(now)

    def add(
        self,
        key: str,
        value: Any,
        minutes: float = 1,
        policy: ExpirationPolicy | None = None,
    ) -> None:
        """
        Insert or overwrite an entry.

        Args:
            key: Cache key
            value: Value to store, kept as-is
            minutes: Absolute expiration in minutes from now (0 = no expiry)
            policy: Custom expiration policy; takes precedence over minutes
        """
        if policy is None:
            policy = ExpirationPolicy.in_minutes(minutes)
        entry = LocalEntry(value=value, policy=policy)

        with self.lock:
            now = self._store.timer()
            if entry.policy.deadline(now) <= now:
                # The store refuses already-expired items; drop any previous value instead
                self._store.pop(key, None)
                logger.debug("Entry for '%s' expired on insert", key)
                return
            self._store[key] = entry

    def set_item(self, key: str, value: Any) -> None:
        """
        Item-style set: overwrite the value, keeping a live entry's policy.

        A key that is not live is inserted without expiration.
        """
        with self.lock:
            current = self._store.get(key)
            policy = current.policy if current is not None else ExpirationPolicy()
            self._store[key] = LocalEntry(value=value, policy=policy)

    def get(self, key: str, cls: type[T] | None = None) -> T | Any | None:
        """
        Retrieve a value, renewing sliding expiration.

        Args:
            key: Cache key
            cls: Expected type of the stored value

        Returns:
            Stored value, or None if missing or expired

        Raises:
            CacheTypeMismatchError: If the stored value is not a cls
        """
        with self.lock:
            entry = self._store.get(key, _MISSING)
            if entry is _MISSING:
                return None
            if entry.policy.is_sliding:
                # Re-inserting recomputes the deadline from now
                self._store[key] = entry
        return entry.unwrap(key, cls)

    def exists(self, key: str) -> bool:
        with self.lock:
            return key in self._store

    def remove(self, key: str) -> bool:
        with self.lock:
            return self._store.pop(key, _MISSING) is not _MISSING

    def clear(self) -> int:
        """
        Remove entries one by one.

        Returns:
            Number of live entries removed
        """
        with self.lock:
            self._store.expire()
            keys = list(self._store.keys())
            removed = 0
            for key in keys:
                if self._store.pop(key, _MISSING) is not _MISSING:
                    removed += 1
        logger.info(f"Cleared {removed} entries from local cache")
        return removed

    def __len__(self) -> int:
        with self.lock:
            self._store.expire()
            return len(self._store)
