"""
Unicache — Cache Engine Interface

Defines the abstract interface both storage engines implement.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..config.schemas import CacheBackend


class CacheEngine(ABC):
    """
    Abstract base class for storage engines.

    Engines are blocking. The distributed engine adds awaitable variants;
    the local engine has none and is scheduled onto worker threads by the
    facade instead.

    add() is engine specific: the local engine takes minutes or an
    ExpirationPolicy, the distributed engine a timedelta TTL.
    """

    backend: CacheBackend

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """
        Retrieve a value.

        Args:
            key: Cache key

        Returns:
            Stored value if found and not expired, None otherwise
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """
        Check if a key holds a live entry.

        Args:
            key: Cache key to check

        Returns:
            True if key exists and is not expired, False otherwise
        """

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Cache key to delete

        Returns:
            True if key was deleted, False if key didn't exist
        """

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry held by this engine."""
