"""
Student Registry - Cache Interface

Defines the abstract interface that all cache backends must implement.
"""

from abc import ABC, abstractmethod
from typing import Any


class CacheInterface(ABC):
    """
    Abstract base class for cache backends.

    All cache implementations must implement this interface so the record
    service can use any backend without knowing which one is active.

    Absence is a normal outcome: ``get`` returns None for missing, expired
    or undecodable entries and ``remove`` on a missing key is a no-op.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key

        Returns:
            Cached value if found, unexpired and decodable, None otherwise
        """
        pass

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        ttl: float | None = None,
    ) -> bool:
        """
        Store a value in the cache, overwriting any existing entry.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time-to-live in seconds (None = use default, 0 = no expiry, negative rejected)

        Returns:
            True if stored successfully

        Raises:
            CacheOperationError: If the value cannot be serialized
            ValueError: If ttl is negative
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """
        Remove a key from the cache.

        Args:
            key: Cache key to remove

        Returns:
            True if the key was removed, False if it didn't exist
        """
        pass

    @abstractmethod
    async def remove_by_pattern(self, pattern: str) -> int:
        """
        Remove every key matching a shell-style glob, case-insensitively.

        Args:
            pattern: Glob pattern such as ``"students:*"``

        Returns:
            Number of keys removed
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check if a key exists in the cache.

        Args:
            key: Cache key to check

        Returns:
            True if key exists and is not expired, False otherwise
        """
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """
        Clear all entries in this cache's namespace.

        Returns:
            True if cache was cleared successfully
        """
        pass

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, size, etc.)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close the cache backend and release resources.

        Should be called during graceful shutdown.
        """
        pass
