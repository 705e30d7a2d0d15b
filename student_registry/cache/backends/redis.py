"""
Student Registry - Redis Cache Backend

Asynchronous Redis cache implementation with:
- JSON serialization for values
- Per-key TTL (millisecond precision via PX)
- Namespace prefixing for safe shared usage
- Case-insensitive pattern removal using SCAN MATCH

Connectivity failures are not masked: every Redis client error is raised as
CacheUnavailableError so the caller decides how to degrade. Only payloads that
fail to decode are reported as a miss.

Requires: redis>=5.0 with asyncio support

Example:
    cache = RedisCacheBackend(redis_url="redis://localhost:6379", namespace="registry", default_ttl=600)
    await cache.set("students:1", {"studentId": 1}, ttl=60)
    val = await cache.get("students:1")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...errors import CacheUnavailableError
from ..interface import CacheInterface
from ..serialization import UNDECODABLE, from_json, to_json

logger = logging.getLogger(__name__)

# Errors raised by the client when the server cannot be reached or answers badly
_BACKEND_ERRORS = (RedisError, OSError, asyncio.TimeoutError)

_DELETE_BATCH_SIZE = 500


def _is_letter(ch: str) -> bool:
    return ch.lower() != ch.upper()


def _fold_class(body: str) -> str:
    """Add the other case of every letter and letter range inside ``[...]``."""
    out: list[str] = []
    i = 0
    if body.startswith("^"):
        out.append("^")
        i = 1

    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            out.append(body[i : i + 2])
            i += 2
        elif i + 2 < len(body) and body[i + 1] == "-":
            end = body[i + 2]
            out.append(f"{ch}-{end}")
            if _is_letter(ch) and _is_letter(end) and ch.islower() == end.islower():
                out.append(f"{ch.swapcase()}-{end.swapcase()}")
            i += 3
        elif _is_letter(ch):
            out.append(f"{ch.lower()}{ch.upper()}")
            i += 1
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def case_insensitive_glob(pattern: str) -> str:
    """
    Rewrite a Redis glob so letters match in either case.

    ``students:*`` becomes ``[sS][tT]...:*`` and ``[a-c]`` becomes ``[a-cA-C]``.
    Escaped characters are passed through unchanged, as is an unterminated ``[``.
    """
    out: list[str] = []
    i = 0

    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(pattern[i : i + 2])
            i += 2
        elif ch == "[":
            end = i + 1
            while end < len(pattern) and pattern[end] != "]":
                end += 2 if pattern[end] == "\\" else 1
            if end >= len(pattern):
                out.append(pattern[i:])
                break
            out.append(f"[{_fold_class(pattern[i + 1 : end])}]")
            i = end + 1
        elif _is_letter(ch):
            out.append(f"[{ch.lower()}{ch.upper()}]")
            i += 1
        else:
            out.append(ch)
            i += 1

    return "".join(out)


class RedisCacheBackend(CacheInterface):
    """
    Redis cache backend with JSON serialization and TTL.

    Notes:
    - Keys are prefixed with the configured namespace to avoid collisions.
    - Values are stored as UTF-8 JSON strings with no envelope.
    - TTL is applied via PX milliseconds (None -> default_ttl, 0 -> no expiry).
    - Redis is authoritative for its own keyspace, so no local key tracking is kept.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        namespace: str = "registry",
        default_ttl: float = 600,
        max_connections: int = 10,
        socket_timeout: int = 5,
        client: Redis | None = None,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis_url: Connection URL, e.g., redis://localhost:6379/0 or rediss:// for TLS
            namespace: Prefix for all keys
            default_ttl: Default TTL in seconds (0 => no expiry)
            max_connections: Connection pool size
            socket_timeout: Socket and connect timeout in seconds
            client: Pre-built client (takes precedence over redis_url)
        """
        if client is None and not redis_url:
            raise ValueError("redis_url is required")

        self.namespace = namespace.strip() or "registry"
        self.default_ttl = max(0.0, float(default_ttl))
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        if client is not None:
            self._client = client
        else:
            # Lazy connection; connects on first command
            self._client = Redis.from_url(  # type: ignore[call-overload]
                url=redis_url,
                decode_responses=True,
                max_connections=max_connections,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_timeout,
            )

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}"

    def _ttl_milliseconds(self, ttl: float | None) -> int | None:
        """
        Normalize TTL:
        - None -> default_ttl
        - 0 -> no expiry (return None)
        - negative -> ValueError
        - positive -> milliseconds, at least 1
        """
        if ttl is None:
            ttl = self.default_ttl
        if ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {ttl}")
        if ttl == 0:
            return None
        return max(1, int(ttl * 1000))

    def _unavailable(self, operation: str, key: str, error: BaseException) -> CacheUnavailableError:
        logger.warning(
            f"Redis {operation} failed for '{key}': {error}",
            extra={"key": key, "namespace": self.namespace, "operation": operation, "error": str(error)},
        )
        return CacheUnavailableError(
            "redis",
            operation,
            details={"key": key, "error": str(error), "error_type": type(error).__name__},
        )

    # ------------ Core Interface ------------

    async def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        try:
            data = await self._client.get(self._make_key(key))
        except _BACKEND_ERRORS as e:
            raise self._unavailable("get", key, e) from e

        if data is None:
            self._misses += 1
            return None

        value = from_json(key, data)
        if value is UNDECODABLE:
            self._misses += 1
            return None

        self._hits += 1
        return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Store a value with optional TTL."""
        payload = to_json(key, value)
        px = self._ttl_milliseconds(ttl)

        try:
            res = await self._client.set(name=self._make_key(key), value=payload, px=px)
        except _BACKEND_ERRORS as e:
            raise self._unavailable("set", key, e) from e

        # redis-py returns True or 'OK' depending on decode_responses
        success = bool(res)
        if success:
            self._sets += 1
        return success

    async def remove(self, key: str) -> bool:
        """Remove a single key."""
        try:
            deleted = await self._client.delete(self._make_key(key))
        except _BACKEND_ERRORS as e:
            raise self._unavailable("remove", key, e) from e

        if deleted:
            self._deletes += 1
        return bool(deleted)

    async def _delete_matching(self, match: str, operation: str) -> int:
        """SCAN for keys matching a raw Redis glob and DEL them in batches."""
        total_deleted = 0
        batch: list[str] = []

        try:
            async for found in self._client.scan_iter(match=match, count=_DELETE_BATCH_SIZE):
                batch.append(found)
                if len(batch) >= _DELETE_BATCH_SIZE:
                    total_deleted += int(await self._client.delete(*batch))
                    batch = []
            if batch:
                total_deleted += int(await self._client.delete(*batch))
        except _BACKEND_ERRORS as e:
            raise self._unavailable(operation, match, e) from e

        self._deletes += total_deleted
        return total_deleted

    async def remove_by_pattern(self, pattern: str) -> int:
        """Remove every key matching a glob pattern, ignoring case."""
        if not pattern:
            return 0

        match = case_insensitive_glob(self._make_key(pattern))
        removed = await self._delete_matching(match, "remove_by_pattern")
        if removed:
            logger.debug(
                f"Removed {removed} key(s) matching '{pattern}' from Redis",
                extra={"pattern": pattern, "namespace": self.namespace, "removed": removed},
            )
        return removed

    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        try:
            return bool(await self._client.exists(self._make_key(key)))
        except _BACKEND_ERRORS as e:
            raise self._unavailable("exists", key, e) from e

    async def clear(self) -> bool:
        """Clear all entries under the namespace."""
        total_deleted = await self._delete_matching(f"{self.namespace}:*", "clear")
        logger.info(f"Cleared {total_deleted} keys from namespace '{self.namespace}'")
        return True

    async def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and basic Redis info."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": "redis",
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": False,
        }

        try:
            stats["connected"] = bool(await self._client.ping())
            info = await self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
        except _BACKEND_ERRORS as e:
            # Stats are diagnostic; report the outage instead of failing
            logger.warning(f"Failed to get Redis INFO (restricted or unavailable): {e}", extra={"error": str(e)})

        return stats

    async def close(self) -> None:
        """Close the Redis client and release resources."""
        try:
            await self._client.aclose()
            logger.info(f"Closed Redis cache backend for namespace '{self.namespace}'")
        except _BACKEND_ERRORS as e:
            logger.error(
                f"Error closing Redis client: {e}", extra={"namespace": self.namespace, "error": str(e)}, exc_info=True
            )
