"""
Student Registry - Cache Factory Integration Tests

Tests for the cache factory that creates and manages cache instances:
backend selection, named singletons, configuration and lifecycle.
"""

import logging
import socket
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest

from student_registry.cache.backends.memory import MemoryCacheBackend
from student_registry.cache.factory import (
    close_all_caches,
    create_cache,
    reset_cache_factory,
)
from student_registry.cache.interface import CacheInterface
from student_registry.config import CacheBackend, CacheConfig
from student_registry.errors import ConfigurationError

# Check if Redis is available
try:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.settimeout(1)
    redis_available = sock.connect_ex(("localhost", 6379)) == 0
    sock.close()
except OSError:
    redis_available = False


class TestCacheFactory:
    """Test suite for cache factory functionality."""

    @pytest.fixture(autouse=True)
    async def cleanup(self) -> AsyncGenerator[None, None]:
        """Clean up cache instances after each test."""
        yield
        await close_all_caches()
        reset_cache_factory()

    async def test_create_memory_cache_from_environment(self, mock_env_memory) -> None:
        """With no REDIS_URL the process-wide cache is in-memory."""
        cache = create_cache()

        assert isinstance(cache, MemoryCacheBackend)
        assert cache.namespace == "test"
        assert cache.max_size == 100

        await cache.set("students:1", {"studentId": 1})
        assert await cache.get("students:1") == {"studentId": 1}

    async def test_create_memory_cache_explicit_config(self) -> None:
        config = CacheConfig(backend=CacheBackend.MEMORY, namespace="test_ns", max_size=50, ttl_seconds=1800)

        cache = create_cache(config=config, name="custom")

        assert isinstance(cache, CacheInterface)
        stats = await cache.get_stats()
        assert stats["namespace"] == "test_ns"
        assert stats["max_size"] == 50

    async def test_same_name_returns_same_instance(self) -> None:
        config = CacheConfig(backend=CacheBackend.MEMORY, namespace="shared")

        first = create_cache(config=config, name="shared")
        second = create_cache(config=CacheConfig(namespace="ignored"), name="shared")

        assert first is second
        assert first.namespace == "shared"

    async def test_different_names_are_isolated(self) -> None:
        config = CacheConfig(backend=CacheBackend.MEMORY, namespace="iso")
        cache_a = create_cache(config=config, name="a")
        cache_b = create_cache(config=config, name="b")

        await cache_a.set("students:all", [1])

        assert cache_a is not cache_b
        assert await cache_b.get("students:all") is None

    async def test_default_uses_loaded_config(self, mock_env_memory) -> None:
        cache = create_cache()

        assert create_cache() is cache
        assert cache.default_ttl == 3600

    async def test_build_logs_student_ttls(self, caplog: pytest.LogCaptureFixture) -> None:
        config = CacheConfig(namespace="logged", collection_ttl_seconds=30, record_ttl_seconds=90)

        with caplog.at_level(logging.INFO, logger="student_registry.cache.factory"):
            create_cache(config=config, name="logged")

        record = next(r for r in caplog.records if r.name == "student_registry.cache.factory")
        assert record.namespace == "logged"
        assert record.collection_ttl == 30
        assert record.record_ttl == 90
        assert "backend=memory" in record.getMessage()

    async def test_close_all_caches_forgets_instances(self) -> None:
        one = create_cache(config=CacheConfig(), name="one")
        await one.set("students:1", {"studentId": 1})

        await close_all_caches()

        rebuilt = create_cache(config=CacheConfig(), name="one")
        assert rebuilt is not one
        assert await rebuilt.get("students:1") is None

    async def test_close_all_caches_survives_failing_close(self) -> None:
        broken = create_cache(config=CacheConfig(), name="broken")
        healthy = create_cache(config=CacheConfig(), name="healthy")
        broken.close = AsyncMock(side_effect=RuntimeError("close failed"))
        healthy.close = AsyncMock()

        await close_all_caches()

        broken.close.assert_awaited_once()
        healthy.close.assert_awaited_once()
        assert create_cache(config=CacheConfig(), name="healthy") is not healthy

    async def test_redis_backend_without_url_rejected(self) -> None:
        config = CacheConfig.model_construct(backend=CacheBackend.REDIS, redis_url=None)

        with pytest.raises(ConfigurationError):
            create_cache(config=config, name="broken")

        # Nothing was registered under the failed name
        assert isinstance(create_cache(config=CacheConfig(), name="broken"), MemoryCacheBackend)

    async def test_redis_backend_built_from_config(self) -> None:
        """Construction is lazy; no server is contacted until the first command."""
        from student_registry.cache.backends.redis import RedisCacheBackend

        config = CacheConfig(
            backend=CacheBackend.REDIS,
            redis_url="redis://localhost:6399/0",
            namespace="lazy",
            ttl_seconds=120,
        )

        cache = create_cache(config=config, name="lazy")

        assert isinstance(cache, RedisCacheBackend)
        assert cache.namespace == "lazy"
        assert cache.default_ttl == 120

    @pytest.mark.skipif(not redis_available, reason="Redis server not available")
    async def test_create_redis_cache_from_environment(self, mock_env_redis) -> None:
        cache = create_cache()

        await cache.set("students:1", {"studentId": 1})
        assert await cache.get("students:1") == {"studentId": 1}

        stats = await cache.get_stats()
        assert stats["backend"] == "redis"
        assert stats["connected"] is True

        await cache.clear()
