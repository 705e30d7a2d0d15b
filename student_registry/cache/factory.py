"""
Student Registry - Cache Factory

Builds the process-wide cache shared by every StudentService call.

The backend comes from CacheConfig.backend: ``memory`` unless REDIS_URL is set
(see config.loader). Caches are kept by name so the server lifespan, the
stats tools and the service all see the same instance until
``close_all_caches`` runs at shutdown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import CacheBackend, CacheConfig, get_config
from ..errors import ConfigurationError
from .backends.memory import MemoryCacheBackend
from .interface import CacheInterface

logger = logging.getLogger(__name__)

# name -> shared cache
_caches: dict[str, CacheInterface] = {}


def _build_memory(config: CacheConfig) -> CacheInterface:
    return MemoryCacheBackend(
        max_size=config.max_size,
        default_ttl=config.ttl_seconds,
        namespace=config.namespace,
    )


def _build_redis(config: CacheConfig) -> CacheInterface:
    if not config.redis_url:
        raise ConfigurationError(
            "REDIS_URL must be set when CACHE_BACKEND=redis",
            details={"env": "REDIS_URL", "backend": "redis", "namespace": config.namespace},
        )

    # Imported here so memory-only deployments never load the redis client
    from .backends.redis import RedisCacheBackend

    return RedisCacheBackend(
        redis_url=config.redis_url,
        namespace=config.namespace,
        default_ttl=config.ttl_seconds,
        max_connections=config.redis_max_connections,
        socket_timeout=config.redis_socket_timeout,
    )


_BUILDERS: dict[CacheBackend, Callable[[CacheConfig], CacheInterface]] = {
    CacheBackend.MEMORY: _build_memory,
    CacheBackend.REDIS: _build_redis,
}


def create_cache(config: CacheConfig | None = None, name: str = "default") -> CacheInterface:
    """
    Return the cache registered under ``name``, building it on first use.

    Args:
        config: Cache settings; the loaded RegistryConfig.cache when omitted
        name: Registry name. The server uses "default".

    Raises:
        ConfigurationError: If the backend is unknown or Redis has no URL
    """
    cache = _caches.get(name)
    if cache is not None:
        return cache

    if config is None:
        config = get_config().cache

    builder = _BUILDERS.get(config.backend)
    if builder is None:
        raise ConfigurationError(
            f"Unknown cache backend: {config.backend}",
            details={"backend": str(config.backend), "supported": [b.value for b in _BUILDERS]},
        )
    backend = CacheBackend(config.backend)

    cache = builder(config)
    _caches[name] = cache

    logger.info(
        f"Student cache '{name}' ready: backend={backend.value}, namespace={config.namespace}, "
        f"collection_ttl={config.collection_ttl_seconds}s, record_ttl={config.record_ttl_seconds}s",
        extra={
            "cache_name": name,
            "backend": backend.value,
            "namespace": config.namespace,
            "default_ttl": config.ttl_seconds,
            "collection_ttl": config.collection_ttl_seconds,
            "record_ttl": config.record_ttl_seconds,
        },
    )
    return cache


async def close_all_caches() -> None:
    """Close and forget every cache. Called from the server shutdown path."""
    while _caches:
        name, cache = _caches.popitem()
        try:
            await cache.close()
        except Exception as e:
            # One failing backend must not keep the others open
            logger.error(
                f"Error closing student cache '{name}': {e}",
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )
        else:
            logger.info(f"Closed student cache '{name}'", extra={"cache_name": name})


def reset_cache_factory() -> None:
    """Forget every cache without closing it. Test isolation only."""
    _caches.clear()
