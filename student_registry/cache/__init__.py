"""
Student Registry - Cache Module

Provides caching functionality with pluggable backends.

- factory.py: Single source of truth for cache creation
- interface.py: Abstract cache interface all backends must implement
- backends/: Cache backend implementations (memory always, redis lazily)

Usage:
    from student_registry.cache import create_cache

    cache = create_cache()
    await cache.set("students:1", {"studentId": 1}, ttl=600)
    value = await cache.get("students:1")
    await cache.remove_by_pattern("students:*")
"""

from .factory import (
    close_all_caches,
    create_cache,
    reset_cache_factory,
)
from .interface import CacheInterface

__all__ = [
    # Factory functions
    "create_cache",
    "close_all_caches",
    "reset_cache_factory",
    # Interface
    "CacheInterface",
]
