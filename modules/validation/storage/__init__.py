"""
Storage module - result cache and loop-guard counters.

Main components:
- CacheBackend: Base interface for cache backends
- Built-in backends: memory, redis, none
- create_cache_backend: selects a backend from settings

Usage:
    from modules.validation.storage import create_cache_backend

    backend = create_cache_backend()
    backend.set("key", {"valid": True}, ttl=60)
"""

from modules.validation.storage.core.backend import CacheBackend
from modules.validation.storage.core.registry import register_backend, CACHE_BACKENDS
from modules.validation.storage.backends.memory_backend import MemoryCacheBackend
from modules.validation.storage.backends.null_backend import NullCacheBackend
from modules.validation.storage.backends.redis_backend import RedisCacheBackend
from modules.validation.storage.factory import create_cache_backend

__all__ = [
    'CacheBackend',
    'register_backend',
    'CACHE_BACKENDS',
    'MemoryCacheBackend',
    'NullCacheBackend',
    'RedisCacheBackend',
    'create_cache_backend',
]
