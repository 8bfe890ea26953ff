"""
Cache storage core module.

Contains the backend interface and the backend registry.
"""

from modules.validation.storage.core.backend import CacheBackend
from modules.validation.storage.core.registry import CACHE_BACKENDS, backend_class, register_backend

__all__ = [
    'CacheBackend',
    'CACHE_BACKENDS',
    'backend_class',
    'register_backend',
]
