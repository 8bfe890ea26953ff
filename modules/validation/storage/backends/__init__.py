"""
Cache backends module.

All backends are automatically registered via decorators.
"""

# Import all backends to trigger registration
from modules.validation.storage.backends import memory_backend, null_backend, redis_backend

__all__ = ['memory_backend', 'null_backend', 'redis_backend']
