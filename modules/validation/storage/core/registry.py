"""
Cache backend registry.

Maps CACHE_BACKEND names to backend classes.
"""

from typing import Dict, Type

from modules.validation.storage.core.backend import CacheBackend

CACHE_BACKENDS: Dict[str, Type[CacheBackend]] = {}


def register_backend(name: str):
    """
    Class decorator registering a cache backend under ``name``.

    Raises:
        ValueError: If another class already holds the name
    """
    def decorator(cls: Type[CacheBackend]):
        existing = CACHE_BACKENDS.get(name)
        if existing is not None and existing is not cls:
            raise ValueError(f"Cache backend '{name}' is already registered to {existing.__name__}")
        CACHE_BACKENDS[name] = cls
        return cls

    return decorator


def backend_class(name: str) -> Type[CacheBackend]:
    """
    Backend class registered under ``name``.

    Raises:
        ValueError: If no backend is registered under the name
    """
    try:
        return CACHE_BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown cache backend '{name}'. Available: {', '.join(sorted(CACHE_BACKENDS))}"
        ) from None
