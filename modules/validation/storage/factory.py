"""
Cache backend factory.

Selects the backend named by the CACHE_BACKEND setting.
"""

from modules.validation.storage.backends.memory_backend import MemoryCacheBackend
from modules.validation.storage.core.backend import CacheBackend
from modules.validation.storage.core.registry import backend_class
from shared.utils.config import Settings, settings as default_settings
from shared.utils.logger import setup_logger

# Import backends to trigger registration
import modules.validation.storage.backends  # noqa: F401

logger = setup_logger(__name__)


def create_cache_backend(settings: Settings = None) -> CacheBackend:
    """
    Build the configured cache backend.

    A Redis backend that cannot connect at startup is replaced by the
    in-memory backend so the service still starts.

    Args:
        settings: Settings instance (defaults to the global settings)

    Returns:
        CacheBackend instance

    Raises:
        ValueError: If CACHE_BACKEND names no registered backend
    """
    settings = settings or default_settings
    name = settings.CACHE_BACKEND

    backend_cls = backend_class(name)
    config = {"name": name, "max_entries": settings.CACHE_MAX_ENTRIES}

    try:
        backend = backend_cls(config)
    except ConnectionError as e:
        logger.error(f"Cache backend '{name}' unavailable, falling back to memory: {e}")
        return MemoryCacheBackend({"name": "memory", "max_entries": settings.CACHE_MAX_ENTRIES})

    logger.info(f"Cache backend initialized: {name}")
    return backend
