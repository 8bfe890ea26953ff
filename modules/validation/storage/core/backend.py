"""
Base cache backend interface.

Defines the key/value operations the validation service needs from a
backing store: TTL'd values for result caching and atomic counters for the
loop guard. Backends are pluggable (in-process memory, Redis, disabled).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class CacheBackend(ABC):
    """
    Abstract base class for cache backends.

    Values are JSON-compatible objects. Counter operations must be atomic
    with respect to concurrent callers of the same backend.

    Example:
        @register_backend("my_store")
        class MyCacheBackend(CacheBackend):
            def get(self, key):
                ...
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize backend with configuration.

        Args:
            config: Backend configuration dictionary
        """
        self.config = config or {}
        self.backend_name = self.config.get("name", self.__class__.__name__)

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Get a live value.

        Returns:
            Stored value or None if missing/expired

        Raises:
            BackingStoreUnavailable: If the store cannot be reached
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store a value that expires after ``ttl`` seconds."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def incr(self, key: str, ttl: int) -> int:
        """
        Atomically increment a counter and return the new value.

        The counter's expiry is (re)set to ``ttl`` seconds.
        """
        pass

    @abstractmethod
    def decr(self, key: str) -> int:
        """
        Atomically decrement a counter and return the new value.

        The key is removed once the counter reaches zero.
        """
        pass

    def health_check(self) -> bool:
        """
        Check if the backend is reachable.

        Returns:
            True if healthy, False otherwise
        """
        return True

    def close(self) -> None:
        """Release backend resources (optional)."""
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.backend_name}>"
