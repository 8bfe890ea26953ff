"""No-op cache backend, used when caching is disabled (CACHE_BACKEND=none)."""

import threading
from typing import Any, Dict, Optional

from modules.validation.storage.core.backend import CacheBackend
from modules.validation.storage.core.registry import register_backend


@register_backend("none")
class NullCacheBackend(CacheBackend):
    """
    Stores nothing. Every read is a miss.

    Loop counters are still kept in process so the loop guard stays in
    force when result caching is turned off.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl: int) -> None:
        pass

    def delete(self, key: str) -> None:
        with self._lock:
            self._counters.pop(key, None)

    def incr(self, key: str, ttl: int) -> int:
        with self._lock:
            count = self._counters.get(key, 0) + 1
            self._counters[key] = count
            return count

    def decr(self, key: str) -> int:
        with self._lock:
            count = self._counters.get(key, 0) - 1
            if count <= 0:
                self._counters.pop(key, None)
                return 0
            self._counters[key] = count
            return count
