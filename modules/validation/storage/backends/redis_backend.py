"""
Redis cache backend.

Shares cached results and loop counters between workers. Values are stored
as JSON strings. Every Redis error is re-raised as BackingStoreUnavailable
so the validation service can fail open.
"""

import json
from typing import Any, Dict, Optional

import redis

from modules.validation.core.exceptions import BackingStoreUnavailable
from modules.validation.storage.core.backend import CacheBackend
from modules.validation.storage.core.registry import register_backend
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

# DECR and delete-at-zero in one server-side step
_DECR_SCRIPT = """
local count = redis.call('DECR', KEYS[1])
if count <= 0 then
    redis.call('DEL', KEYS[1])
    return 0
end
return count
"""


@register_backend("redis")
class RedisCacheBackend(CacheBackend):
    """
    Redis-backed cache.

    Config:
        client: a connected ``redis.Redis`` (decode_responses=True).
                If omitted, the shared client from shared.utils.redis_client
                is used.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, client: Optional[redis.Redis] = None):
        super().__init__(config)
        self._shared_client = client is None
        if client is None:
            from shared.utils.redis_client import get_redis_client
            client = get_redis_client()
        self.client = client
        self._decr_script = client.register_script(_DECR_SCRIPT)

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            raise BackingStoreUnavailable(f"GET {key} failed: {e}") from e

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding undecodable cache entry: {key}")
            return None

    def set(self, key: str, value: Any, ttl: int) -> None:
        try:
            self.client.set(key, json.dumps(value), ex=int(ttl))
        except redis.RedisError as e:
            raise BackingStoreUnavailable(f"SET {key} failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise BackingStoreUnavailable(f"DEL {key} failed: {e}") from e

    def incr(self, key: str, ttl: int) -> int:
        try:
            # MULTI/EXEC so the counter never lives without an expiry
            with self.client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, int(ttl))
                count, _ = pipe.execute()
            return int(count)
        except redis.RedisError as e:
            raise BackingStoreUnavailable(f"INCR {key} failed: {e}") from e

    def decr(self, key: str) -> int:
        try:
            return int(self._decr_script(keys=[key]))
        except redis.RedisError as e:
            raise BackingStoreUnavailable(f"DECR {key} failed: {e}") from e

    def health_check(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    def close(self) -> None:
        if self._shared_client:
            from shared.utils.redis_client import close_redis
            close_redis()
