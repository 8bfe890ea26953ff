"""
Redis-backed distributed rate limiter.

Drop-in replacement for the in-memory RateLimiter when several workers
share one request budget. Uses a sorted-set sliding window.
"""

import time
from typing import Optional, Tuple

import redis

from src.api.config import RateLimitRule
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


class RedisRateLimiter:
    """
    Distributed rate limiter using Redis sliding window.

    Works across multiple workers and instances.
    Fails open: if Redis cannot be reached the request is allowed.
    """

    def __init__(self, client: Optional[redis.Redis] = None, identifier_prefix: str = "rate_limit"):
        """
        Initialize rate limiter.

        Args:
            client: Redis client (defaults to the shared client)
            identifier_prefix: Redis key prefix for this rate limiter
        """
        self._client = client
        self.identifier_prefix = identifier_prefix

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            from shared.utils.redis_client import get_redis_client
            self._client = get_redis_client()
        return self._client

    def hit(self, key: str, rule: RateLimitRule) -> Tuple[bool, int, int]:
        """
        Record a request and check it against the budget.

        Returns:
            (allowed, remaining, retry_after_seconds)
        """
        try:
            redis_key = f"{self.identifier_prefix}:{key}"
            now = time.time()
            window_start = now - rule.window

            with self.client.pipeline(transaction=True) as pipe:
                # Remove old entries outside current window
                pipe.zremrangebyscore(redis_key, 0, window_start)

                # Count requests in current window
                pipe.zcard(redis_key)

                # Add current request with timestamp as score
                pipe.zadd(redis_key, {str(now): now})

                # Set expiry on the key (cleanup)
                pipe.expire(redis_key, rule.window + 10)

                results = pipe.execute()

            # Count before adding current request
            request_count = int(results[1])

            if request_count >= rule.limit:
                # The rejected request must not consume budget
                self.client.zrem(redis_key, str(now))
                logger.warning(
                    f"Rate limit exceeded for {key}: "
                    f"{request_count}/{rule.limit} requests in {rule.window}s"
                )
                return False, 0, rule.window

            return True, rule.limit - request_count - 1, 0

        except (redis.RedisError, ConnectionError) as e:
            logger.error(f"Rate limiter error: {e}. Allowing request (fail-open).")
            return True, rule.limit, 0
