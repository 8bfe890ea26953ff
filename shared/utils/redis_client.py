"""
Redis client for distributed caching, loop guarding and rate limiting.

Provides synchronous Redis connection management for multi-worker deployments.
Every socket operation is bounded by a short timeout so callers can fail open.
"""

import threading
from typing import Optional

import redis

from shared.utils.config import settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

# Global Redis client singleton
_redis_client: Optional[redis.Redis] = None
_client_lock = threading.Lock()


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client singleton.

    Returns:
        Redis client instance

    Raises:
        ConnectionError: If Redis cannot be reached

    Example:
        redis_client = get_redis_client()
        redis_client.set("key", "value")
        value = redis_client.get("key")
    """
    global _redis_client

    with _client_lock:
        if _redis_client is None:
            timeout = settings.backing_store_timeout_seconds
            try:
                client = redis.from_url(
                    settings.redis_connection_url,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=50,  # Connection pool size
                    socket_keepalive=True,
                    socket_connect_timeout=timeout,
                    socket_timeout=timeout,
                )

                # Test connection
                client.ping()
                _redis_client = client
                logger.info(f"Redis client connected: {settings.REDIS_HOST}:{settings.REDIS_PORT}")

            except Exception as e:
                logger.error(f"Failed to connect to Redis: {e}")
                raise ConnectionError(f"Redis connection failed: {e}")

    return _redis_client


def close_redis():
    """
    Close Redis connection.

    Should be called on application shutdown.
    """
    global _redis_client

    with _client_lock:
        if _redis_client:
            try:
                _redis_client.close()
                logger.info("Redis connection closed")
            except Exception as e:
                logger.error(f"Error closing Redis connection: {e}")
            finally:
                _redis_client = None

