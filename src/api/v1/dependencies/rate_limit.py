"""
Rate limiting dependency.

Per-client request budgets for the validator API. Clients are identified
by API key when one is sent, otherwise by IP address. Budgets come from
APISettings (default, per-user and per-endpoint overrides).
"""

from fastapi import Request
from typing import Dict, Tuple
import threading
import time
from collections import defaultdict, deque

from modules.validation.core.exceptions import RateLimitExceeded
from src.api.config import APISettings, RateLimitRule
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


class RateLimiter:
    """
    Simple in-memory rate limiter.

    Uses sliding window algorithm to track requests.
    Use RedisRateLimiter when several workers share the budget.
    """

    def __init__(self):
        """Initialize rate limiter with request tracking."""
        # Format: {key: deque([timestamp1, timestamp2, ...])}
        self.requests: Dict[str, deque] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str, rule: RateLimitRule) -> Tuple[bool, int, int]:
        """
        Record a request and check it against the budget.

        Args:
            key: Client (and optionally endpoint) identifier
            rule: Budget to enforce

        Returns:
            (allowed, remaining, retry_after_seconds)
        """
        current_time = time.time()
        window_start = current_time - rule.window

        with self._lock:
            client_requests = self.requests[key]

            # Remove requests outside the current window
            while client_requests and client_requests[0] <= window_start:
                client_requests.popleft()

            if len(client_requests) >= rule.limit:
                retry_after = int(client_requests[0] + rule.window - current_time) + 1
                logger.warning(
                    f"Rate limit exceeded for {key}: "
                    f"{len(client_requests)} requests in {rule.window}s window"
                )
                return False, 0, max(1, retry_after)

            client_requests.append(current_time)
            return True, rule.limit - len(client_requests), 0

    def reset(self) -> None:
        with self._lock:
            self.requests.clear()


def client_identifier(request: Request, settings: APISettings) -> str:
    """API key if present, otherwise client IP."""
    api_key = request.headers.get(settings.API_KEY_HEADER)
    if api_key:
        return f"user:{api_key}"
    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"


def check_rate_limit(request: Request) -> None:
    """
    Dependency to check rate limit for incoming requests.

    Uses the limiter and settings attached to the application state.

    Raises:
        RateLimitExceeded: If the budget is exhausted (rendered as 429)
    """
    settings: APISettings = request.app.state.api_settings
    if not settings.ENABLE_RATE_LIMIT:
        return

    path = request.url.path
    api_key = request.headers.get(settings.API_KEY_HEADER)
    rule = settings.rule_for(path, api_key)

    key = client_identifier(request, settings)
    if path in settings.RATE_LIMIT_ENDPOINT_OVERRIDES:
        key = f"{key}:{path}"

    allowed, remaining, retry_after = request.app.state.rate_limiter.hit(key, rule)

    if not allowed:
        raise RateLimitExceeded(rule.limit, rule.window, retry_after=retry_after)

    # Picked up by the response middleware
    request.state.rate_limit_limit = rule.limit
    request.state.rate_limit_remaining = remaining
