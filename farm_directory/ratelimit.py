# farm_directory/ratelimit.py
"""
Per-IP fixed-window limits backed by in-process memory storage.

Counters live on the app (``app.state.rate_limiter``), so each app instance
and each test client starts from zero.
"""
from __future__ import annotations

import logging
from typing import Callable

from fastapi import Request
from limits import RateLimitItem, parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from farm_directory.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(self, limits_by_scope: dict[str, str], *, enabled: bool = True):
        self.enabled = enabled
        self._items: dict[str, RateLimitItem] = {
            scope: parse(spec) for scope, spec in limits_by_scope.items()
        }
        self._strategy = FixedWindowRateLimiter(MemoryStorage())

    def hit(self, scope: str, key: str) -> bool:
        """Count one request; False once the window's allowance is used up."""
        if not self.enabled:
            return True
        return self._strategy.hit(self._items[scope], scope, key)

    def reset(self) -> None:
        self._strategy.storage.reset()


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit(scope: str) -> Callable[[Request], None]:
    """FastAPI dependency factory enforcing the named limit."""

    def _dependency(request: Request) -> None:
        limiter: RateLimiter = request.app.state.rate_limiter
        key = client_key(request)
        if not limiter.hit(scope, key):
            logger.warning("Rate limit '%s' exceeded for %s", scope, key)
            raise RateLimitExceeded()

    return _dependency
