"""Fixed-window rate limiting keyed by client address.

Counters live in process memory by default. When REDIS_URL is configured they
live in Redis so several workers share one window per client.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Protocol

import redis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .client_ip import get_client_ip
from .csrf import EXEMPT_PATH_MARKERS
from .error_handlers import error_response
from .errors import TooManyRequestsError

logger = logging.getLogger(__name__)

GLOBAL_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
LOGIN_LIMIT_MESSAGE = "Too many login attempts, please try again later."


class CounterStore(Protocol):
    def incr(self, key: str, window_seconds: int) -> tuple[int, int]:
        """Increment ``key``; return (count in current window, seconds until reset)."""
        ...


class MemoryCounterStore:
    """Per-process counters. Safe across the event loop and the threadpool."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[int, float]] = {}
        self._ops = 0

    def incr(self, key: str, window_seconds: int) -> tuple[int, int]:
        now = self._clock()
        with self._lock:
            count, reset_at = self._windows.get(key, (0, 0.0))
            if reset_at <= now:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._windows[key] = (count, reset_at)

            self._ops += 1
            if self._ops % 1000 == 0:
                self._purge(now)
        return count, max(1, int(reset_at - now + 0.999))

    def _purge(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]
        if expired:
            logger.debug("Purged %d expired rate-limit windows", len(expired))

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class RedisCounterStore:
    """Counters shared through Redis (INCR + EXPIRE)."""

    def __init__(self, client: "redis.Redis") -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCounterStore":
        return cls(redis.from_url(url, decode_responses=True))

    def incr(self, key: str, window_seconds: int) -> tuple[int, int]:
        value = self._client.incr(key)
        if value == 1:
            self._client.expire(key, window_seconds)
        ttl = self._client.ttl(key)
        if ttl is None or ttl < 0:
            ttl = window_seconds
        return int(value), int(ttl)


class FixedWindowRateLimiter:
    def __init__(self, store: CounterStore, *, name: str, limit: int, window_seconds: int, message: str) -> None:
        self.store = store
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message

    def hit(self, client_key: str) -> int:
        """Count one request; raise TooManyRequestsError past the limit.

        Returns the remaining allowance. Store failures fail open.
        """
        try:
            count, ttl = self.store.incr(f"rl:{self.name}:{client_key}", self.window_seconds)
        except RedisError:
            # Fail open if Redis is down to avoid a total outage.
            logger.exception("Redis error during %s rate limiting (fail-open)", self.name)
            return self.limit
        if count > self.limit:
            logger.warning("Rate limit '%s' exceeded for %s (%d/%d)", self.name, client_key, count, self.limit)
            raise TooManyRequestsError(self.message, retry_after=ttl)
        return self.limit - count


def build_store(redis_url: str | None) -> CounterStore:
    if redis_url:
        logger.info("Rate limit counters stored in Redis")
        return RedisCounterStore.from_url(redis_url)
    return MemoryCounterStore()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global limiter. Health probes are never limited."""

    def __init__(self, app, *, limiter: FixedWindowRateLimiter, trust_proxy_headers: bool = False) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.trust_proxy_headers = trust_proxy_headers

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if any(marker in request.url.path for marker in EXEMPT_PATH_MARKERS):
            return await call_next(request)

        client_ip = get_client_ip(request, trust_proxy_headers=self.trust_proxy_headers)
        try:
            remaining = self.limiter.hit(client_ip)
        except TooManyRequestsError as exc:
            return error_response(request, exc)

        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(self.limiter.limit)
        response.headers["RateLimit-Remaining"] = str(max(remaining, 0))
        return response


def login_rate_limit(request: Request) -> None:
    """Dependency applying the stricter authentication limiter."""
    settings = request.app.state.settings
    client_ip = get_client_ip(request, trust_proxy_headers=settings.TRUST_PROXY_HEADERS)
    request.app.state.login_limiter.hit(client_ip)
