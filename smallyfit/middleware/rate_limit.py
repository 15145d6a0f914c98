"""Rate limiting middleware — in-memory with sliding window.

Protects against:
- Brute-force credential attacks (tight limit on /api/v1/auth/)
- API abuse (general limit on everything else under /api/)

Uses in-memory storage (works for single-instance). For multi-instance,
swap _store for a shared backend.
"""
from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from config.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class _RateWindow:
    """Sliding window counter for a single client."""
    timestamps: list[float] = field(default_factory=list)

    def count_in_window(self, window_seconds: float) -> int:
        cutoff = time.monotonic() - window_seconds
        self.timestamps = [t for t in self.timestamps if t > cutoff]
        return len(self.timestamps)

    def record(self) -> None:
        self.timestamps.append(time.monotonic())


class RateLimitStore:
    """In-memory rate limit storage with periodic cleanup."""

    def __init__(self, cleanup_interval: float = 300):
        self._windows: dict[str, _RateWindow] = defaultdict(_RateWindow)
        self._last_cleanup = time.monotonic()
        self._cleanup_interval = cleanup_interval
        self._max_window = 0.0  # largest window seen; older timestamps are dead

    def check_and_record(self, key: str, limit: int, window_seconds: float) -> tuple[bool, int]:
        """Check if request is allowed, record it if so.

        Returns (allowed, current_count).
        """
        self._max_window = max(self._max_window, window_seconds)
        self._maybe_cleanup()
        window = self._windows[key]
        count = window.count_in_window(window_seconds)
        if count >= limit:
            return False, count
        window.record()
        return True, count + 1

    def clear(self) -> None:
        self._windows.clear()

    def _maybe_cleanup(self):
        now = time.monotonic()
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        cutoff = now - self._max_window
        stale = [k for k, w in self._windows.items() if not w.timestamps or w.timestamps[-1] <= cutoff]
        for k in stale:
            del self._windows[k]


_store = RateLimitStore()


def reset_store():
    """Reset rate limit state — used in tests."""
    _store.clear()


# (path_prefix, requests, window_seconds), most specific first
_RATE_LIMITS: list[tuple[str, int, int]] = [
    ("/api/v1/auth/", 10, 60),
    ("/api/", 120, 60),
]

_EXEMPT = {"/health", "/ready", "/metrics", "/", "/docs", "/openapi.json"}


def _get_client_ip(request: Request) -> str:
    """Client address used as the rate-limit key.

    X-Forwarded-For is only read when the direct peer is a trusted proxy, and
    then the right-most hop that is not itself a trusted proxy wins. Entries
    to the left of it are client-supplied and can be forged.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = set(settings.TRUSTED_PROXIES)
    if peer not in trusted:
        return peer
    forwarded = request.headers.get("x-forwarded-for", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return hops[0] if hops else peer


def _find_limit(path: str) -> tuple[str, int, int] | None:
    """Return (bucket, limit, window) for a path, or None when exempt."""
    if path in _EXEMPT:
        return None
    for prefix, limit, window in _RATE_LIMITS:
        if path.startswith(prefix):
            return prefix, limit, window
    return None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """IP-based rate limiting."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        rate = _find_limit(path)
        if rate is None:
            return await call_next(request)

        bucket, limit, window = rate
        client_ip = _get_client_ip(request)
        allowed, count = _store.check_and_record(f"{client_ip}:{bucket}", limit, window)

        if not allowed:
            logger.warning("Rate limited: %s on %s (%d/%d in %ds)", client_ip, path, count, limit, window)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limited",
                    "message": "Too many requests. Please try again later.",
                    "retry_after": window,
                },
                headers={"Retry-After": str(window)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - count))
        return response
