"""In-memory rate limiting dependency."""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Deque

from fastapi import Request, Response

from watched.core.config import settings
from watched.core.exceptions import RateLimitExceeded


class SlidingWindowLimiter:
    def __init__(self) -> None:
        self._store: dict[str, Deque[float]] = {}
        self._lock = Lock()
        self._last_sweep = 0.0

    def __len__(self) -> int:
        return len(self._store)

    def _evict_idle(self, cutoff: float) -> None:
        idle = [key for key, queue in self._store.items() if not queue or queue[-1] <= cutoff]
        for key in idle:
            del self._store[key]

    def hit(self, key: str, *, limit: int, window_seconds: int, now: float | None = None) -> tuple[bool, int, int]:
        if limit <= 0:
            return True, limit, 0
        current = time.time() if now is None else now
        cutoff = current - window_seconds
        with self._lock:
            # Keys with no hit inside the window are dropped at most once per window.
            if current - self._last_sweep >= window_seconds:
                self._evict_idle(cutoff)
                self._last_sweep = current
            queue = self._store.setdefault(key, deque())
            while queue and queue[0] <= cutoff:
                queue.popleft()
            if len(queue) >= limit:
                retry_after = max(int(queue[0] + window_seconds - current), 1)
                return False, 0, retry_after
            queue.append(current)
            return True, max(limit - len(queue), 0), 0


_limiter = SlidingWindowLimiter()


def _client_key(request: Request, scope: str) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"
    return f"{scope}:{ip}"


def _scope_limit(scope: str) -> int:
    if scope == "auth":
        return settings.RATE_LIMIT_AUTH_MAX_REQUESTS
    if scope == "ai":
        return settings.RATE_LIMIT_AI_MAX_REQUESTS
    return settings.RATE_LIMIT_MAX_REQUESTS


def rate_limit(scope: str = "default"):
    def _dependency(request: Request, response: Response) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        limit = _scope_limit(scope)
        window = settings.RATE_LIMIT_WINDOW_SECONDS
        ok, remaining, retry_after = _limiter.hit(_client_key(request, scope), limit=limit, window_seconds=window)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Window"] = str(window)
        if not ok:
            raise RateLimitExceeded(retry_after=retry_after, limit=limit, window_seconds=window)

    return _dependency
