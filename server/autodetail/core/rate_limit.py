"""
In-memory fixed-window rate limiting.

Counters live in process memory, so limits apply per worker process.
"""

import logging
import time
from threading import Lock
from typing import Optional

from fastapi import Request

from .config import settings
from .exceptions import RateLimitError
from .middleware import client_ip

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 60


class RateLimiter:
    """Counts hits per key inside fixed time windows."""

    def __init__(self):
        # {key: {"count": int, "reset_time": float}}
        self._windows: dict[str, dict] = {}
        self._lock = Lock()
        self._last_cleanup = 0.0

    def hit(self, key: str, limit: int, window_seconds: int, now: Optional[float] = None) -> Optional[int]:
        """
        Register one hit for ``key``.

        Returns:
            None when the hit is allowed, otherwise the seconds until the
            window resets.
        """
        now = time.time() if now is None else now

        with self._lock:
            self._cleanup(now)

            entry = self._windows.get(key)
            if entry is None or entry["reset_time"] <= now:
                entry = {"count": 0, "reset_time": now + window_seconds}
                self._windows[key] = entry

            if entry["count"] >= limit:
                return max(1, int(entry["reset_time"] - now))

            entry["count"] += 1
            return None

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _cleanup(self, now: float) -> None:
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        expired = [key for key, entry in self._windows.items() if entry["reset_time"] <= now]
        for key in expired:
            del self._windows[key]
        self._last_cleanup = now


limiter = RateLimiter()


def rate_limit(scope: str, limit: int, window_seconds: int):
    """Build a FastAPI dependency enforcing ``limit`` hits per client per window."""

    async def dependency(request: Request) -> None:
        if not settings.rate_limit_enabled:
            return

        ip = client_ip(request)
        retry_after = limiter.hit(f"{scope}:{ip}", limit, window_seconds)
        if retry_after is not None:
            logger.warning(
                "Rate limit exceeded",
                extra={"scope": scope, "client_ip": ip, "retry_after": retry_after}
            )
            raise RateLimitError(retry_after=retry_after, limit=limit, window=window_seconds)

    return dependency


general_limit = rate_limit("general", settings.general_rate_limit, settings.general_rate_window_seconds)
auth_limit = rate_limit("auth", settings.auth_rate_limit, settings.auth_rate_window_seconds)
submission_limit = rate_limit(
    "submission", settings.submission_rate_limit, settings.submission_rate_window_seconds
)
