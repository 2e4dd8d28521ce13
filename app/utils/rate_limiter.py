# app/utils/rate_limiter.py
"""
In-memory per-client request limiter.

Each client address gets a fixed window: the first request opens it, and
once RATE_LIMIT_REQUESTS have been counted further requests are refused
until RATE_LIMIT_WINDOW_SECONDS have passed. State lives in this process
only, so every worker counts on its own.
"""

import time
from threading import Lock
from typing import Dict, Optional, Tuple

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


class RequestRateLimiter:
    def __init__(self, max_requests: Optional[int] = None, window_seconds: Optional[int] = None):
        self._lock = Lock()
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        # client -> (window_start, request_count)
        self._clients: Dict[str, Tuple[float, int]] = {}
        self._last_cleanup = time.time()

    @property
    def max_requests(self) -> int:
        return self._max_requests if self._max_requests is not None else settings.RATE_LIMIT_REQUESTS

    @property
    def window_seconds(self) -> int:
        return self._window_seconds if self._window_seconds is not None else settings.RATE_LIMIT_WINDOW_SECONDS

    def hit(self, client: str, now: Optional[float] = None) -> Tuple[bool, int]:
        """
        Count one request for `client`.
        Returns (allowed, retry_after_seconds). retry_after is 0 when allowed.
        """
        current_time = now if now is not None else time.time()
        window = self.window_seconds
        with self._lock:
            self._cleanup_expired(current_time, window)

            window_start, count = self._clients.get(client, (current_time, 0))
            if current_time - window_start >= window:
                window_start, count = current_time, 0

            if count >= self.max_requests:
                retry_after = max(1, int(window - (current_time - window_start)))
                return False, retry_after

            self._clients[client] = (window_start, count + 1)
            return True, 0

    def reset(self):
        with self._lock:
            self._clients.clear()

    def _cleanup_expired(self, current_time: float, window: int):
        if current_time - self._last_cleanup < window:
            return
        expired = [c for c, (start, _) in self._clients.items() if current_time - start >= window]
        for client in expired:
            del self._clients[client]
        self._last_cleanup = current_time


# Global limiter shared by the HTTP middleware
rate_limiter = RequestRateLimiter()
