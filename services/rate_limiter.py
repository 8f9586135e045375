"""Rate limiting for outbound AI calls.

A RateLimiter is created by whoever owns the AI client and passed in
explicitly, so no counter lives at module level.
"""
import logging
import threading
import time
from typing import Callable

from config.settings import AI_RATE_LIMIT_PER_MINUTE

logger = logging.getLogger(__name__)


class RateLimitExceededError(RuntimeError):
    """Raised when the call budget for the current window is spent."""


class RateLimiter:
    """Fixed-window limiter: at most `limit` calls per `window_seconds`."""

    def __init__(
        self,
        limit: int = AI_RATE_LIMIT_PER_MINUTE,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._window_start = clock()

    def acquire(self) -> None:
        """Consume one call from the budget or raise RateLimitExceededError."""
        with self._lock:
            now = self._clock()
            if now - self._window_start > self.window_seconds:
                self._count = 0
                self._window_start = now

            if self._count >= self.limit:
                logger.warning("[Rate Limit] AI calls throttled to protect key.")
                raise RateLimitExceededError("AI service is currently busy. Please try again in a minute.")
            self._count += 1

    @property
    def remaining(self) -> int:
        with self._lock:
            if self._clock() - self._window_start > self.window_seconds:
                return self.limit
            return max(0, self.limit - self._count)
