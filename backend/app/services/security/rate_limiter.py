"""
Rate limiting for outbound batch work.

Batch callers resolving many domains in a row pace themselves through a
token bucket so external sites are not hammered. The clock and sleep
functions are injectable so callers can be tested without real timers.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimit:
    """Rate limit configuration."""
    requests: int            # Number of requests allowed
    window_seconds: float    # Time window in seconds
    burst_requests: int = 1  # Bucket capacity

    @property
    def refill_per_second(self) -> float:
        return self.requests / self.window_seconds


@dataclass
class RateLimitStatus:
    """Outcome of a non-blocking acquire attempt."""
    allowed: bool
    tokens_remaining: float
    retry_after: Optional[float] = None


class TokenBucketRateLimiter:
    """
    Thread-safe token bucket.

    With the default ``RateLimit(requests=1, window_seconds=1.0)`` the first
    acquisition is immediate and each later one waits until a full second has
    passed since the previous one.
    """

    def __init__(self,
                 limit: Optional[RateLimit] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.limit = limit or RateLimit(requests=1, window_seconds=1.0)
        if self.limit.requests <= 0 or self.limit.window_seconds <= 0:
            raise ValueError("Rate limit requests and window must be positive")
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._capacity = float(max(1, self.limit.burst_requests))
        self._tokens = self._capacity
        self._updated_at = clock()

    @classmethod
    def fixed_interval(cls, interval_seconds: float, **kwargs) -> "TokenBucketRateLimiter":
        """One request per ``interval_seconds`` with no burst."""
        return cls(RateLimit(requests=1, window_seconds=interval_seconds), **kwargs)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(self._capacity, self._tokens + elapsed * self.limit.refill_per_second)
        self._updated_at = now

    def try_acquire(self) -> RateLimitStatus:
        """Take a token if one is available, without waiting."""
        with self._lock:
            self._refill()
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return RateLimitStatus(allowed=True, tokens_remaining=self._tokens)

            retry_after = (1.0 - self._tokens) / self.limit.refill_per_second
            return RateLimitStatus(allowed=False, tokens_remaining=self._tokens,
                                   retry_after=retry_after)

    def acquire(self) -> float:
        """
        Block until a token is available and take it.

        Returns:
            Total seconds spent waiting
        """
        waited = 0.0
        while True:
            status = self.try_acquire()
            if status.allowed:
                if waited:
                    logger.debug(f"Rate limiter waited {waited:.2f}s")
                return waited
            self._sleep(status.retry_after)
            waited += status.retry_after
