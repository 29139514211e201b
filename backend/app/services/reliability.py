"""
BrandColor Reliability & Timeout Management
Deadlines shared across the outbound requests of one resolution.
"""
import time
from typing import Callable, Optional

from loguru import logger


class FetchError(Exception):
    """Outbound request failed (transport error, bad status, oversize body)."""
    pass


class DeadlineExceeded(FetchError):
    """Caller-supplied deadline elapsed before a request could be made."""
    pass


class Deadline:
    """
    Absolute deadline for a unit of work.

    Every request made under a deadline is bounded by the smaller of its own
    timeout and the time left, so a caller can cap a whole resolution.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self.expires_at - self._clock())

    def timeout_for(self, operation: str, default_timeout: float) -> float:
        """
        Timeout to use for one request.

        Raises:
            DeadlineExceeded: If no time is left
        """
        remaining = self.remaining()
        if remaining <= 0.0:
            logger.warning(f"Deadline exceeded before {operation}")
            raise DeadlineExceeded(f"Deadline exceeded before {operation}")
        return min(default_timeout, remaining)


def effective_timeout(operation: str, default_timeout: float,
                      deadline: Optional[Deadline] = None) -> float:
    """Resolve the timeout for an operation, honouring an optional deadline."""
    if deadline is None:
        return default_timeout
    return deadline.timeout_for(operation, default_timeout)
