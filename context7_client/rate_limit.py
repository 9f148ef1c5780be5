"""Rate-limit bookkeeping from Context7 response headers."""

import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

LIMIT_HEADER = "x-ratelimit-limit"
REMAINING_HEADER = "x-ratelimit-remaining"
RESET_HEADER = "x-ratelimit-reset"


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Quota state as of the most recent response carrying rate-limit headers."""

    limit: int
    remaining: int
    reset_at: int  # unix timestamp, seconds
    reset_in_ms: int


@dataclass(frozen=True)
class _Quota:
    limit: int
    remaining: int
    reset_at: int


def parse_rate_limit_headers(headers: Mapping[str, str]) -> _Quota | None:
    """Parse all three quota headers, or None if any is missing or not an integer."""
    try:
        return _Quota(
            limit=int(headers[LIMIT_HEADER]),
            remaining=int(headers[REMAINING_HEADER]),
            reset_at=int(headers[RESET_HEADER]),
        )
    except (KeyError, TypeError, ValueError):
        return None


class RateLimitTracker:
    """Holds the last known quota, shared by every call on a client.

    Writers swap in a new immutable quota under a lock; readers take the
    current reference without locking. Last write wins, so under concurrency
    the snapshot follows response arrival order, not request order.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._quota: _Quota | None = None
        self._lock = threading.Lock()

    def update(self, headers: Mapping[str, str]) -> bool:
        """Apply quota headers from a response. Returns False if they were unusable."""
        quota = parse_rate_limit_headers(headers)
        if quota is None:
            return False
        with self._lock:
            self._quota = quota
        logger.debug(
            "Rate limits: %d/%d, resets at %d", quota.remaining, quota.limit, quota.reset_at
        )
        return True

    def snapshot(self) -> RateLimitSnapshot | None:
        """Last known quota, or None before any response carried rate-limit headers."""
        quota = self._quota
        if quota is None:
            return None
        return self._snapshot(quota)

    def snapshot_from(self, headers: Mapping[str, str]) -> RateLimitSnapshot | None:
        """Quota carried by one response's headers, without touching the shared state."""
        quota = parse_rate_limit_headers(headers)
        if quota is None:
            return None
        return self._snapshot(quota)

    def _snapshot(self, quota: _Quota) -> RateLimitSnapshot:
        reset_in_ms = max(0, int(quota.reset_at * 1000 - self._clock() * 1000))
        return RateLimitSnapshot(
            limit=quota.limit,
            remaining=quota.remaining,
            reset_at=quota.reset_at,
            reset_in_ms=reset_in_ms,
        )
