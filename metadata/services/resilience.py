"""Bulkhead, rate limiter and retry policies wrapped around upstream calls.

Each policy exposes ``execute(operation)``. ``ResilienceGuard`` composes the
three in a fixed order so that every retry attempt goes back through the
rate limiter and the bulkhead::

    retry( rate_limiter( bulkhead( operation ) ) )
"""

import logging
import math
import threading
import time

from config.settings import (
    GOG_MAX_CONCURRENT_CALLS,
    GOG_MAX_WAIT_SECONDS,
    GOG_RATE_LIMIT_TIMEOUT_SECONDS,
    GOG_RETRY_ATTEMPTS,
    GOG_RETRY_WAIT_SECONDS,
)
from metadata.errors import CapacityExceeded, NotFound, RateLimitExceeded

logger = logging.getLogger(__name__)


class Bulkhead:
    def __init__(self, name, *, max_concurrent_calls=GOG_MAX_CONCURRENT_CALLS, max_wait_seconds=GOG_MAX_WAIT_SECONDS):
        if int(max_concurrent_calls) < 1:
            raise ValueError("max_concurrent_calls must be >= 1")
        self.name = name
        self.max_concurrent_calls = int(max_concurrent_calls)
        self.max_wait_seconds = max(0.0, float(max_wait_seconds))
        self._slots = threading.BoundedSemaphore(self.max_concurrent_calls)

    def execute(self, operation):
        if not self._slots.acquire(timeout=self.max_wait_seconds):
            logger.warning("[RESILIENCE] bulkhead=%s full after %.1fs", self.name, self.max_wait_seconds)
            raise CapacityExceeded(f"bulkhead '{self.name}' is full")
        try:
            return operation()
        finally:
            self._slots.release()


class RateLimiter:
    """Token bucket refilled to ``limit_for_period`` at every period boundary.

    A caller without a permit reserves one from the next cycle that still has
    room and sleeps until that cycle starts. If the wait would exceed
    ``timeout_seconds`` nothing is reserved and ``RateLimitExceeded`` is raised.
    """

    def __init__(
        self,
        name,
        *,
        limit_for_period=4,
        refresh_period_seconds=1.0,
        timeout_seconds=GOG_RATE_LIMIT_TIMEOUT_SECONDS,
        clock=time.monotonic,
        sleep=time.sleep,
    ):
        if int(limit_for_period) < 1:
            raise ValueError("limit_for_period must be >= 1")
        if float(refresh_period_seconds) <= 0:
            raise ValueError("refresh_period_seconds must be > 0")
        self.name = name
        self.limit_for_period = int(limit_for_period)
        self.refresh_period_seconds = float(refresh_period_seconds)
        self.timeout_seconds = max(0.0, float(timeout_seconds))
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._cycle_start = clock()
        self._permits = self.limit_for_period

    def _refresh_locked(self, now):
        elapsed_cycles = int((now - self._cycle_start) // self.refresh_period_seconds)
        if elapsed_cycles <= 0:
            return
        self._cycle_start += elapsed_cycles * self.refresh_period_seconds
        self._permits = min(
            self.limit_for_period,
            self._permits + elapsed_cycles * self.limit_for_period,
        )

    def reserve(self):
        """Take a permit and return how long the caller must wait before using it."""
        with self._lock:
            now = self._clock()
            self._refresh_locked(now)
            if self._permits > 0:
                self._permits -= 1
                return 0.0
            # Deficit 0 means the next cycle's first permit.
            cycles_ahead = math.floor(-self._permits / self.limit_for_period) + 1
            wait = self._cycle_start + cycles_ahead * self.refresh_period_seconds - now
            if wait > self.timeout_seconds:
                logger.warning(
                    "[RESILIENCE] rate_limiter=%s wait=%.3fs exceeds timeout=%.3fs",
                    self.name,
                    wait,
                    self.timeout_seconds,
                )
                raise RateLimitExceeded(f"rate limiter '{self.name}' has no permit within timeout")
            self._permits -= 1
            return wait

    def execute(self, operation):
        wait = self.reserve()
        if wait > 0:
            logger.debug("[RESILIENCE] rate_limiter=%s sleep %.3fs", self.name, wait)
            self._sleep(wait)
        return operation()


class RetryPolicy:
    def __init__(self, name, *, max_attempts=GOG_RETRY_ATTEMPTS, wait_seconds=GOG_RETRY_WAIT_SECONDS, sleep=time.sleep):
        if int(max_attempts) < 1:
            raise ValueError("max_attempts must be >= 1")
        self.name = name
        self.max_attempts = int(max_attempts)
        self.wait_seconds = max(0.0, float(wait_seconds))
        self._sleep = sleep

    def execute(self, operation):
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except NotFound:
                raise
            except Exception as exc:
                last_error = exc
                if attempt >= self.max_attempts:
                    break
                logger.warning(
                    "[RESILIENCE] retry=%s attempt=%s/%s delay=%.1fs error=%s",
                    self.name,
                    attempt,
                    self.max_attempts,
                    self.wait_seconds,
                    exc,
                )
                self._sleep(self.wait_seconds)
        raise last_error


class ResilienceGuard:
    def __init__(self, *, bulkhead, rate_limiter, retry):
        self.bulkhead = bulkhead
        self.rate_limiter = rate_limiter
        self.retry = retry

    def execute(self, operation):
        return self.retry.execute(
            lambda: self.rate_limiter.execute(
                lambda: self.bulkhead.execute(operation)
            )
        )


def build_guard(
    name,
    *,
    bulkhead=None,
    limit_for_period=4,
    refresh_period_seconds=1.0,
    timeout_seconds=GOG_RATE_LIMIT_TIMEOUT_SECONDS,
    max_attempts=GOG_RETRY_ATTEMPTS,
    wait_seconds=GOG_RETRY_WAIT_SECONDS,
):
    return ResilienceGuard(
        bulkhead=bulkhead or Bulkhead(name),
        rate_limiter=RateLimiter(
            name,
            limit_for_period=limit_for_period,
            refresh_period_seconds=refresh_period_seconds,
            timeout_seconds=timeout_seconds,
        ),
        retry=RetryPolicy(name, max_attempts=max_attempts, wait_seconds=wait_seconds),
    )
