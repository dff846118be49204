import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class BreakerState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitOpenError(Exception):
    def __init__(self, retry_after: float):
        super().__init__(f"CircuitBreaker: still open, retry after {retry_after:.1f}s")
        self.retry_after = retry_after


class CircuitBreaker:
    def __init__(
        self,
        failure_threshold: int = 3,
        base_recovery_time: int = 10,
        max_recovery_time: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_count = 0
        self.failure_threshold = failure_threshold
        self.base_recovery_time = base_recovery_time
        self.max_recovery_time = max_recovery_time
        self.last_failure_time = 0.0
        self.state = BreakerState.CLOSED
        self._clock = clock

    @property
    def current_recovery_time(self) -> float:
        overflow = max(self.failure_count - self.failure_threshold, 0)
        return min(self.base_recovery_time * (2**overflow), self.max_recovery_time)

    def _open(self):
        self.state = BreakerState.OPEN
        self.last_failure_time = self._clock()
        logger.warning(f"Circuit opened after {self.failure_count} failures.")

    def _half_open(self):
        self.state = BreakerState.HALF_OPEN
        logger.info("Circuit half-open: testing...")

    def _close(self):
        if self.state != BreakerState.CLOSED:
            logger.info("Circuit closed: stable again.")
        self.state = BreakerState.CLOSED
        self.failure_count = 0

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        if self.state == BreakerState.OPEN:
            elapsed = self._clock() - self.last_failure_time
            cooldown = self.current_recovery_time
            if elapsed < cooldown:
                raise CircuitOpenError(cooldown - elapsed)
            self._half_open()

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            self.failure_count += 1
            logger.error(f"CircuitBreaker call failed ({self.failure_count}): {e}")
            if self.state == BreakerState.HALF_OPEN or self.failure_count >= self.failure_threshold:
                self._open()
            raise

        self._close()
        return result


breaker = CircuitBreaker(failure_threshold=3, base_recovery_time=10)
