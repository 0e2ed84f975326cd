import asyncio
import time
from typing import Awaitable, Callable, Optional
from loguru import logger


class AdaptiveRateLimiter:
    """
    Shared pacing for every caller of one embedding quota.

    ``acquire()`` waits until at least ``interval`` seconds have passed since
    the previous request. A rate-limit response doubles the interval (the first
    one from zero jumps to ``step``), capped at ``max_interval``. After
    ``decay_after`` consecutive successes the interval shrinks by
    ``decay_factor`` until it is back at ``min_interval``.
    """

    def __init__(
        self,
        min_interval: float = 0.0,
        max_interval: float = 30.0,
        step: float = 0.5,
        decay_after: int = 5,
        decay_factor: float = 0.8,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        enabled: bool = True,
    ):
        self.min_interval = min_interval
        self.max_interval = max_interval
        self.step = step
        self.decay_after = decay_after
        self.decay_factor = decay_factor
        self.enabled = enabled
        self._clock = clock
        self._sleep = sleep
        self._interval = min_interval
        self._consecutive_successes = 0
        self._consecutive_rate_limits = 0
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config) -> "AdaptiveRateLimiter":
        """Build from an ``EmbeddingConfig``."""
        return cls(
            min_interval=config.min_request_interval,
            max_interval=config.max_request_interval,
            step=config.rate_limit_step,
            decay_after=config.decay_after,
            decay_factor=config.decay_factor,
        )

    @classmethod
    def disabled(cls) -> "AdaptiveRateLimiter":
        """A limiter that never waits and ignores feedback."""
        return cls(enabled=False)

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def consecutive_rate_limits(self) -> int:
        return self._consecutive_rate_limits

    async def acquire(self) -> None:
        if not self.enabled:
            return
        async with self._lock:
            if self._last_request is not None and self._interval > 0:
                wait = self._last_request + self._interval - self._clock()
                if wait > 0:
                    await self._sleep(wait)
            self._last_request = self._clock()

    async def record_success(self) -> None:
        if not self.enabled:
            return
        async with self._lock:
            self._consecutive_rate_limits = 0
            self._consecutive_successes += 1
            if self._consecutive_successes < self.decay_after or self._interval <= self.min_interval:
                return
            self._consecutive_successes = 0
            decayed = self._interval * self.decay_factor
            # Snap to the floor once the interval is negligible
            if decayed < max(self.min_interval, 0.01):
                decayed = self.min_interval
            logger.debug(f"Embedding request interval decayed {self._interval:.3f}s -> {decayed:.3f}s")
            self._interval = decayed

    async def record_rate_limit(self) -> None:
        if not self.enabled:
            return
        async with self._lock:
            self._consecutive_successes = 0
            self._consecutive_rate_limits += 1
            previous = self._interval
            grown = previous * 2 if previous > 0 else self.step
            self._interval = min(self.max_interval, max(grown, self.min_interval))
            logger.warning(
                f"Embedding backend rate limited ({self._consecutive_rate_limits} in a row); "
                f"request interval {previous:.3f}s -> {self._interval:.3f}s"
            )
