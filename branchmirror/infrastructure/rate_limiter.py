"""
Rate limiting for the GitHub REST API.

Before each burst of requests the pipeline asks the platform for its current
budget; when fewer than the low-water mark remain it waits until the reset
time plus a grace period. The wait is cancellable through an asyncio.Event so
a long pause can be interrupted without killing the process.
"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Mapping, Optional

from ..models import RATE_LIMIT_LOW_WATER_MARK, RateBudget
from .error_handler import MirrorCancelledError
from .logger import logger


DEFAULT_GRACE_PERIOD = 300.0  # 5 minutes

StatusSource = Callable[[], Awaitable[RateBudget]]


async def cancellable_sleep(seconds: float, cancel_event: Optional[asyncio.Event] = None) -> None:
    """
    Sleep for ``seconds`` unless ``cancel_event`` fires first.

    Raises:
        MirrorCancelledError: If the event is set before or during the wait
    """
    if cancel_event is not None and cancel_event.is_set():
        raise MirrorCancelledError("Cancelled before rate-limit wait")
    if seconds <= 0:
        return
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return

    sleeper = asyncio.ensure_future(asyncio.sleep(seconds))
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        sleeper.cancel()
        waiter.cancel()

    if cancel_event.is_set():
        raise MirrorCancelledError("Cancelled during rate-limit wait")


class RateLimiter:
    """
    Tracks the request budget and blocks the pipeline when it runs low.
    """

    def __init__(
        self,
        status_source: Optional[StatusSource] = None,
        low_water_mark: int = RATE_LIMIT_LOW_WATER_MARK,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.status_source = status_source
        self.low_water_mark = low_water_mark
        self.grace_period = grace_period
        self.cancel_event = cancel_event
        self.rate_budget = RateBudget(low_water_mark=low_water_mark)
        self._lock = asyncio.Lock()

    async def update_rate_limit_info(self, headers: Mapping[str, str]) -> None:
        """Refresh the cached budget from ``x-ratelimit-*`` response headers."""

        async with self._lock:
            budget = self.rate_budget
            if "x-ratelimit-limit" in headers:
                budget.limit = int(headers["x-ratelimit-limit"])
            if "x-ratelimit-remaining" in headers:
                budget.remaining = int(headers["x-ratelimit-remaining"])
            if "x-ratelimit-reset" in headers:
                budget.reset_time = datetime.fromtimestamp(
                    int(headers["x-ratelimit-reset"]), tz=timezone.utc
                )

    def wait_seconds(self, budget: RateBudget) -> float:
        """Seconds to pause for ``budget``; zero when it is not exhausted."""

        if not budget.is_exhausted:
            return 0.0
        return budget.reset_in_seconds + self.grace_period

    async def check_and_wait(self) -> RateBudget:
        """
        Query the current budget and wait for the reset window if it is low.

        Returns:
            The budget reported by the platform

        Raises:
            MirrorError: If the status query fails (never retried)
            MirrorCancelledError: If cancelled while waiting
        """
        if self.status_source is None:
            raise RuntimeError("RateLimiter has no status source")

        budget = await self.status_source()
        budget.low_water_mark = self.low_water_mark
        async with self._lock:
            self.rate_budget = budget

        delay = self.wait_seconds(budget)
        if delay > 0:
            logger.info(
                f"Remaining {budget.remaining} requests before reaching GitHub max rate limit."
            )
            logger.info(f"Sleeping {delay / 60:.1f} minutes to refresh rate limit.")
            await cancellable_sleep(delay, self.cancel_event)

        return budget


__all__ = [
    "DEFAULT_GRACE_PERIOD",
    "cancellable_sleep",
    "RateLimiter",
]
