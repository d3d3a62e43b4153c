"""
Cooperative delay and poll-until-present primitives.

Every suspension point of a fill run goes through a Waiter, so a run can be
cancelled at any of them and tests can swap in a virtual clock.
"""
import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


class Waiter:
    """Sleeps and bounded polling on the running event loop."""

    DEFAULT_POLL_INTERVAL_MS = 100

    def __init__(self, poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS):
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")
        self.poll_interval_ms = poll_interval_ms

    def now_ms(self) -> float:
        return asyncio.get_running_loop().time() * 1000

    async def sleep(self, ms: float) -> None:
        if ms > 0:
            await asyncio.sleep(ms / 1000)

    async def poll(
        self,
        attempt: Callable[[], Awaitable[Optional[T]]],
        timeout_ms: Optional[float] = None,
        interval_ms: Optional[float] = None
    ) -> Optional[T]:
        """
        Run `attempt` until it returns something truthy or the timeout elapses.

        The attempt always runs at least once. With no timeout (None or 0) that
        single run is the whole call and no delay is incurred.

        Returns:
            The first truthy attempt result, or None on timeout.
        """
        result = await attempt()
        if result or not timeout_ms or timeout_ms <= 0:
            return result or None

        interval = interval_ms or self.poll_interval_ms
        deadline = self.now_ms() + timeout_ms
        while True:
            remaining = deadline - self.now_ms()
            if remaining <= 0:
                logger.debug(f"⏱️ Poll gave up after {timeout_ms}ms")
                return None
            await self.sleep(min(interval, remaining))
            result = await attempt()
            if result:
                return result
