"""
Request throttling for rate-limited external APIs.

Every request to an API goes through one ThrottledFetcher, so unrelated
callers (search, detail lookups, grocery generation) share one rate limit.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)


class ThrottledFetcher:
    """Dispatch httpx requests no closer together than ``min_interval`` seconds.

    Spacing is measured between dispatch times, not completion times. The next
    slot is reserved before the caller suspends, so callers awaiting at the same
    time are spread out in the order they arrived. There is no queue object;
    each caller simply sleeps until its own slot.

    ``clock`` and ``sleep`` can be swapped for a fake clock in tests.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.http = http
        self.min_interval = min_interval
        self.clock = clock
        self.sleep = sleep
        self.last_dispatch: float | None = None

    def _reserve_slot(self) -> float:
        """Claim the next dispatch time and return how long to wait for it."""
        now = self.clock()
        if self.last_dispatch is None:
            slot = now
        else:
            slot = max(now, self.last_dispatch + self.min_interval)
        self.last_dispatch = slot
        return slot - now

    async def wait(self) -> None:
        """Suspend until the caller may dispatch."""
        delay = self._reserve_slot()
        if delay > 0:
            logger.debug(f"Throttling request for {delay * 1000:.0f}ms")
            await self.sleep(delay)

    async def fetch(self, request: httpx.Request) -> httpx.Response:
        """Send ``request`` once its slot comes up. HTTP errors pass through."""
        await self.wait()
        return await self.http.send(request)

    async def close(self):
        """Close the underlying HTTP client."""
        await self.http.aclose()
