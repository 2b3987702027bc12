"""Outbound rate limiter for message service requests."""

import asyncio
import time

from aiolimiter import AsyncLimiter
from loguru import logger


class ServiceRateLimiter:
    """
    Throttles requests (proactive) using aiolimiter and pauses all
    requests after the service answers 429 (reactive).

    One instance is shared by every request a client makes.
    """

    def __init__(self, rate_limit: int = 40, rate_window: float = 60.0):
        self.limiter = AsyncLimiter(rate_limit, rate_window)
        self._blocked_until: float = 0

        logger.info(
            f"ServiceRateLimiter initialized ({rate_limit} req / {rate_window}s)"
        )

    async def wait_if_blocked(self) -> bool:
        """
        Wait if currently blocked, then take a throttle slot.

        Returns:
            True if was reactively blocked and waited, False otherwise.
        """
        waited_reactively = False
        now = time.monotonic()
        if now < self._blocked_until:
            wait_time = self._blocked_until - now
            logger.warning(
                f"Message service rate limit active, waiting {wait_time:.1f}s..."
            )
            await asyncio.sleep(wait_time)
            waited_reactively = True

        async with self.limiter:
            return waited_reactively

    def set_blocked(self, seconds: float = 60) -> None:
        """Block all requests for the given number of seconds."""
        self._blocked_until = time.monotonic() + seconds
        logger.warning(f"Message service rate limit set for {seconds:.1f}s")

    def is_blocked(self) -> bool:
        return time.monotonic() < self._blocked_until

    def remaining_wait(self) -> float:
        return max(0.0, self._blocked_until - time.monotonic())
