"""Exponential pause between transaction attempts."""

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from ..constants.retry_policy import MAX_WAIT_TIME, WAIT_TIMES

logger = logging.getLogger(__name__)


class BackoffScheduler:
    """Pause a longer time each attempt, capped at max_wait seconds."""

    def __init__(
        self,
        wait_times: Sequence[float] = WAIT_TIMES,
        max_wait: float = MAX_WAIT_TIME,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.wait_times = tuple(wait_times)
        self.max_wait = max_wait
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before retry number `attempt` (1-based)."""
        if attempt < 1:
            raise ValueError(f"attempt must be 1 or greater, got {attempt}")
        if attempt <= len(self.wait_times):
            return self.wait_times[attempt - 1]
        return self.max_wait

    async def wait_for(self, attempt: int) -> None:
        delay = self.delay_for(attempt)
        if delay == 0:
            return
        logger.debug(f"Pausing {delay}s before transaction attempt {attempt + 1}")
        # Cancellation of the calling task propagates out of the sleep
        await self._sleep(delay)
