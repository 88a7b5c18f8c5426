"""
Rate limiting for outbound Solana requests.

The analysis pipeline fans out many concurrent wallet checks. Every RPC call
is funnelled through a single RateLimiter so the number of requests in flight,
and the rate at which new ones start, stay within what the upstream API tier
tolerates.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar('T')

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Gate that serializes and paces outbound calls.

    Concurrency is bounded by a semaphore; pacing enforces a minimum
    interval between the start of two consecutive tasks. The task's own
    result or exception is passed through unchanged.
    """

    def __init__(
        self,
        max_concurrent: int = 5,
        requests_per_second: Optional[float] = None
    ):
        """
        Initialize the rate limiter.

        Args:
            max_concurrent: Maximum number of tasks running at the same time
            requests_per_second: Maximum start rate; None or 0 disables pacing
        """
        if max_concurrent <= 0:
            raise ValueError("max_concurrent must be positive")

        self.max_concurrent = max_concurrent
        self.min_interval = 1.0 / requests_per_second if requests_per_second else 0.0
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._pace_lock = asyncio.Lock()
        self._last_start = 0.0
        self.total_enqueued = 0

    async def _wait_for_slot(self) -> None:
        """Sleep until the next start slot is available."""
        if not self.min_interval:
            return

        async with self._pace_lock:
            now = time.monotonic()
            wait_time = self._last_start + self.min_interval - now
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self._last_start = time.monotonic()

    async def enqueue(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Run a task once a slot is available.

        Args:
            task: Zero-argument coroutine function to execute

        Returns:
            Whatever the task returns

        Raises:
            Whatever the task raises
        """
        self.total_enqueued += 1
        async with self._semaphore:
            await self._wait_for_slot()
            return await task()
