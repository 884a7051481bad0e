"""Exponential backoff with jitter and abort-aware sleeping."""

import asyncio
import random
from typing import Optional


class RetryPolicy:
    """Retry policy with exponential backoff."""

    def __init__(self,
                 max_retries: int = 1,
                 base_delay: float = 0.12,
                 max_delay: float = 5.0,
                 exponential_base: float = 2.0,
                 jitter: float = 0.035,
                 rng: Optional[random.Random] = None):
        """
        Initialize retry policy.

        Args:
            max_retries: Retries after the first attempt
            base_delay: Base delay in seconds
            max_delay: Maximum delay in seconds
            exponential_base: Base for exponential backoff
            jitter: Upper bound of the random delay added to each wait, in seconds
            rng: Random source for the jitter
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self._rng = rng or random.Random()

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay before retrying after `attempt`.

        Args:
            attempt: Attempt number (0-based)

        Returns:
            Delay in seconds
        """
        delay = self.base_delay * (self.exponential_base ** attempt)
        delay = min(delay, self.max_delay)

        if self.jitter > 0:
            delay += self._rng.uniform(0, self.jitter)

        return delay

    async def sleep(self, attempt: int, abort: Optional[asyncio.Event] = None) -> bool:
        """Wait out the backoff for `attempt`.

        Returns False when the abort event fired before the delay elapsed.
        """
        delay = self.calculate_delay(attempt)
        if abort is None:
            await asyncio.sleep(delay)
            return True
        if abort.is_set():
            return False
        try:
            await asyncio.wait_for(abort.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False
