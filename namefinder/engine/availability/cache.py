"""TTL cache for availability verdicts."""

import time
from dataclasses import replace
from typing import Callable, Dict, Optional, Tuple

from loguru import logger

from ..models import AvailabilityCheckResult


class AvailabilityCache:
    """Availability results keyed by lower-cased domain.

    Entries expire lazily: an expired entry is dropped on the lookup that
    finds it. The clock is injectable so tests can move time by hand.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: Dict[str, Tuple[AvailabilityCheckResult, float]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, domain: str) -> Optional[AvailabilityCheckResult]:
        """Return a copy of the cached result flagged ``cached=True``."""
        key = domain.lower()
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        result, expires_at = entry
        if self.clock() > expires_at:
            del self._entries[key]
            self.misses += 1
            logger.debug(f"Cache entry expired: {key}")
            return None

        self.hits += 1
        return replace(result, cached=True)

    def set(self, domain: str, result: AvailabilityCheckResult, ttl_seconds: float) -> None:
        self._entries[domain.lower()] = (replace(result, cached=False), self.clock() + ttl_seconds)

    def clear(self):
        """Clear all cache entries."""
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)
