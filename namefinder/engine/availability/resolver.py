"""Availability resolution with caching, retries and provider fallback."""

import asyncio
import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger

from ..config import ResolverConfig
from ..models import AvailabilityCheckResult, Confidence
from ..retry import RetryPolicy
from .cache import AvailabilityCache
from .providers import ABORTED, AvailabilityProvider, DnsOverHttpsProvider, RdapProvider

AVAILABILITY_UNKNOWN = "availability_unknown"


class AvailabilityResolver:
    """Resolves domain availability through an ordered list of providers.

    Providers are tried in order, each retried with exponential backoff. The
    first clean verdict is cached for the full TTL; when every provider fails
    a low-confidence "unknown" verdict is cached briefly so a flapping
    registry is retried soon. Aborted lookups are never cached.
    """

    def __init__(self,
                 providers: Optional[Sequence[AvailabilityProvider]] = None,
                 cache: Optional[AvailabilityCache] = None,
                 ttl_seconds: float = 86400.0,
                 degraded_ttl_seconds: float = 60.0,
                 max_retries: int = 1,
                 backoff_seconds: float = 0.12,
                 jitter_seconds: float = 0.035,
                 concurrency: int = 6,
                 retry_policy: Optional[RetryPolicy] = None):
        self.providers: List[AvailabilityProvider] = (
            list(providers) if providers is not None else [DnsOverHttpsProvider(), RdapProvider()]
        )
        self.cache = cache if cache is not None else AvailabilityCache()
        self.ttl_seconds = ttl_seconds
        self.degraded_ttl_seconds = min(ttl_seconds, degraded_ttl_seconds)
        self.concurrency = max(1, concurrency)
        self.retry_policy = retry_policy or RetryPolicy(
            max_retries=max_retries,
            base_delay=backoff_seconds,
            jitter=jitter_seconds,
        )

        # Provider health tracking
        self.provider_stats: Dict[str, Dict[str, int]] = defaultdict(
            lambda: {'success': 0, 'error': 0, 'skipped': 0}
        )
        self.degraded_count = 0
        self.aborted_count = 0

    @classmethod
    def from_config(cls,
                    config: ResolverConfig,
                    cache: Optional[AvailabilityCache] = None) -> "AvailabilityResolver":
        providers = [
            DnsOverHttpsProvider(endpoint=config.doh_endpoint, timeout=config.timeout_seconds),
            RdapProvider(endpoint=config.rdap_endpoint, timeout=config.timeout_seconds),
        ]
        return cls(
            providers=providers,
            cache=cache,
            ttl_seconds=config.ttl_seconds,
            degraded_ttl_seconds=config.degraded_ttl_seconds,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
            jitter_seconds=config.jitter_seconds,
            concurrency=config.concurrency,
        )

    async def check_availability(self,
                                 domain: str,
                                 abort: Optional[asyncio.Event] = None) -> AvailabilityCheckResult:
        """Check one fully-qualified domain. Never raises for provider failures."""
        domain = domain.strip().lower()

        cached = self.cache.get(domain)
        if cached is not None:
            logger.debug(f"Cache hit for domain: {domain}")
            return cached

        for provider in self.providers:
            result = await self._check_with_backoff(provider, domain, abort)
            if result is None:
                continue
            if result.error == ABORTED:
                self.aborted_count += 1
                return result
            if result.error is None:
                self.cache.set(domain, result, self.ttl_seconds)
                return result

        degraded = AvailabilityCheckResult(
            domain=domain,
            available=False,
            provider="none",
            latency_ms=0.0,
            confidence=Confidence.LOW,
            error=AVAILABILITY_UNKNOWN,
        )
        self.degraded_count += 1
        logger.warning(f"All availability providers failed for {domain}")
        self.cache.set(domain, degraded, self.degraded_ttl_seconds)
        return degraded

    async def _check_with_backoff(self,
                                  provider: AvailabilityProvider,
                                  domain: str,
                                  abort: Optional[asyncio.Event]) -> Optional[AvailabilityCheckResult]:
        """Run one provider with retries; ``None`` when it does not cover the domain
        or only ever failed."""
        stats = self.provider_stats[provider.name]
        policy = self.retry_policy

        for attempt in range(policy.attempts):
            result = await provider.check(domain, abort)
            if result is None:
                stats['skipped'] += 1
                return None
            if result.error == ABORTED:
                return result
            if result.error is None:
                stats['success'] += 1
                return result

            stats['error'] += 1
            if attempt < policy.max_retries:
                logger.debug(
                    f"{provider.name} failed for {domain} ({result.error}), "
                    f"retry {attempt + 1}/{policy.max_retries}"
                )
                if not await policy.sleep(attempt, abort):
                    return _aborted(domain, provider.name)

        return None

    async def check_availability_batch(self,
                                       domains: Iterable[str],
                                       abort: Optional[asyncio.Event] = None) -> List[AvailabilityCheckResult]:
        """Check many domains with bounded concurrency.

        Domains are de-duplicated case-insensitively; the returned list is
        aligned with the unique domains in first-seen order.
        """
        unique = list(dict.fromkeys(domain.strip().lower() for domain in domains if domain and domain.strip()))
        results: List[Optional[AvailabilityCheckResult]] = [None] * len(unique)
        cursor = 0

        async def worker():
            nonlocal cursor
            while cursor < len(unique):
                index = cursor
                cursor += 1
                results[index] = await self.check_availability(unique[index], abort)

        started = time.perf_counter()
        workers = [worker() for _ in range(min(self.concurrency, len(unique)))]
        await asyncio.gather(*workers)
        logger.debug(
            f"Checked {len(unique)} domains in {(time.perf_counter() - started) * 1000:.0f}ms "
            f"(concurrency={self.concurrency})"
        )
        return [result for result in results if result is not None]

    def get_statistics(self) -> Dict:
        """Get resolver statistics."""
        return {
            'cache_size': len(self.cache),
            'cache_hits': self.cache.hits,
            'cache_misses': self.cache.misses,
            'degraded': self.degraded_count,
            'aborted': self.aborted_count,
            'providers': {
                provider.name: dict(self.provider_stats[provider.name])
                for provider in self.providers
            },
        }


def _aborted(domain: str, provider: str) -> AvailabilityCheckResult:
    return AvailabilityCheckResult(
        domain=domain,
        available=False,
        provider=provider,
        latency_ms=0.0,
        confidence=Confidence.LOW,
        error=ABORTED,
    )
