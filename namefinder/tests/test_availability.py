"""Tests for availability providers, cache and resolver."""

import asyncio
from typing import Dict, List, Optional

import httpx
import pytest

from namefinder.engine.availability import (
    AvailabilityCache, AvailabilityProvider, AvailabilityResolver, DnsOverHttpsProvider, RdapProvider,
)
from namefinder.engine.availability.resolver import AVAILABILITY_UNKNOWN
from namefinder.engine.models import AvailabilityCheckResult, Confidence
from namefinder.engine.retry import RetryPolicy


def result(domain: str, available: bool, provider: str = "stub", error: Optional[str] = None):
    return AvailabilityCheckResult(
        domain=domain,
        available=available,
        provider=provider,
        latency_ms=1.0,
        confidence=Confidence.LOW if error else Confidence.HIGH,
        error=error,
    )


class ScriptedProvider(AvailabilityProvider):
    """Provider returning queued outcomes; the last one repeats."""

    def __init__(self, name: str, outcomes: List[Dict], delay: float = 0.0):
        super().__init__()
        self.name = name
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def check(self, domain, abort=None):
        self.calls.append(domain)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        return result(domain, provider=self.name, **outcome)


def make_resolver(providers, **kwargs) -> AvailabilityResolver:
    kwargs.setdefault("backoff_seconds", 0.0)
    kwargs.setdefault("jitter_seconds", 0.0)
    return AvailabilityResolver(providers=providers, **kwargs)


class TestAvailabilityCache:
    """Test TTL behaviour with a hand-driven clock."""

    def test_hit_is_flagged_cached(self, clock):
        cache = AvailabilityCache(clock=clock)
        cache.set("Nova.com", result("nova.com", True), ttl_seconds=60)

        cached = cache.get("nova.com")
        assert cached is not None
        assert cached.cached
        assert cache.hits == 1

    def test_entry_expires_lazily(self, clock):
        cache = AvailabilityCache(clock=clock)
        cache.set("nova.com", result("nova.com", True), ttl_seconds=60)

        clock.advance(59)
        assert cache.get("nova.com") is not None
        clock.advance(2)
        assert cache.get("nova.com") is None
        assert len(cache) == 0

    def test_clear(self, clock):
        cache = AvailabilityCache(clock=clock)
        cache.set("nova.com", result("nova.com", True), ttl_seconds=60)
        cache.clear()
        assert len(cache) == 0


class TestDnsOverHttpsProvider:
    """Test DoH response interpretation."""

    def provider(self, handler) -> DnsOverHttpsProvider:
        return DnsOverHttpsProvider(transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_nxdomain_is_available(self):
        provider = self.provider(lambda request: httpx.Response(200, json={"Status": 3}))
        verdict = await provider.check("zorvik.com")

        assert verdict.available
        assert verdict.confidence == Confidence.HIGH
        assert verdict.provider == "dns_google_ns"
        assert verdict.error is None

    @pytest.mark.asyncio
    async def test_delegated_is_taken(self):
        payload = {"Status": 0, "Answer": [{"name": "google.com.", "type": 2, "data": "ns1.google.com."}]}
        provider = self.provider(lambda request: httpx.Response(200, json=payload))
        verdict = await provider.check("google.com")

        assert not verdict.available
        assert verdict.confidence == Confidence.HIGH

    @pytest.mark.asyncio
    async def test_empty_noerror_is_available_with_medium_confidence(self):
        provider = self.provider(lambda request: httpx.Response(200, json={"Status": 0}))
        verdict = await provider.check("zorvik.com")

        assert verdict.available
        assert verdict.confidence == Confidence.MEDIUM

    @pytest.mark.asyncio
    async def test_query_parameters(self):
        seen = []

        def handler(request: httpx.Request):
            seen.append(request)
            return httpx.Response(200, json={"Status": 3})

        await self.provider(handler).check("zorvik.com")

        assert seen[0].url.params["name"] == "zorvik.com"
        assert seen[0].url.params["type"] == "NS"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        provider = self.provider(lambda request: httpx.Response(503))
        verdict = await provider.check("zorvik.com")

        assert verdict.error == "dns_status_503"
        assert not verdict.available

    @pytest.mark.asyncio
    async def test_unknown_dns_status(self):
        provider = self.provider(lambda request: httpx.Response(200, json={"Status": 2}))
        verdict = await provider.check("zorvik.com")
        assert verdict.error == "dns_unknown_status_2"

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        provider = self.provider(lambda request: httpx.Response(200, json=["nope"]))
        verdict = await provider.check("zorvik.com")
        assert verdict.error == "dns_malformed_payload"

    @pytest.mark.asyncio
    async def test_transport_error_becomes_result(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        verdict = await self.provider(handler).check("zorvik.com")

        assert verdict.error
        assert verdict.confidence == Confidence.LOW

    @pytest.mark.asyncio
    async def test_abort_before_request(self):
        abort = asyncio.Event()
        abort.set()
        provider = self.provider(lambda request: httpx.Response(200, json={"Status": 3}))

        verdict = await provider.check("zorvik.com", abort)
        assert verdict.error == "aborted"


class TestRdapProvider:
    """Test RDAP response interpretation."""

    def provider(self, handler) -> RdapProvider:
        return RdapProvider(transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_not_found_is_available(self):
        verdict = await self.provider(lambda request: httpx.Response(404)).check("zorvik.com")

        assert verdict.available
        assert verdict.confidence == Confidence.MEDIUM
        assert verdict.provider == "rdap_verisign"

    @pytest.mark.asyncio
    async def test_found_is_taken(self):
        verdict = await self.provider(lambda request: httpx.Response(200, json={})).check("google.com")
        assert not verdict.available
        assert verdict.error is None

    @pytest.mark.asyncio
    async def test_other_status_is_error(self):
        verdict = await self.provider(lambda request: httpx.Response(429)).check("zorvik.com")
        assert verdict.error == "rdap_status_429"

    @pytest.mark.asyncio
    async def test_only_covers_com(self):
        verdict = await self.provider(lambda request: httpx.Response(404)).check("zorvik.io")
        assert verdict is None


class TestAvailabilityResolver:
    """Test caching, retries, fallback and batching."""

    @pytest.mark.asyncio
    async def test_repeat_check_served_from_cache(self):
        primary = ScriptedProvider("primary", [{"available": True}])
        resolver = make_resolver([primary])

        first = await resolver.check_availability("Zorvik.com")
        second = await resolver.check_availability("zorvik.com")

        assert first.available == second.available
        assert not first.cached
        assert second.cached
        assert primary.calls == ["zorvik.com"]

    @pytest.mark.asyncio
    async def test_falls_back_to_next_provider(self):
        primary = ScriptedProvider("primary", [{"available": False, "error": "dns_status_503"}])
        secondary = ScriptedProvider("secondary", [{"available": True}])
        resolver = make_resolver([primary, secondary], max_retries=1)

        verdict = await resolver.check_availability("zorvik.com")

        assert verdict.available
        assert verdict.provider == "secondary"
        assert len(primary.calls) == 2
        stats = resolver.get_statistics()
        assert stats['providers']['primary']['error'] == 2
        assert stats['providers']['secondary']['success'] == 1

    @pytest.mark.asyncio
    async def test_retry_recovers(self):
        primary = ScriptedProvider("primary", [
            {"available": False, "error": "timeout"},
            {"available": True},
        ])
        resolver = make_resolver([primary], max_retries=1)

        verdict = await resolver.check_availability("zorvik.com")

        assert verdict.available
        assert len(primary.calls) == 2

    @pytest.mark.asyncio
    async def test_all_providers_failing_degrades(self, clock):
        failing = ScriptedProvider("primary", [{"available": False, "error": "timeout"}])
        resolver = make_resolver([failing], cache=AvailabilityCache(clock=clock), max_retries=0)

        verdict = await resolver.check_availability("zorvik.com")

        assert not verdict.available
        assert verdict.provider == "none"
        assert verdict.confidence == Confidence.LOW
        assert verdict.error == AVAILABILITY_UNKNOWN

        # degraded verdicts only live for the short TTL
        clock.advance(61)
        await resolver.check_availability("zorvik.com")
        assert len(failing.calls) == 2

    @pytest.mark.asyncio
    async def test_clean_verdict_cached_for_full_ttl(self, clock):
        primary = ScriptedProvider("primary", [{"available": True}])
        resolver = make_resolver([primary], cache=AvailabilityCache(clock=clock))

        await resolver.check_availability("zorvik.com")
        clock.advance(3600)
        await resolver.check_availability("zorvik.com")

        assert len(primary.calls) == 1

    @pytest.mark.asyncio
    async def test_aborted_check_is_not_cached(self):
        abort = asyncio.Event()
        abort.set()
        provider = DnsOverHttpsProvider(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"Status": 3}))
        )
        resolver = make_resolver([provider])

        verdict = await resolver.check_availability("zorvik.com", abort)

        assert verdict.error == "aborted"
        assert len(resolver.cache) == 0

    @pytest.mark.asyncio
    async def test_batch_dedupes_case_insensitively(self):
        primary = ScriptedProvider("primary", [{"available": True}])
        resolver = make_resolver([primary])

        results = await resolver.check_availability_batch(["Nova.com", "nova.com", "halo.com", " NOVA.COM "])

        assert [r.domain for r in results] == ["nova.com", "halo.com"]
        assert sorted(primary.calls) == ["halo.com", "nova.com"]

    @pytest.mark.asyncio
    async def test_batch_checks_repeated_domain_once(self):
        primary = ScriptedProvider("primary", [{"available": False}])
        resolver = make_resolver([primary])

        results = await resolver.check_availability_batch(["x.com", "x.com", "x.com"])

        assert len(results) == 1
        assert primary.calls == ["x.com"]

    @pytest.mark.asyncio
    async def test_batch_respects_concurrency(self):
        primary = ScriptedProvider("primary", [{"available": True}], delay=0.01)
        resolver = make_resolver([primary], concurrency=3)

        domains = [f"name{i}.com" for i in range(10)]
        results = await resolver.check_availability_batch(domains)

        assert len(results) == 10
        assert primary.max_in_flight <= 3

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        resolver = make_resolver([ScriptedProvider("primary", [{"available": True}])])
        assert await resolver.check_availability_batch([]) == []


class TestRetryPolicy:
    """Test backoff timing."""

    def test_exponential_delay(self):
        policy = RetryPolicy(base_delay=0.1, jitter=0.0)

        assert policy.calculate_delay(0) == pytest.approx(0.1)
        assert policy.calculate_delay(2) == pytest.approx(0.4)

    def test_delay_capped(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=2.0, jitter=0.0)
        assert policy.calculate_delay(10) == pytest.approx(2.0)

    def test_jitter_bounded(self):
        policy = RetryPolicy(base_delay=0.1, jitter=0.05)
        assert all(0.1 <= policy.calculate_delay(0) <= 0.15 for _ in range(20))

    @pytest.mark.asyncio
    async def test_sleep_interrupted_by_abort(self):
        abort = asyncio.Event()
        abort.set()
        policy = RetryPolicy(base_delay=10.0, jitter=0.0)

        assert await policy.sleep(0, abort) is False
