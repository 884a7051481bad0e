"""Registry lookups over HTTP: DNS-over-HTTPS NS queries and RDAP.

Providers never raise for lookup failures. Transport errors, unexpected
statuses and malformed payloads come back as results with ``error`` set.
"""

import asyncio
import time
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from ..errors import ProviderError
from ..models import AvailabilityCheckResult, Confidence

ABORTED = "aborted"


class _Aborted(Exception):
    pass


class AvailabilityProvider:
    """Base class for availability providers."""

    name = "provider"
    headers: Dict[str, str] = {}

    def __init__(self,
                 timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.timeout = timeout
        self.transport = transport

    def supports(self, domain: str) -> bool:
        return True

    async def check(self,
                    domain: str,
                    abort: Optional[asyncio.Event] = None) -> Optional[AvailabilityCheckResult]:
        """Look up ``domain``; ``None`` means this provider does not cover it."""
        if not self.supports(domain):
            return None

        started = time.perf_counter()
        if abort is not None and abort.is_set():
            return self._result(domain, started, error=ABORTED)

        try:
            response = await self._get(self.url_for(domain), abort)
            return self.interpret(domain, response, started)
        except _Aborted:
            return self._result(domain, started, error=ABORTED)
        except ProviderError as e:
            logger.debug(f"{self.name} could not interpret response for {domain}: {e}")
            return self._result(domain, started, error=str(e))
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"{self.name} request failed for {domain}: {e}")
            return self._result(domain, started, error=str(e) or f"{self.name}_error")

    def url_for(self, domain: str) -> str:
        raise NotImplementedError

    def interpret(self, domain: str, response: httpx.Response, started: float) -> AvailabilityCheckResult:
        raise NotImplementedError

    async def _get(self, url: str, abort: Optional[asyncio.Event]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            request = asyncio.ensure_future(client.get(url, headers=self.headers))
            if abort is None:
                return await request

            waiter = asyncio.ensure_future(abort.wait())
            done, _ = await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if request in done:
                waiter.cancel()
                return request.result()

            request.cancel()
            await asyncio.gather(request, return_exceptions=True)
            raise _Aborted()

    def _result(self,
                domain: str,
                started: float,
                available: bool = False,
                confidence: Confidence = Confidence.LOW,
                error: Optional[str] = None) -> AvailabilityCheckResult:
        return AvailabilityCheckResult(
            domain=domain,
            available=available,
            provider=self.name,
            latency_ms=round((time.perf_counter() - started) * 1000, 2),
            confidence=confidence,
            error=error,
        )


class DnsOverHttpsProvider(AvailabilityProvider):
    """NS lookup through a DNS-over-HTTPS JSON endpoint."""

    name = "dns_google_ns"
    headers = {"Accept": "application/dns-json"}

    def __init__(self,
                 endpoint: str = "https://dns.google/resolve",
                 timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport)
        self.endpoint = endpoint

    def url_for(self, domain: str) -> str:
        return f"{self.endpoint}?name={domain}&type=NS"

    def interpret(self, domain: str, response: httpx.Response, started: float) -> AvailabilityCheckResult:
        if not response.is_success:
            return self._result(domain, started, error=f"dns_status_{response.status_code}")

        data: Any = response.json()
        if not isinstance(data, dict) or not isinstance(data.get("Status"), int):
            raise ProviderError("dns_malformed_payload", status=response.status_code)

        status = data["Status"]
        if status == 3:
            # NXDOMAIN
            return self._result(domain, started, available=True, confidence=Confidence.HIGH)

        if status == 0:
            delegated = bool(data.get("Answer")) or bool(data.get("Authority"))
            return self._result(
                domain,
                started,
                available=not delegated,
                confidence=Confidence.HIGH if delegated else Confidence.MEDIUM,
            )

        return self._result(domain, started, error=f"dns_unknown_status_{status}")


class RdapProvider(AvailabilityProvider):
    """RDAP lookup against the .com registry; other TLDs are not covered."""

    name = "rdap_verisign"
    headers = {"Accept": "application/rdap+json,application/json"}

    def __init__(self,
                 endpoint: str = "https://rdap.verisign.com/com/v1/domain",
                 timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport)
        self.endpoint = endpoint.rstrip("/")

    def supports(self, domain: str) -> bool:
        return domain.lower().endswith(".com")

    def url_for(self, domain: str) -> str:
        return f"{self.endpoint}/{domain}"

    def interpret(self, domain: str, response: httpx.Response, started: float) -> AvailabilityCheckResult:
        if response.status_code == 404:
            return self._result(domain, started, available=True, confidence=Confidence.MEDIUM)
        if response.is_success:
            return self._result(domain, started, available=False, confidence=Confidence.MEDIUM)
        return self._result(domain, started, error=f"rdap_status_{response.status_code}")
