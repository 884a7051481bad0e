"""Shared fixtures for namefinder tests."""

from typing import Dict, List, Optional

import pytest

from namefinder.engine.models import AvailabilityCheckResult, Confidence
from namefinder.engine.vocabulary import load_vocabulary


class FakeClock:
    """Monotonic clock moved by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class StubResolver:
    """Resolver double with scripted availability.

    ``available_first`` marks the first N unique domains ever checked as
    available; ``verdicts`` overrides individual domains.
    """

    def __init__(self,
                 available_first: int = 0,
                 verdicts: Optional[Dict[str, bool]] = None,
                 errors: Optional[Dict[str, str]] = None):
        self.available_first = available_first
        self.verdicts = verdicts or {}
        self.errors = errors or {}
        self.checked: List[str] = []
        self.batches: List[List[str]] = []

    async def check_availability_batch(self, domains, abort=None) -> List[AvailabilityCheckResult]:
        batch = list(dict.fromkeys(d.lower() for d in domains))
        self.batches.append(batch)
        results = []
        for domain in batch:
            if domain not in self.checked:
                self.checked.append(domain)
            if domain in self.errors:
                results.append(AvailabilityCheckResult(
                    domain=domain, available=False, provider="none",
                    latency_ms=0.0, confidence=Confidence.LOW, error=self.errors[domain],
                ))
                continue
            available = self.verdicts.get(domain, self.checked.index(domain) < self.available_first)
            results.append(AvailabilityCheckResult(
                domain=domain, available=available, provider="stub",
                latency_ms=1.0, confidence=Confidence.HIGH,
            ))
        return results


@pytest.fixture(scope="session")
def vocabulary():
    return load_vocabulary()


@pytest.fixture
def clock():
    return FakeClock()
