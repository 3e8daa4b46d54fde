"""Shared fixtures and fakes for the brandfinder test suite."""

import asyncio
from typing import Callable, List, Optional

import pytest

from brandfinder.checkers import AvailabilityOracle, DomainResult
from brandfinder.config import SearchSettings, Settings
from brandfinder.lexicon import load_lexicon


class FakeOracle(AvailabilityOracle):
    """Availability oracle driven by a verdict function; records every lookup."""

    def __init__(self, verdict: Callable[[str], Optional[bool]] = lambda domain: True,
                 error: Optional[str] = None):
        self.verdict = verdict
        self.error = error
        self.calls: List[List[str]] = []

    @property
    def checked(self) -> List[str]:
        return [domain for batch in self.calls for domain in batch]

    async def check_availability(self, domains, *, concurrency=8, max_retries=2,
                                 backoff_ms=160, ttl_seconds=86400):
        self.calls.append(list(domains))
        await asyncio.sleep(0)
        if self.error:
            return [DomainResult(domain=d, available=None, method='fake', error=self.error) for d in domains]
        return [DomainResult(domain=d, available=self.verdict(d), method='fake') for d in domains]


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0, step: float = 0.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture(scope='session')
def lexicon():
    return load_lexicon()


@pytest.fixture
def fast_settings():
    """Fewer stages and a smaller pool keep orchestrator tests quick."""
    return Settings(search=SearchSettings(max_attempts=3, pool_size=340, shortlist_size=120))
