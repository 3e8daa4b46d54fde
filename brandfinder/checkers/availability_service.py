"""Combined availability checking service."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .dns_checker import DNSChecker
from .whois_checker import WhoisChecker
from ..utils.cache import DEFAULT_TTL_SECONDS, ResultCache

logger = logging.getLogger(__name__)

MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 16


@dataclass
class DomainResult:
    """Result of domain availability check."""
    domain: str
    available: Optional[bool]
    method: str
    cached: bool = False
    error: Optional[str] = None

    @property
    def is_available(self) -> bool:
        """Only a confirmed, error-free answer counts as available."""
        return self.available is True and not self.error

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'domain': self.domain,
            'available': self.available,
            'method': self.method,
            'cached': self.cached
        }
        if self.error:
            result['error'] = self.error
        return result


class AvailabilityOracle(ABC):
    """Anything that can tell whether fully-qualified domains are registrable."""

    @abstractmethod
    async def check_availability(
        self,
        domains: List[str],
        *,
        concurrency: int = 8,
        max_retries: int = 2,
        backoff_ms: int = 160,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> List[DomainResult]:
        """Return one result per input domain, in input order."""


class AvailabilityService(AvailabilityOracle):
    """DNS first, optional WHOIS confirmation, cached with a TTL."""

    def __init__(
        self,
        dns_timeout: float = 3.0,
        whois_timeout: float = 10.0,
        rate_limit_delay: float = 1.5,
        verify_with_whois: bool = False,
        use_cache: bool = True,
        dns_checker: Optional[DNSChecker] = None,
        whois_checker: Optional[WhoisChecker] = None,
    ):
        self.dns_checker = dns_checker or DNSChecker(timeout=dns_timeout)
        self.whois_checker = whois_checker or WhoisChecker(rate_limit_delay=rate_limit_delay)
        self.whois_timeout = whois_timeout
        self.verify_with_whois = verify_with_whois
        self.cache = ResultCache() if use_cache else None

    @classmethod
    def from_settings(cls, settings) -> "AvailabilityService":
        """Build from an ``AvailabilitySettings`` block."""
        return cls(
            dns_timeout=settings.dns_timeout,
            whois_timeout=settings.whois_timeout,
            rate_limit_delay=settings.rate_limit_delay,
            verify_with_whois=settings.verify_with_whois,
        )

    async def _verify_whois(self, domain: str) -> DomainResult:
        try:
            available, error = await asyncio.wait_for(
                asyncio.to_thread(self.whois_checker.check, domain), self.whois_timeout
            )
        except asyncio.TimeoutError:
            available, error = None, "whois timeout"
        if error:
            # DNS already said NXDOMAIN; keep that verdict but surface the failure
            logger.debug("WHOIS verification failed for %s: %s", domain, error)
            return DomainResult(domain=domain, available=True, method='dns')
        return DomainResult(domain=domain, available=available, method='whois')

    async def _check_single(self, domain: str, max_retries: int, backoff_ms: int) -> DomainResult:
        available, error = None, None
        for attempt in range(max_retries + 1):
            available, error = await self.dns_checker.lookup(domain)
            if error is None:
                break
            if attempt < max_retries:
                await asyncio.sleep(backoff_ms / 1000)

        if error:
            logger.warning("Availability lookup failed for %s: %s", domain, error)
            return DomainResult(domain=domain, available=None, method='dns', error=error)

        if available and self.verify_with_whois:
            return await self._verify_whois(domain)
        return DomainResult(domain=domain, available=available, method='dns')

    async def check_availability(
        self,
        domains: List[str],
        *,
        concurrency: int = 8,
        max_retries: int = 2,
        backoff_ms: int = 160,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> List[DomainResult]:
        concurrency = max(MIN_CONCURRENCY, min(MAX_CONCURRENCY, int(concurrency)))
        max_retries = max(0, int(max_retries))
        backoff_ms = max(0, int(backoff_ms))
        semaphore = asyncio.Semaphore(concurrency)
        pending: Dict[str, "asyncio.Task[DomainResult]"] = {}

        async def bounded(domain: str) -> DomainResult:
            async with semaphore:
                try:
                    result = await self._check_single(domain, max_retries, backoff_ms)
                except Exception as e:
                    logger.warning("Availability check crashed for %s: %s", domain, e)
                    result = DomainResult(domain=domain, available=None, method='dns',
                                          error=str(e) or e.__class__.__name__)
            if self.cache is not None:
                ttl = None if result.error else ttl_seconds
                self.cache.set(domain, result.available, result.method, result.error, ttl)
            return result

        results: List[Optional[DomainResult]] = []
        for domain in domains:
            domain = domain.strip().lower()
            cached = self.cache.get(domain) if self.cache is not None else None
            if cached is not None:
                results.append(DomainResult(domain=domain, available=cached['available'],
                                            method=cached['method'], cached=True, error=cached['error']))
                continue
            if domain not in pending:
                pending[domain] = asyncio.ensure_future(bounded(domain))
            results.append(None)

        try:
            fresh = dict(zip(pending, await asyncio.gather(*pending.values())))
        finally:
            for task in pending.values():
                if not task.done():
                    task.cancel()

        normalised = [d.strip().lower() for d in domains]
        return [result or fresh[domain] for result, domain in zip(results, normalised)]
