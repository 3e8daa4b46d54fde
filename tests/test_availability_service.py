"""
Tests for the availability oracle reference implementation
==========================================================
"""

import asyncio
from collections import Counter

import dns.exception
import dns.resolver
import pytest

from brandfinder.checkers import AvailabilityService, DNSChecker, DomainResult


class FakeDNS:
    """Scripted DNS verdicts; each domain pops answers until one is left."""

    def __init__(self, script=None, default=(True, None), delay=0.0):
        self.script = {domain: list(answers) for domain, answers in (script or {}).items()}
        self.default = default
        self.delay = delay
        self.calls = Counter()
        self.in_flight = 0
        self.max_in_flight = 0

    async def lookup(self, domain):
        self.calls[domain] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        answers = self.script.get(domain)
        if not answers:
            return self.default
        return answers.pop(0) if len(answers) > 1 else answers[0]


class CrashingDNS(FakeDNS):
    """Raises a non-DNS exception for the given domains."""

    def __init__(self, crash, **kwargs):
        super().__init__(**kwargs)
        self.crash = set(crash)

    async def lookup(self, domain):
        if domain in self.crash:
            self.calls[domain] += 1
            raise RuntimeError("socket gone")
        return await super().lookup(domain)


class FakeWhois:
    def __init__(self, verdict):
        self.verdict = verdict
        self.calls = []

    def check(self, domain):
        self.calls.append(domain)
        return self.verdict


def run(coro):
    return asyncio.run(coro)


class TestCheckAvailability:
    """Tests for AvailabilityService.check_availability."""

    def test_available_and_taken(self):
        dns_fake = FakeDNS({"taken.com": [(False, None)]})
        service = AvailabilityService(dns_checker=dns_fake)
        results = run(service.check_availability(["free.com", "taken.com"], backoff_ms=0))
        assert [r.domain for r in results] == ["free.com", "taken.com"]
        assert results[0].is_available
        assert results[1].available is False
        assert results[0].method == 'dns'

    def test_cached_second_time(self):
        dns_fake = FakeDNS()
        service = AvailabilityService(dns_checker=dns_fake)
        run(service.check_availability(["free.com"]))
        again = run(service.check_availability(["free.com"]))
        assert again[0].cached
        assert dns_fake.calls["free.com"] == 1

    def test_duplicates_in_one_call_checked_once(self):
        dns_fake = FakeDNS()
        service = AvailabilityService(dns_checker=dns_fake, use_cache=False)
        results = run(service.check_availability(["free.com", "FREE.com", "free.com"]))
        assert len(results) == 3
        assert dns_fake.calls["free.com"] == 1

    def test_retry_then_success(self):
        dns_fake = FakeDNS({"flaky.com": [(None, "dns timeout"), (True, None)]})
        service = AvailabilityService(dns_checker=dns_fake)
        result = run(service.check_availability(["flaky.com"], max_retries=2, backoff_ms=0))[0]
        assert result.is_available
        assert dns_fake.calls["flaky.com"] == 2

    def test_persistent_error(self):
        dns_fake = FakeDNS({"down.com": [(None, "dns timeout")]})
        service = AvailabilityService(dns_checker=dns_fake)
        result = run(service.check_availability(["down.com"], max_retries=2, backoff_ms=0))[0]
        assert result.available is None
        assert result.error == "dns timeout"
        assert not result.is_available
        assert dns_fake.calls["down.com"] == 3

    def test_errors_cached_briefly(self):
        dns_fake = FakeDNS({"down.com": [(None, "dns timeout")]})
        service = AvailabilityService(dns_checker=dns_fake)
        run(service.check_availability(["down.com"], max_retries=0, backoff_ms=0))
        entry = service.cache.get("down.com")
        assert entry['error'] == "dns timeout"
        assert entry['expires_at'] - service.cache._clock() <= 60

    def test_concurrency_bounded(self):
        dns_fake = FakeDNS(delay=0.01)
        service = AvailabilityService(dns_checker=dns_fake, use_cache=False)
        domains = [f"name{i}.com" for i in range(12)]
        run(service.check_availability(domains, concurrency=3))
        assert dns_fake.max_in_flight <= 3

    def test_unexpected_exception_becomes_error_result(self):
        dns_fake = CrashingDNS({"boom.com"}, delay=0.01)
        service = AvailabilityService(dns_checker=dns_fake)

        async def scenario():
            results = await service.check_availability(["free.com", "boom.com", "also.com"], backoff_ms=0)
            leftover = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
            return results, leftover

        results, leftover = run(scenario())
        assert [r.domain for r in results] == ["free.com", "boom.com", "also.com"]
        assert results[0].is_available and results[2].is_available
        assert results[1].available is None
        assert results[1].error == "socket gone"
        assert leftover == []
        assert service.cache.get("boom.com")['error'] == "socket gone"

    def test_concurrency_clamped(self):
        dns_fake = FakeDNS(delay=0.01)
        service = AvailabilityService(dns_checker=dns_fake, use_cache=False)
        run(service.check_availability([f"n{i}.com" for i in range(4)], concurrency=0))
        assert dns_fake.max_in_flight == 1


class TestWhoisVerification:
    """Tests for the optional WHOIS confirmation step."""

    def test_whois_overrides_dns(self):
        whois_fake = FakeWhois((False, None))
        service = AvailabilityService(verify_with_whois=True, dns_checker=FakeDNS(), whois_checker=whois_fake)
        result = run(service.check_availability(["free.com"]))[0]
        assert result.available is False
        assert result.method == 'whois'
        assert whois_fake.calls == ["free.com"]

    def test_whois_failure_keeps_dns_verdict(self):
        whois_fake = FakeWhois((None, "whois error: boom"))
        service = AvailabilityService(verify_with_whois=True, dns_checker=FakeDNS(), whois_checker=whois_fake)
        result = run(service.check_availability(["free.com"]))[0]
        assert result.is_available
        assert result.method == 'dns'

    def test_whois_skipped_for_taken(self):
        whois_fake = FakeWhois((True, None))
        service = AvailabilityService(verify_with_whois=True, dns_checker=FakeDNS(default=(False, None)),
                                      whois_checker=whois_fake)
        run(service.check_availability(["taken.com"]))
        assert whois_fake.calls == []


class FakeResolver:
    def __init__(self, exc=None):
        self.exc = exc

    async def resolve(self, domain, rdtype):
        if self.exc is not None:
            raise self.exc
        return ["ns1.example.net."]


class TestDNSChecker:
    """Tests for mapping resolver outcomes to verdicts."""

    @pytest.mark.parametrize('exc,expected', [
        (None, (False, None)),
        (dns.resolver.NXDOMAIN(), (True, None)),
        (dns.resolver.NoAnswer(), (False, None)),
        (dns.exception.Timeout(), (None, "dns timeout")),
    ])
    def test_lookup(self, exc, expected):
        checker = DNSChecker()
        checker._resolver = FakeResolver(exc)
        assert run(checker.lookup("example.com")) == expected

    def test_other_failure_is_error(self):
        checker = DNSChecker()
        checker._resolver = FakeResolver(dns.exception.DNSException("bad"))
        available, error = run(checker.lookup("example.com"))
        assert available is None
        assert error.startswith("dns error")


def test_domain_result_to_dict():
    assert DomainResult("a.com", None, "dns", error="x").to_dict() == {
        'domain': 'a.com', 'available': None, 'method': 'dns', 'cached': False, 'error': 'x',
    }
