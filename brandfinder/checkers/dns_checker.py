"""DNS-based domain availability checker."""

from typing import Optional, Tuple

import dns.asyncresolver
import dns.exception
import dns.resolver

Verdict = Tuple[Optional[bool], Optional[str]]


class DNSChecker:
    """Fast DNS-based availability pre-filter.

    A registered domain has NS records at its TLD. NXDOMAIN means nothing is
    delegated, which is the strongest cheap signal that the name is free.
    """

    def __init__(self, timeout: float = 3.0):
        self.timeout = timeout
        self._resolver: Optional[dns.asyncresolver.Resolver] = None

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            resolver = dns.asyncresolver.Resolver()
            resolver.timeout = self.timeout
            resolver.lifetime = self.timeout
            self._resolver = resolver
        return self._resolver

    async def lookup(self, domain: str) -> Verdict:
        """Return ``(available, error)`` for one domain.

        ``available`` is None whenever ``error`` is set.
        """
        try:
            await self._get_resolver().resolve(domain, 'NS')
            return False, None  # Delegated, registered
        except dns.resolver.NXDOMAIN:
            return True, None
        except dns.resolver.NoAnswer:
            return False, None  # Name exists without its own NS set
        except dns.resolver.NoNameservers as e:
            return None, f"no nameservers answered: {e}"
        except dns.exception.Timeout:
            return None, "dns timeout"
        except dns.exception.DNSException as e:
            return None, f"dns error: {e}"
