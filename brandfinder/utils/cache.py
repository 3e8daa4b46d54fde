"""Caching utilities for domain check results."""

import time
from typing import Any, Callable, Dict, Optional

DEFAULT_TTL_SECONDS = 24 * 60 * 60
ERROR_TTL_SECONDS = 60


class ResultCache:
    """Process-local TTL cache for domain availability results.

    Failed lookups are kept only briefly so a flaky provider gets retried on
    the next run.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 error_ttl_seconds: float = ERROR_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.error_ttl_seconds = error_ttl_seconds
        self._clock = clock
        self._cache: Dict[str, Dict[str, Any]] = {}

    def get(self, domain: str) -> Optional[Dict]:
        """Get cached result if not expired."""
        entry = self._cache.get(domain)
        if entry is None:
            return None

        if self._clock() >= entry['expires_at']:
            del self._cache[domain]
            return None

        return entry

    def set(self, domain: str, available: Optional[bool], method: str = "dns",
            error: Optional[str] = None, ttl_seconds: Optional[float] = None):
        """Cache a domain check result."""
        if ttl_seconds is None:
            ttl_seconds = self.error_ttl_seconds if error else self.ttl_seconds
        if ttl_seconds <= 0:
            return
        self._cache[domain] = {
            'available': available,
            'method': method,
            'error': error,
            'expires_at': self._clock() + ttl_seconds,
        }
