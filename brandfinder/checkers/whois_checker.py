"""WHOIS-based domain availability checker."""

import threading
import time
from typing import Optional, Tuple

import whois
from whois.exceptions import WhoisDomainNotFoundError

RATE_LIMIT_PATTERNS = ('rate limit', 'too many requests', 'quota exceeded', 'try again later', 'blocked')
AVAILABLE_PATTERNS = ('no match', 'not found', 'no entries', 'available', 'domain not found')
REGISTERED_PATTERNS = ('registered', 'exists')


def classify_error(message: str) -> Optional[bool]:
    """Read an availability verdict out of a WHOIS error message, if any."""
    text = message.lower()
    if any(p in text for p in AVAILABLE_PATTERNS):
        return True
    if any(p in text for p in REGISTERED_PATTERNS):
        return False
    return None


class WhoisChecker:
    """Blocking WHOIS verification with a shared rate limit.

    Runs in worker threads, so request spacing is guarded by a lock.
    """

    def __init__(self, rate_limit_delay: float = 1.5, backoff_delay: float = 5.0):
        self.rate_limit_delay = rate_limit_delay
        self.backoff_delay = backoff_delay
        self._lock = threading.Lock()
        self._last_request_time = 0.0
        self._consecutive_errors = 0

    def _wait_for_rate_limit(self):
        with self._lock:
            # Back off further while the server keeps refusing us
            extra_delay = min(self._consecutive_errors * 2, 30)
            wait = self.rate_limit_delay + extra_delay - (time.monotonic() - self._last_request_time)
            if wait > 0:
                time.sleep(wait)
            self._last_request_time = time.monotonic()

    def check(self, domain: str, retry: bool = True) -> Tuple[Optional[bool], Optional[str]]:
        """Return ``(available, error)``; ``available`` is None on failure."""
        self._wait_for_rate_limit()

        try:
            record = whois.whois(domain)
        except WhoisDomainNotFoundError:
            self._consecutive_errors = 0
            return True, None
        except Exception as e:
            message = str(e)
            if any(p in message.lower() for p in RATE_LIMIT_PATTERNS):
                self._consecutive_errors += 1
                if retry:
                    time.sleep(self.backoff_delay)
                    return self.check(domain, retry=False)
                return None, f"whois rate limited: {message}"

            verdict = classify_error(message)
            if verdict is not None:
                self._consecutive_errors = 0
                return verdict, None

            self._consecutive_errors += 1
            return None, f"whois error: {message}"

        self._consecutive_errors = 0
        # No domain_name in the record means the registry has nothing on file
        return record.domain_name is None, None
