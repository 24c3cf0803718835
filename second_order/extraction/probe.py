"""
Non-200 probing of harvested links.

A link is *interesting* when requesting it fails outright (DNS failure,
refused connection, timeout) or answers with anything but HTTP 200: both
suggest an abandoned resource that someone else could claim.
"""

import re
import threading
from typing import Iterable

import requests

from second_order.config import PROBE_TIMEOUT
from second_order.utils.log import log
from second_order.utils.url import as_probe_url


class NonOkProber:
    """Probes links with a short timeout and caches the verdict per URL."""

    def __init__(
        self,
        session: requests.Session,
        timeout: float = PROBE_TIMEOUT,
        excluded_urls: Iterable[re.Pattern] = (),
        excluded_status_codes: Iterable[int] = (),
    ) -> None:
        self.session = session
        self.timeout = timeout
        self.excluded_urls = list(excluded_urls)
        self.excluded_status_codes = frozenset(excluded_status_codes)
        self._lock = threading.Lock()
        self._cache: dict[str, bool] = {}
        self.probed = 0
        self.flagged = 0

    def is_excluded(self, value: str) -> bool:
        return any(p.search(value) for p in self.excluded_urls)

    def check(self, url: str) -> bool:
        """Return True if *url* errors or does not answer HTTP 200."""
        with self._lock:
            cached = self._cache.get(url)
        if cached is not None:
            return cached

        interesting = self._request(url)
        with self._lock:
            if url not in self._cache:
                self._cache[url] = interesting
                self.probed += 1
                if interesting:
                    self.flagged += 1
        return interesting

    def _request(self, url: str) -> bool:
        try:
            resp = self.session.get(
                url, timeout=self.timeout, allow_redirects=True, stream=True
            )
        except requests.RequestException as exc:
            log.info("[NON-200] %s – request failed: %s", url, exc)
            return True

        status = resp.status_code
        resp.close()
        if status == 200:
            log.debug("  [PROBE] %s → 200", url)
            return False
        if status in self.excluded_status_codes:
            log.debug("  [PROBE] %s → %d (excluded status)", url, status)
            return False
        log.info("[NON-200] %s → HTTP %d", url, status)
        return True

    def filter(self, values: list[str]) -> list[str]:
        """Return the subset of *values* worth recording, in order.

        Relative, non-http(s) and excluded values are never probed.
        """
        interesting: list[str] = []
        for value in values:
            url = as_probe_url(value)
            if url is None:
                continue
            if self.is_excluded(value):
                log.debug("  [PROBE] %s matches an exclusion – skipped", value)
                continue
            if self.check(url):
                interesting.append(value)
        return interesting
