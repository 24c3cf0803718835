"""
Visited set – the single gate deciding whether a URL may be scheduled.
"""

import threading


class VisitedSet:
    """Thread-safe set of scheduled URLs.

    URLs are kept in insertion order so that the crawled-URL list reads
    roughly in discovery order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._urls: dict[str, None] = {}

    def try_visit(self, url: str) -> bool:
        """Claim *url*.

        Returns True only to the single caller that inserted it; every
        other caller, concurrent or later, gets False.
        """
        with self._lock:
            if url in self._urls:
                return False
            self._urls[url] = None
            return True

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)

    def snapshot(self) -> list[str]:
        """Return the visited URLs in the order they were claimed."""
        with self._lock:
            return list(self._urls)
