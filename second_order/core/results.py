"""
Thread-safe aggregation of extraction results.

Layout: ``{page_url: {extractor_key: [value, ...]}}``
"""

import threading

Findings = dict[str, dict[str, list[str]]]


class ResultStore:
    """Accumulates extractor output from concurrent workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._content: Findings = {}

    def merge(self, page_url: str, key: str, values: list[str]) -> None:
        """Append *values* to the batch for (*page_url*, *key*)."""
        if not values:
            return
        with self._lock:
            page = self._content.setdefault(page_url, {})
            page.setdefault(key, []).extend(values)

    def snapshot(self) -> Findings:
        """Return a point-in-time deep copy, safe to serialise while
        workers keep merging."""
        with self._lock:
            return {
                page: {key: list(values) for key, values in batches.items()}
                for page, batches in self._content.items()
            }

    def __len__(self) -> int:
        """Number of pages with at least one recorded value."""
        with self._lock:
            return len(self._content)
