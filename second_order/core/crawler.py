"""
Concurrent, depth-bounded crawler.

Starting from a seed URL, a fixed pool of worker threads fetches pages
from a shared job queue, runs the extraction pipeline on each page and
feeds same-site links back into the queue one level shallower.

* Bounded worker pool (one in-flight page fetch per worker)
* Race-free deduplication through :class:`VisitedSet`
* Outstanding-work counter for termination (:class:`WorkTracker`)
* Early exit on request – in-flight fetches are abandoned
* 429 / non-2xx / non-HTML responses are logged and dropped
"""

import queue
import threading
from dataclasses import dataclass

import requests

try:
    from tqdm import tqdm as _tqdm
    _TQDM_AVAILABLE = True
except ImportError:
    _TQDM_AVAILABLE = False

from second_order.config import (
    DEFAULT_DEPTH,
    DEFAULT_THREADS,
    HTML_CONTENT_TYPES,
    REQUEST_TIMEOUT,
)
from second_order.core.results import Findings, ResultStore
from second_order.core.tracker import WorkTracker
from second_order.core.visited import VisitedSet
from second_order.extraction.extractors import ExtractionPipeline
from second_order.extraction.html_parser import (
    DocumentParseError,
    document_base,
    extract_links,
    parse_document,
)
from second_order.session import random_user_agent
from second_order.utils.log import log
from second_order.utils.url import in_scope, url_key


@dataclass(frozen=True)
class Job:
    """One page to crawl and the depth budget left for it."""

    url: str
    depth: int


class Crawler:
    """
    Scoped crawler.  A job at depth *d* > 1 fans out to its in-scope links
    at depth *d* - 1; a job at depth 1 is fetched and extracted only.
    """

    def __init__(
        self,
        start_url: str,
        session: requests.Session,
        pipeline: ExtractionPipeline,
        results: dict[str, ResultStore],
        visited: VisitedSet | None = None,
        max_depth: int = DEFAULT_DEPTH,
        concurrency: int = DEFAULT_THREADS,
        request_timeout: float | None = REQUEST_TIMEOUT,
        rotate_user_agent: bool = True,
        show_progress: bool = False,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.start_url = start_url
        self.session = session
        self.pipeline = pipeline
        self.results = results
        self.visited = visited if visited is not None else VisitedSet()
        self.max_depth = max_depth
        self.concurrency = concurrency
        self.request_timeout = request_timeout
        self.rotate_user_agent = rotate_user_agent
        self.show_progress = show_progress and _TQDM_AVAILABLE

        self._queue: queue.Queue[Job | None] = queue.Queue()
        self._tracker = WorkTracker()
        self._workers: list[threading.Thread] = []
        self._bar = None
        self._stats_lock = threading.Lock()
        self._stats = {"fetched": 0, "err": 0, "skip": 0, "rate_limited": 0}

        missing = {ex.category for ex in pipeline.extractors} - set(results)
        if missing:
            raise ValueError(f"no result store for: {', '.join(sorted(missing))}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> bool:
        """Crawl until no work is outstanding or :meth:`stop` is called.

        Returns True on normal completion, False when stopped early.
        """
        log.info("Target URL       : %s", self.start_url)
        log.info("Max depth        : %d", self.max_depth)
        log.info("Workers          : %d", self.concurrency)
        log.info("Extractors       : %d", len(self.pipeline.extractors))

        if not self._schedule(url_key(self.start_url), self.max_depth):
            log.warning("Nothing to crawl (depth %d)", self.max_depth)
            return True

        if self.show_progress:
            self._bar = _tqdm(desc="Crawling", unit="page", dynamic_ncols=True)

        for n in range(self.concurrency):
            t = threading.Thread(
                target=self._worker, name=f"worker-{n + 1}", daemon=True
            )
            t.start()
            self._workers.append(t)

        completed = self._tracker.wait()

        if completed:
            for _ in self._workers:
                self._queue.put(None)
            for t in self._workers:
                t.join()
        else:
            log.warning(
                "[INTERRUPT] Crawl stopped with %d job(s) outstanding",
                self._tracker.outstanding,
            )

        if self._bar is not None:
            self._bar.close()

        stats = self.stats
        log.info(
            "Crawl %s. visited=%d  fetched=%d  skip=%d  429=%d  err=%d  "
            "probed=%d  non200=%d",
            "complete" if completed else "interrupted",
            len(self.visited),
            stats["fetched"],
            stats["skip"],
            stats["rate_limited"],
            stats["err"],
            stats["probed"],
            stats["non200"],
        )
        return completed

    def stop(self) -> None:
        """Stop accepting new work and make :meth:`run` return."""
        self._tracker.stop()

    def snapshot(self) -> dict[str, Findings]:
        """Point-in-time copy of every result category."""
        return {category: store.snapshot() for category, store in self.results.items()}

    @property
    def stats(self) -> dict[str, int]:
        with self._stats_lock:
            stats = dict(self._stats)
        prober = self.pipeline.prober
        stats["probed"] = prober.probed if prober else 0
        stats["non200"] = prober.flagged if prober else 0
        return stats

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _schedule(self, url: str, depth: int) -> bool:
        """Queue *url* at *depth* if it has budget left and is unclaimed."""
        if depth <= 0:
            return False
        if not self.visited.try_visit(url):
            return False
        # Count the job before it becomes visible to workers.
        self._tracker.add()
        self._queue.put(Job(url, depth))
        return True

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    def _worker(self) -> None:
        while True:
            job = self._queue.get()
            if job is None:
                return
            try:
                if self._tracker.stopped:
                    log.debug("[SKIP] Stopping – dropped %s", job.url)
                else:
                    self._process(job)
            except Exception:
                log.exception("[ERR] Unexpected error while processing %s", job.url)
                self._count("err")
            finally:
                self._tracker.done()
                self._update_progress()

    def _update_progress(self) -> None:
        if self._bar is None:
            return
        with self._stats_lock:
            self._bar.total = self._tracker.submitted
            self._bar.update(1)
            self._bar.set_postfix(queued=self._tracker.outstanding)

    def _process(self, job: Job) -> None:
        resp = self._fetch(job)
        if resp is None or self._tracker.stopped:
            return

        try:
            soup = parse_document(resp.content)
        except DocumentParseError as exc:
            log.warning("[ERR] Could not parse %s – %s", job.url, exc)
            self._count("err")
            return

        base = document_base(soup, resp.url or job.url)

        # Fan-out first so probes never delay link discovery.
        if job.depth > 1:
            self._expand(job, soup, base)

        for extractor, values in self.pipeline.run(soup):
            self.results[extractor.category].merge(job.url, extractor.key, values)
            log.debug("  %s: +%d value(s) on %s", extractor.key, len(values), job.url)

    def _fetch(self, job: Job) -> requests.Response | None:
        """GET the job's page.  Returns ``None`` when the job is dropped."""
        log.info("[GET] %s (depth %d)", job.url, job.depth)
        headers = {"User-Agent": random_user_agent()} if self.rotate_user_agent else None
        try:
            resp = self.session.get(
                job.url,
                timeout=self.request_timeout,
                allow_redirects=True,
                headers=headers,
            )
        except requests.RequestException as exc:
            log.warning("[ERR] Request failed for %s – %s", job.url, exc)
            self._count("err")
            return None

        if resp.status_code == 429:
            log.warning("[429] Rate limited on %s – dropping", job.url)
            self._count("rate_limited")
            return None

        if not resp.ok:
            log.warning("HTTP %s for %s – skipping", resp.status_code, job.url)
            self._count("err")
            return None

        final_url = resp.url or job.url
        if url_key(final_url) != url_key(job.url):
            if not in_scope(final_url, self.start_url):
                log.debug("  Redirect to out-of-scope %s – skipping", final_url)
                self._count("skip")
                return None
            # The redirect target is crawled once, by whichever job claims it.
            if not self.visited.try_visit(url_key(final_url)):
                log.debug("[SKIP] Redirect to already visited %s", final_url)
                self._count("skip")
                return None
            log.debug("  Redirect: %s → %s", job.url, final_url)

        content_type = resp.headers.get("Content-Type", "")
        ct = content_type.split(";")[0].strip().lower()
        if ct not in HTML_CONTENT_TYPES:
            log.debug("[SKIP] Non-HTML (%s): %s", ct or "no content type", job.url)
            self._count("skip")
            return None

        self._count("fetched")
        return resp

    def _expand(self, job: Job, soup, base: str) -> int:
        """Schedule the page's unvisited in-scope links at depth - 1."""
        added = 0
        for link in extract_links(soup, base):
            if not in_scope(link, self.start_url):
                continue
            child = url_key(link)
            if self._tracker.stopped:
                break
            if self._schedule(child, job.depth - 1):
                log.info("[QUEUE] %s", child)
                added += 1
        if added:
            log.debug("  +%d new URLs enqueued from %s", added, job.url)
        return added
