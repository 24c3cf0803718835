"""
second_order
============
Scoped, depth-bounded web crawler for reconnaissance.  Starting from a
target URL it walks same-site pages and records, per page:

* HTML attribute values (``LogQueries``)
* links that error or answer non-200 – dangling resources that may be
  claimable (``LogNon200Queries``)
* inline element text and inline ``<script>`` bodies (``LogInline``,
  ``LogInlineJS``)

Package structure
-----------------
second_order/
├── __init__.py       – package init and public API
├── __main__.py       – ``python -m second_order``
├── cli.py            – argparse CLI, signal handling, exit codes
├── config.py         – constants and JSON configuration loader
├── session.py        – requests.Session factories
├── core/             – Crawler, VisitedSet, ResultStore, WorkTracker, storage
├── extraction/       – HTML parsing, extractor pipeline, non-200 prober
└── utils/            – URL resolution / scope checks, logging

Quick start
-----------
    from second_order import (
        Crawler, ExtractionPipeline, NonOkProber, ResultStore,
        build_extractors, build_probe_session, build_session, load_config,
    )

    config = load_config("config.json")
    session = build_session()
    pipeline = ExtractionPipeline(
        build_extractors(config), NonOkProber(build_probe_session())
    )
    results = {ex.category: ResultStore() for ex in pipeline.extractors}
    crawler = Crawler("https://example.com/", session, pipeline, results, max_depth=2)
    crawler.run()
    print(crawler.snapshot())
"""

from .config import ConfigError, CrawlConfig, load_config
from .core import Crawler, Job, ResultStore, VisitedSet, WorkTracker
from .extraction import ExtractionPipeline, NonOkProber, build_extractors
from .session import build_probe_session, build_session
from .utils import in_scope, resolve_url

__all__ = [
    "ConfigError",
    "CrawlConfig",
    "load_config",
    "Crawler",
    "Job",
    "ResultStore",
    "VisitedSet",
    "WorkTracker",
    "ExtractionPipeline",
    "NonOkProber",
    "build_extractors",
    "build_probe_session",
    "build_session",
    "in_scope",
    "resolve_url",
]
