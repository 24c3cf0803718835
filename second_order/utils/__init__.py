"""Utility helpers for URL resolution, crawl scope and logging."""

from second_order.utils.url import (
    as_probe_url,
    in_scope,
    is_valid_host,
    registrable_domain,
    resolve_url,
    url_key,
)
from second_order.utils.log import setup_logging, log

__all__ = [
    "as_probe_url",
    "in_scope",
    "is_valid_host",
    "registrable_domain",
    "resolve_url",
    "url_key",
    "setup_logging",
    "log",
]
