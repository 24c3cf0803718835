"""
Configuration constants and JSON configuration loading for the crawler.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path

from second_order.utils.log import log

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_OUTPUT = "output"
DEFAULT_DEPTH = 1
DEFAULT_THREADS = 10

# ---------------------------------------------------------------------------
# Crawler tuning
# ---------------------------------------------------------------------------
REQUEST_TIMEOUT = 30           # seconds per page fetch
PROBE_TIMEOUT = 5              # seconds per non-200 probe
MAX_RETRIES = 3                # urllib3 retries on 5xx for page fetches
WORKER_POLL_INTERVAL = 0.5     # seconds between stop checks while waiting

# Content types handed to the HTML parser
HTML_CONTENT_TYPES = frozenset({"text/html", "application/xhtml+xml"})

# ---------------------------------------------------------------------------
# Output files, one per extractor category
# ---------------------------------------------------------------------------
CATEGORY_ATTRIBUTES = "attributes"
CATEGORY_NON200 = "non-200-url-attributes"
CATEGORY_INLINE = "inline"
CATEGORY_INLINE_SCRIPTS = "inline-scripts"

OUTPUT_FILES: dict[str, str] = {
    CATEGORY_ATTRIBUTES:     "attributes.json",
    CATEGORY_NON200:         "non-200-url-attributes.json",
    CATEGORY_INLINE:         "inline.json",
    CATEGORY_INLINE_SCRIPTS: "inline-scripts.json",
}
CRAWLED_URLS_FILE = "crawled-urls.txt"

# ---------------------------------------------------------------------------
# User-Agent rotation pool
# ---------------------------------------------------------------------------
USER_AGENTS = [
    # Chrome (Windows)
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    # Chrome (macOS)
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    # Chrome (Linux)
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    # Firefox (Windows)
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0",
    # Firefox (macOS)
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:133.0) Gecko/20100101 Firefox/133.0",
    # Firefox (Linux)
    "Mozilla/5.0 (X11; Linux x86_64; rv:133.0) Gecko/20100101 Firefox/133.0",
    # Safari (macOS)
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.6 Safari/605.1.15",
    # Edge (Windows)
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0",
]


class ConfigError(Exception):
    """Raised when the crawl cannot start because of invalid input."""


@dataclass(frozen=True)
class QuerySpec:
    """One ``tag[attribute]`` harvest rule from the configuration file."""

    key: str
    tag: str
    attribute: str


@dataclass
class CrawlConfig:
    """Decoded configuration file.  Missing keys disable the feature."""

    log_queries: list[QuerySpec] | None = None
    log_non200_queries: list[QuerySpec] | None = None
    log_inline: list[str] | None = None
    log_inline_js: bool = False
    log_crawled_urls: bool = False
    headers: dict[str, str] = field(default_factory=dict)
    depth: int | None = None
    excluded_urls: list[re.Pattern] = field(default_factory=list)
    excluded_status_codes: frozenset[int] = frozenset()


def query_selector(tag: str, attribute: str) -> str:
    """``("a", "href")`` → ``"a[href]"``"""
    return f"{tag}[{attribute}]"


def _expect(value, kind, name: str):
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"'{name}' must be of type {getattr(kind, '__name__', kind)}")
    return value


def _parse_queries(raw, name: str) -> list[QuerySpec]:
    """Decode ``{tag: attribute}`` or ``{name: {"tag": .., "attribute": ..}}``."""
    _expect(raw, dict, name)
    queries: list[QuerySpec] = []
    for key, value in raw.items():
        if isinstance(value, str):
            queries.append(QuerySpec(query_selector(key, value), key, value))
        elif isinstance(value, dict):
            tag = value.get("tag")
            attribute = value.get("attribute")
            if not isinstance(tag, str) or not isinstance(attribute, str) \
                    or not tag or not attribute:
                raise ConfigError(
                    f"'{name}.{key}' needs string 'tag' and 'attribute' fields"
                )
            queries.append(QuerySpec(key, tag, attribute))
        else:
            raise ConfigError(f"'{name}.{key}' must be a string or an object")
    return queries


def parse_config(data: dict) -> CrawlConfig:
    """Build a :class:`CrawlConfig` from a decoded JSON object."""
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a JSON object")

    config = CrawlConfig()

    if data.get("LogQueries") is not None:
        config.log_queries = _parse_queries(data["LogQueries"], "LogQueries")
    if data.get("LogNon200Queries") is not None:
        config.log_non200_queries = _parse_queries(
            data["LogNon200Queries"], "LogNon200Queries"
        )
    if data.get("LogInline") is not None:
        tags = _expect(data["LogInline"], list, "LogInline")
        for tag in tags:
            _expect(tag, str, "LogInline[]")
        config.log_inline = list(tags)

    config.log_inline_js = bool(_expect(data.get("LogInlineJS") or False, bool, "LogInlineJS"))
    config.log_crawled_urls = bool(
        _expect(data.get("LogCrawledURLs") or False, bool, "LogCrawledURLs")
    )

    headers = _expect(data.get("Headers") or {}, dict, "Headers")
    config.headers = {str(k): str(v) for k, v in headers.items()}

    if data.get("Depth") is not None:
        depth = _expect(data["Depth"], int, "Depth")
        if depth < 0:
            raise ConfigError("'Depth' must not be negative")
        config.depth = depth

    for pattern in _expect(data.get("ExcludedUrls") or [], list, "ExcludedUrls"):
        _expect(pattern, str, "ExcludedUrls[]")
        try:
            config.excluded_urls.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigError(f"invalid ExcludedUrls regex {pattern!r}: {exc}") from exc

    codes = _expect(data.get("ExcludedStatusCodes") or [], list, "ExcludedStatusCodes")
    for code in codes:
        _expect(code, int, "ExcludedStatusCodes[]")
    config.excluded_status_codes = frozenset(codes)

    return config


def load_config(path: str | Path) -> CrawlConfig:
    """Read and decode the JSON configuration file at *path*."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"could not open configuration file: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"could not decode configuration file: {exc}") from exc
    config = parse_config(data)
    log.debug("Loaded configuration from %s", path)
    return config


def parse_header_args(values: list[str] | None) -> dict[str, str]:
    """
    Turn ``"Name: Value"`` strings into a header mapping.

    Splits on the first colon and trims whitespace.  Entries without a
    colon or with an empty name are ignored.
    """
    headers: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition(":")
        name = name.strip()
        if not sep or not name:
            log.debug("Ignoring malformed header %r", raw)
            continue
        headers[name] = value.strip()
    return headers
