"""
HTTP session creation for the crawler.

Provides sessions with:
* Automatic retry logic on 5xx errors (page fetches only, never on 429)
* User-Agent rotation
* Caller-supplied headers applied to every request
* Optional TLS verification bypass
"""

import random

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from second_order.config import MAX_RETRIES, USER_AGENTS

_DEFAULT_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}


def random_user_agent() -> str:
    """Return a random browser User-Agent string."""
    return random.choice(USER_AGENTS)


def _prepare(
    session: requests.Session,
    verify_ssl: bool,
    headers: dict[str, str] | None,
) -> requests.Session:
    session.verify = verify_ssl
    session.headers.update(_DEFAULT_HEADERS)
    session.headers["User-Agent"] = random_user_agent()
    if headers:
        session.headers.update(headers)
    if not verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def build_session(
    verify_ssl: bool = True,
    headers: dict[str, str] | None = None,
    pool_size: int = 10,
) -> requests.Session:
    """Return a ``requests.Session`` for page fetches with retry logic,
    keep-alive, a randomised User-Agent and the configured headers.

    The connection pool is sized to the worker count so that concurrent
    workers never block on a free connection.
    """
    session = requests.Session()
    retry = Retry(
        total=MAX_RETRIES,
        backoff_factor=0.5,
        status_forcelist=[500, 502, 503, 504],
        # Retry-After would otherwise make urllib3 retry and sleep on 429.
        respect_retry_after_header=False,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return _prepare(session, verify_ssl, headers)


def build_probe_session(
    verify_ssl: bool = True,
    headers: dict[str, str] | None = None,
    pool_size: int = 10,
) -> requests.Session:
    """Return a ``requests.Session`` for non-200 probes.

    No retries: a failing or erroring link is exactly what the probe is
    looking for.
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        max_retries=0,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return _prepare(session, verify_ssl, headers)
