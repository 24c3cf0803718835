"""
URL resolution and crawl-scope helpers.
"""

import ipaddress
import re
import urllib.parse

_ALLOWED_SCHEMES = ("http", "https")

# Characters that can never appear in a parseable reference.
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")

_HOST_LABEL_RE = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]*[a-z0-9_])?$")


def resolve_url(href: str, base: str) -> str | None:
    """
    Resolve *href* against the page URL *base* (RFC 3986 reference
    resolution) and return the absolute URL.

    Returns ``None`` when *href* cannot be parsed or the result is not an
    ``http``/``https`` URL with a well-formed host.
    """
    href = href.strip()
    if _CONTROL_CHARS_RE.search(href):
        return None

    try:
        parsed = urllib.parse.urlsplit(href)
        if not parsed.scheme and not parsed.netloc:
            # A relative-path reference may not carry a colon in its
            # first segment (RFC 3986 §4.2), e.g. "not a url::".
            first_segment = parsed.path.split("/", 1)[0]
            if ":" in first_segment:
                return None
        absolute = urllib.parse.urljoin(base, href)
        result = urllib.parse.urlsplit(absolute)
        # Accessing .port validates the authority part.
        result.port
    except ValueError:
        return None

    if result.scheme.lower() not in _ALLOWED_SCHEMES or not result.hostname:
        return None
    if not is_valid_host(result.hostname):
        return None
    return absolute


def is_valid_host(host: str) -> bool:
    """Return True if *host* is an IP literal or a well-formed DNS name.

    Internationalised names are checked in their IDNA form.
    """
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    if len(ascii_host) > 253:
        return False
    labels = ascii_host.lower().rstrip(".").split(".")
    return all(_HOST_LABEL_RE.match(label) for label in labels)


def url_key(url: str) -> str:
    """Deduplication key: the URL without its fragment, with a lowercase
    scheme and host and an empty path written as ``/``."""
    parts = urllib.parse.urlsplit(urllib.parse.urldefrag(url)[0])
    parts = parts._replace(scheme=parts.scheme.lower(), netloc=parts.netloc.lower())
    if not parts.path:
        parts = parts._replace(path="/")
    return urllib.parse.urlunsplit(parts)


def registrable_domain(host: str) -> str:
    """
    Approximate the registrable domain of *host* as its last two labels.

    ``mail.example.com`` → ``example.com``.  Multi-label public suffixes
    are not recognised: ``foo.co.uk`` → ``co.uk``.
    """
    labels = host.lower().rstrip(".").split(".")
    return ".".join(labels[-2:])


def in_scope(candidate: str, seed: str) -> bool:
    """Return True if *candidate* shares the seed's registrable domain."""
    try:
        candidate_host = urllib.parse.urlsplit(candidate).hostname
        seed_host = urllib.parse.urlsplit(seed).hostname
    except ValueError:
        return False
    if not candidate_host or not seed_host:
        return False
    return registrable_domain(candidate_host) == registrable_domain(seed_host)


def as_probe_url(value: str) -> str | None:
    """
    Return *value* as an absolute http(s) URL suitable for probing, or
    ``None`` if it is relative or uses another scheme.

    Scheme-relative values (``//cdn.example.net/x.js``) are probed over
    plain ``http:``.
    """
    value = value.strip()
    if value.startswith("//"):
        value = "http:" + value
    try:
        parsed = urllib.parse.urlsplit(value)
    except ValueError:
        return None
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.hostname:
        return None
    return value
