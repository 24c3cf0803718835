"""
HTML parsing and CSS-selector harvesting via BeautifulSoup.
"""

import soupsieve
from bs4 import BeautifulSoup

from second_order.utils.log import log
from second_order.utils.url import resolve_url

try:
    import lxml  # noqa: F401
    _BS4_PARSER = "lxml"
except ImportError:
    _BS4_PARSER = "html.parser"

# Built-in fan-out selector, always applied regardless of configuration.
LINK_SELECTOR = "a[href]"


class DocumentParseError(Exception):
    """Raised when a fetched page cannot be parsed as HTML."""


def parse_document(markup: str | bytes) -> BeautifulSoup:
    """Parse *markup* into a BeautifulSoup tree."""
    try:
        return BeautifulSoup(markup, _BS4_PARSER)
    except Exception as exc:
        raise DocumentParseError(str(exc)) from exc


def validate_selector(selector: str) -> None:
    """Raise ``ValueError`` if *selector* is not a valid CSS selector."""
    try:
        soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as exc:
        raise ValueError(f"invalid selector {selector!r}: {exc}") from exc


def _attr_text(value) -> str:
    # Multi-valued attributes (class, rel, ...) come back as lists.
    if isinstance(value, list):
        return " ".join(value)
    return value


def select_attributes(soup: BeautifulSoup, selector: str, attribute: str) -> list[str]:
    """Return *attribute* of every element matching *selector*, in
    document order."""
    return [
        _attr_text(el.get(attribute))
        for el in soup.select(selector)
        if el.has_attr(attribute)
    ]


def select_text(soup: BeautifulSoup, selector: str) -> list[str]:
    """Return the text content of every element matching *selector*.

    Whitespace-only bodies are skipped.
    """
    texts = []
    for el in soup.select(selector):
        text = el.get_text()
        if text.strip():
            texts.append(text)
    return texts


def document_base(soup: BeautifulSoup, page_url: str) -> str:
    """Return the URL relative links resolve against, honouring
    ``<base href>``."""
    base_el = soup.find("base", href=True)
    if base_el is not None:
        resolved = resolve_url(_attr_text(base_el["href"]), page_url)
        if resolved:
            return resolved
    return page_url


def extract_links(soup: BeautifulSoup, base: str) -> list[str]:
    """
    Return every ``a[href]`` target resolved against *base*, deduplicated
    in document order.  Unparseable and non-http(s) links are skipped.
    """
    found: dict[str, None] = {}
    for href in select_attributes(soup, LINK_SELECTOR, "href"):
        absolute = resolve_url(href, base)
        if absolute is None:
            log.debug("  Skipping unresolvable link %r on %s", href, base)
            continue
        found[absolute] = None
    return list(found)
