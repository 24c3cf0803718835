"""
Extractor descriptors and the per-page extraction pipeline.

Every configured extractor is applied, in a fixed order, to the single
parsed document of a page.
"""

import enum
from dataclasses import dataclass
from typing import Iterator

from bs4 import BeautifulSoup

from second_order.config import (
    CATEGORY_ATTRIBUTES,
    CATEGORY_INLINE,
    CATEGORY_INLINE_SCRIPTS,
    CATEGORY_NON200,
    ConfigError,
    CrawlConfig,
    query_selector,
)
from second_order.extraction.html_parser import (
    select_attributes,
    select_text,
    validate_selector,
)
from second_order.extraction.probe import NonOkProber

INLINE_SCRIPT_SELECTOR = "script:not([src])"


class ExtractorKind(enum.Enum):
    ATTRIBUTE_VALUE = "attribute"
    ELEMENT_TEXT = "text"
    NON_OK_PROBE = "non-200"


@dataclass(frozen=True)
class Extractor:
    """What to harvest from a page and where to record it."""

    key: str
    category: str
    kind: ExtractorKind
    tag: str
    attribute: str | None = None

    @property
    def selector(self) -> str:
        if self.attribute is None:
            return self.tag
        return query_selector(self.tag, self.attribute)


def build_extractors(config: CrawlConfig) -> list[Extractor]:
    """Turn the configuration file into an ordered extractor list.

    Raises :class:`ConfigError` for selectors the HTML parser rejects.
    """
    extractors: list[Extractor] = []
    for q in config.log_queries or []:
        extractors.append(Extractor(
            q.key, CATEGORY_ATTRIBUTES, ExtractorKind.ATTRIBUTE_VALUE, q.tag, q.attribute,
        ))
    for q in config.log_non200_queries or []:
        extractors.append(Extractor(
            q.key, CATEGORY_NON200, ExtractorKind.NON_OK_PROBE, q.tag, q.attribute,
        ))
    for tag in config.log_inline or []:
        extractors.append(Extractor(
            tag, CATEGORY_INLINE, ExtractorKind.ELEMENT_TEXT, tag,
        ))
    if config.log_inline_js:
        extractors.append(Extractor(
            "script", CATEGORY_INLINE_SCRIPTS, ExtractorKind.ELEMENT_TEXT,
            INLINE_SCRIPT_SELECTOR,
        ))

    for ex in extractors:
        try:
            validate_selector(ex.selector)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    return extractors


def enabled_categories(config: CrawlConfig) -> list[str]:
    """Categories that get an output file, even when nothing was found."""
    categories = []
    if config.log_queries is not None:
        categories.append(CATEGORY_ATTRIBUTES)
    if config.log_non200_queries is not None:
        categories.append(CATEGORY_NON200)
    if config.log_inline is not None:
        categories.append(CATEGORY_INLINE)
    if config.log_inline_js:
        categories.append(CATEGORY_INLINE_SCRIPTS)
    return categories


class ExtractionPipeline:
    """Applies an ordered list of extractors to one parsed page."""

    def __init__(
        self,
        extractors: list[Extractor],
        prober: NonOkProber | None = None,
    ) -> None:
        if prober is None and any(
            ex.kind is ExtractorKind.NON_OK_PROBE for ex in extractors
        ):
            raise ValueError("non-200 extractors need a prober")
        self.extractors = list(extractors)
        self.prober = prober

    def harvest(self, soup: BeautifulSoup, extractor: Extractor) -> list[str]:
        if extractor.kind is ExtractorKind.ELEMENT_TEXT:
            return select_text(soup, extractor.selector)
        values = select_attributes(soup, extractor.selector, extractor.attribute)
        if extractor.kind is ExtractorKind.NON_OK_PROBE and values:
            values = self.prober.filter(values)
        return values

    def run(self, soup: BeautifulSoup) -> Iterator[tuple[Extractor, list[str]]]:
        """Yield ``(extractor, values)`` for each extractor that matched.

        Batches are yielded as soon as each extractor finishes, so cheap
        results are available before slow probes complete.
        """
        for extractor in self.extractors:
            values = self.harvest(soup, extractor)
            if values:
                yield extractor, values
