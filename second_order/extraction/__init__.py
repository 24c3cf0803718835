"""Page parsing, extractor pipeline and non-200 probing."""

from second_order.extraction.extractors import (
    ExtractionPipeline,
    Extractor,
    ExtractorKind,
    build_extractors,
    enabled_categories,
)
from second_order.extraction.html_parser import (
    DocumentParseError,
    document_base,
    extract_links,
    parse_document,
)
from second_order.extraction.probe import NonOkProber

__all__ = [
    "ExtractionPipeline",
    "Extractor",
    "ExtractorKind",
    "build_extractors",
    "enabled_categories",
    "DocumentParseError",
    "document_base",
    "extract_links",
    "parse_document",
    "NonOkProber",
]
