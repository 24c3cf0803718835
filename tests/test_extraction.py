"""
Tests for HTML parsing helpers and the extraction pipeline.
"""

import unittest
from unittest.mock import MagicMock

from second_order.config import (
    CATEGORY_ATTRIBUTES,
    CATEGORY_INLINE,
    CATEGORY_INLINE_SCRIPTS,
    CATEGORY_NON200,
    ConfigError,
    QuerySpec,
    CrawlConfig,
    parse_config,
)
from second_order.extraction.extractors import (
    ExtractionPipeline,
    Extractor,
    ExtractorKind,
    build_extractors,
    enabled_categories,
)
from second_order.extraction.html_parser import (
    document_base,
    extract_links,
    parse_document,
    select_attributes,
    select_text,
    validate_selector,
)


PAGE = "https://example.com/dir/index.html"

HTML = """
<html>
<head>
  <title>Home</title>
  <script src="https://cdn.example.net/app.js"></script>
  <script>var token = "abc";</script>
  <link rel="stylesheet icon" href="/style.css">
</head>
<body>
  <a href="/about">About</a>
  <a href="team.html#people">Team</a>
  <a href="/about">About again</a>
  <a href="mailto:hi@example.com">Mail</a>
  <a href="javascript:void(0)">JS</a>
  <a href="not a url::">Broken</a>
  <a>No href</a>
  <iframe src="//widgets.example.org/embed"></iframe>
  <p>   </p>
  <p>Hello <b>world</b></p>
</body>
</html>
"""


class TestHtmlParser(unittest.TestCase):
    def setUp(self):
        self.soup = parse_document(HTML)

    def test_select_attributes_in_document_order(self):
        self.assertEqual(
            select_attributes(self.soup, "a[href]", "href")[:3],
            ["/about", "team.html#people", "/about"],
        )

    def test_select_attributes_requires_attribute(self):
        self.assertEqual(
            select_attributes(self.soup, "script", "src"),
            ["https://cdn.example.net/app.js"],
        )

    def test_multi_valued_attribute_joined(self):
        self.assertEqual(select_attributes(self.soup, "link", "rel"), ["stylesheet icon"])

    def test_no_match_is_empty(self):
        self.assertEqual(select_attributes(self.soup, "form", "action"), [])

    def test_select_text_skips_blank(self):
        self.assertEqual(select_text(self.soup, "p"), ["Hello world"])

    def test_extract_links_resolved_and_deduplicated(self):
        self.assertEqual(extract_links(self.soup, PAGE), [
            "https://example.com/about",
            "https://example.com/dir/team.html#people",
        ])

    def test_parse_bytes(self):
        soup = parse_document(b"<a href='/x'>x</a>")
        self.assertEqual(extract_links(soup, PAGE), ["https://example.com/x"])

    def test_document_base_tag(self):
        soup = parse_document('<base href="https://static.example.com/root/"><a href="p">p</a>')
        base = document_base(soup, PAGE)
        self.assertEqual(base, "https://static.example.com/root/")
        self.assertEqual(extract_links(soup, base), ["https://static.example.com/root/p"])

    def test_document_base_defaults_to_page(self):
        self.assertEqual(document_base(self.soup, PAGE), PAGE)

    def test_validate_selector(self):
        validate_selector("a[href]")
        validate_selector("script:not([src])")
        with self.assertRaises(ValueError):
            validate_selector("a[")


class TestBuildExtractors(unittest.TestCase):
    def test_order_and_categories(self):
        config = parse_config({
            "LogQueries": {"a": "href"},
            "LogNon200Queries": {"script": "src"},
            "LogInline": ["title"],
            "LogInlineJS": True,
        })
        extractors = build_extractors(config)
        self.assertEqual(
            [(e.key, e.category, e.kind) for e in extractors],
            [
                ("a[href]", CATEGORY_ATTRIBUTES, ExtractorKind.ATTRIBUTE_VALUE),
                ("script[src]", CATEGORY_NON200, ExtractorKind.NON_OK_PROBE),
                ("title", CATEGORY_INLINE, ExtractorKind.ELEMENT_TEXT),
                ("script", CATEGORY_INLINE_SCRIPTS, ExtractorKind.ELEMENT_TEXT),
            ],
        )
        self.assertEqual(
            enabled_categories(config),
            [CATEGORY_ATTRIBUTES, CATEGORY_NON200, CATEGORY_INLINE, CATEGORY_INLINE_SCRIPTS],
        )

    def test_empty_map_still_enables_category(self):
        config = parse_config({"LogQueries": {}})
        self.assertEqual(build_extractors(config), [])
        self.assertEqual(enabled_categories(config), [CATEGORY_ATTRIBUTES])

    def test_bad_selector_is_config_error(self):
        config = CrawlConfig(log_queries=[QuerySpec("x", "a[", "href")])
        with self.assertRaises(ConfigError):
            build_extractors(config)


class TestExtractionPipeline(unittest.TestCase):
    def setUp(self):
        self.soup = parse_document(HTML)

    def test_runs_extractors_in_order_and_skips_empty(self):
        pipeline = ExtractionPipeline([
            Extractor("title", CATEGORY_INLINE, ExtractorKind.ELEMENT_TEXT, "title"),
            Extractor("form[action]", CATEGORY_ATTRIBUTES, ExtractorKind.ATTRIBUTE_VALUE, "form", "action"),
            Extractor("script", CATEGORY_INLINE_SCRIPTS, ExtractorKind.ELEMENT_TEXT, "script:not([src])"),
        ])
        results = [(ex.key, values) for ex, values in pipeline.run(self.soup)]
        self.assertEqual(results, [
            ("title", ["Home"]),
            ("script", ['var token = "abc";']),
        ])

    def test_probe_extractor_filters_through_prober(self):
        prober = MagicMock()
        prober.filter.side_effect = lambda values: [v for v in values if "widgets" in v]
        pipeline = ExtractionPipeline(
            [Extractor("iframe[src]", CATEGORY_NON200, ExtractorKind.NON_OK_PROBE, "iframe", "src")],
            prober,
        )
        results = list(pipeline.run(self.soup))
        prober.filter.assert_called_once_with(["//widgets.example.org/embed"])
        self.assertEqual(results[0][1], ["//widgets.example.org/embed"])

    def test_probe_not_called_without_matches(self):
        prober = MagicMock()
        pipeline = ExtractionPipeline(
            [Extractor("embed[src]", CATEGORY_NON200, ExtractorKind.NON_OK_PROBE, "embed", "src")],
            prober,
        )
        self.assertEqual(list(pipeline.run(self.soup)), [])
        prober.filter.assert_not_called()

    def test_probe_extractor_requires_prober(self):
        with self.assertRaises(ValueError):
            ExtractionPipeline(
                [Extractor("x", CATEGORY_NON200, ExtractorKind.NON_OK_PROBE, "a", "href")]
            )


if __name__ == "__main__":
    unittest.main()
