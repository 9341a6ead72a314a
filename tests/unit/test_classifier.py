"""Tests for industry and content-type classification."""

import pytest

from aeoscore.extraction.classifier import (
    ClassifierConfig,
    ContentClassifier,
    ContentType,
    Industry,
    classify_content,
    parse_industry_hint,
)
from aeoscore.extraction.document import ContentDocument, NodeType
from aeoscore.extraction.extractor import extract_document
from aeoscore.extraction.schema import analyze_schema


def make_doc(url: str, text: str, title: str | None = None, h1: str | None = None) -> ContentDocument:
    doc = ContentDocument(url=url, title=title)
    if h1:
        doc.add_node(NodeType.HEADING, h1, level=1)
    doc.add_node(NodeType.PARAGRAPH, text)
    return doc


ECOMMERCE_TEXT = (
    "Shop our store for the best price on every product. Add to cart today and enjoy free shipping "
    "on any order. Our sale includes a discount on returns and every item is in stock."
)

HEALTHCARE_TEXT = (
    "Our clinic offers treatment for every patient. A doctor reviews each symptom and makes a "
    "diagnosis before therapy begins. Book an appointment with a physician at the hospital."
)


class TestParseIndustryHint:
    """Tests for parse_industry_hint."""

    @pytest.mark.parametrize(
        ("hint", "expected"),
        [
            ("ecommerce", Industry.ECOMMERCE),
            ("E-Commerce", Industry.ECOMMERCE),
            ("local business", Industry.LOCAL_BUSINESS),
            ("Healthcare", Industry.HEALTHCARE),
            ("legal", Industry.PROFESSIONAL_SERVICES),
            ("software", Industry.SAAS),
            ("generic", Industry.GENERIC),
        ],
    )
    def test_known_hints(self, hint: str, expected: Industry) -> None:
        assert parse_industry_hint(hint) == expected

    def test_unknown_and_empty(self) -> None:
        assert parse_industry_hint("aerospace") is None
        assert parse_industry_hint("") is None
        assert parse_industry_hint(None) is None


class TestIndustryDetection:
    """Tests for vocabulary-based industry detection."""

    def test_detects_ecommerce(self) -> None:
        result = classify_content(make_doc("https://shop.test/", ECOMMERCE_TEXT))

        assert result.industry == Industry.ECOMMERCE
        assert result.industry_source == "detected"
        assert result.confidence >= ClassifierConfig().min_density

    def test_detects_healthcare(self) -> None:
        result = classify_content(make_doc("https://clinic.test/", HEALTHCARE_TEXT))
        assert result.industry == Industry.HEALTHCARE

    def test_low_signal_defaults_to_generic(self) -> None:
        doc = make_doc("https://example.com/", "The weather was mild and the river ran slowly past the old mill.")
        result = classify_content(doc)

        assert result.industry == Industry.GENERIC
        assert result.industry_source == "default"

    def test_below_min_hits_is_zero_density(self) -> None:
        result = classify_content(make_doc("https://example.com/", "We sell one product in our shop."))
        assert result.densities["ecommerce"] == 0.0

    def test_hint_overrides_detection(self) -> None:
        result = classify_content(make_doc("https://shop.test/", ECOMMERCE_TEXT), industry_hint="healthcare")

        assert result.industry == Industry.HEALTHCARE
        assert result.industry_source == "hint"

    def test_unknown_hint_falls_back_to_detection(self) -> None:
        result = classify_content(make_doc("https://shop.test/", ECOMMERCE_TEXT), industry_hint="aerospace")

        assert result.industry == Industry.ECOMMERCE
        assert result.industry_source == "detected"

    def test_schema_type_adds_evidence(self) -> None:
        html = """
        <html><body><h1>Downtown Bakery</h1>
        <p>Fresh bread every morning. Visit us on Main Street.</p>
        <script type="application/ld+json">
        {"@type": "LocalBusiness", "name": "Downtown Bakery", "address": "1 Main St", "telephone": "555-0100"}
        </script>
        </body></html>
        """
        doc = extract_document(html, "https://bakery.test/")
        without_schema = ContentClassifier().classify(doc)
        with_schema = ContentClassifier().classify(doc, analyze_schema(doc))

        assert with_schema.densities["local_business"] > without_schema.densities["local_business"]
        assert with_schema.industry == Industry.LOCAL_BUSINESS


class TestContentType:
    """Tests for content-type detection."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://example.com/blog/how-to-run", ContentType.BLOG),
            ("https://example.com/products/trail-shoe", ContentType.PRODUCT),
            ("https://example.com/about", ContentType.ABOUT),
            ("https://example.com/services", ContentType.SERVICE),
            ("https://example.com/contact", ContentType.CONTACT),
        ],
    )
    def test_url_patterns(self, url: str, expected: ContentType) -> None:
        result = classify_content(make_doc(url, "Some text."))

        assert result.content_type == expected
        assert result.signals[0].startswith("url:")

    def test_root_path_is_homepage(self) -> None:
        assert classify_content(make_doc("https://example.com/", "Welcome.")).content_type == ContentType.HOMEPAGE

    def test_heading_markers(self) -> None:
        doc = make_doc("https://example.com/x", "Reach our team any time.", h1="Contact our team")
        assert classify_content(doc).content_type == ContentType.CONTACT

    def test_article_schema_marks_blog(self) -> None:
        html = """
        <html><body><h1>Winter Running</h1><p>Layers matter in the cold.</p>
        <script type="application/ld+json">
        {"@type": "Article", "headline": "Winter Running", "author": "Jo", "datePublished": "2024-01-01"}
        </script></body></html>
        """
        doc = extract_document(html, "https://example.com/winter-running")
        result = classify_content(doc, analyze_schema(doc))

        assert result.content_type == ContentType.BLOG
        assert "article_markers" in result.signals

    def test_unknown(self) -> None:
        assert classify_content(make_doc("https://example.com/x/y", "Text.")).content_type == ContentType.UNKNOWN

    def test_to_dict(self) -> None:
        data = classify_content(make_doc("https://shop.test/", ECOMMERCE_TEXT)).to_dict()

        assert data["industry"] == "ecommerce"
        assert data["industrySource"] == "detected"
        assert "densities" in data
