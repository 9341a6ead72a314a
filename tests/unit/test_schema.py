"""Tests for structured data validation and the schema sub-score."""

from aeoscore.extraction.document import ContentDocument, NodeType
from aeoscore.extraction.extractor import extract_document
from aeoscore.extraction.schema import (
    SchemaAnalyzer,
    analyze_schema,
    iter_entities,
    normalize_type,
)
from aeoscore.scoring.schema import SchemaScoreConfig, calculate_schema_score


def doc_with_blocks(*payloads: dict | list | None, errors: dict[int, str] | None = None) -> ContentDocument:
    """Build a document with one JSON-LD block per payload."""
    errors = errors or {}
    doc = ContentDocument(url="https://example.com")
    doc.add_node(NodeType.PARAGRAPH, "Some page text.")
    for i, payload in enumerate(payloads):
        doc.add_node(NodeType.SCHEMA_BLOCK, "", format="json-ld", data=payload, error=errors.get(i))
    return doc


FAQ_PAGE = {
    "@context": "https://schema.org",
    "@type": "FAQPage",
    "mainEntity": [
        {"@type": "Question", "name": "What is AEO?", "acceptedAnswer": {"@type": "Answer", "text": "Answer engine optimization."}},
        {"@type": "Question", "name": "Why does it matter?", "acceptedAnswer": {"text": "Answer engines quote pages."}},
    ],
}


class TestSchemaHelpers:
    """Tests for type normalization and entity discovery."""

    def test_normalize_type(self) -> None:
        assert normalize_type("Article") == "Article"
        assert normalize_type("http://schema.org/Article") == "Article"
        assert normalize_type("schema:Product") == "Product"
        assert normalize_type(["Product", "Thing"]) == "Product"
        assert normalize_type("") is None
        assert normalize_type(None) is None

    def test_iter_entities_handles_graph_and_arrays(self) -> None:
        data = {
            "@context": "https://schema.org",
            "@graph": [{"@type": "WebPage", "name": "Home"}, {"@type": "Organization", "name": "Acme"}],
        }
        entities = iter_entities([data, {"@type": "Person", "name": "Jo"}])

        assert [e["@type"] for e in entities] == ["WebPage", "Organization", "Person"]


class TestSchemaAnalyzer:
    """Tests for SchemaAnalyzer."""

    def test_no_blocks(self) -> None:
        finding = analyze_schema(doc_with_blocks())

        assert not finding.has_schema
        assert finding.types == []

    def test_complete_faq_page(self) -> None:
        finding = analyze_schema(doc_with_blocks(FAQ_PAGE))

        assert finding.has_valid("FAQPage")
        assert len(finding.faq_pairs) == 2
        assert finding.faq_pairs[0].question == "What is AEO?"
        assert finding.blocks[0].is_valid

    def test_unanswered_questions_reduce_completeness(self) -> None:
        partial = {
            "@type": "FAQPage",
            "mainEntity": [
                {"@type": "Question", "name": "What is AEO?", "acceptedAnswer": {"text": "Optimization."}},
                {"@type": "Question", "name": "Is it new?"},
            ],
        }
        finding = analyze_schema(doc_with_blocks(partial))

        assert finding.items[0].completeness == 0.5
        assert not finding.has_valid("FAQPage")
        assert len(finding.faq_pairs) == 1

    def test_missing_required_fields(self) -> None:
        finding = analyze_schema(doc_with_blocks({"@type": "Article", "headline": "Title"}))
        item = finding.items[0]

        assert item.missing_fields == ["author", "datePublished"]
        assert not item.is_valid
        assert finding.invalid_block_count == 1

    def test_empty_values_count_as_missing(self) -> None:
        finding = analyze_schema(doc_with_blocks({"@type": "Person", "name": "  "}))
        assert finding.items[0].missing_fields == ["name"]

    def test_unknown_type_uses_default_fields(self) -> None:
        finding = analyze_schema(doc_with_blocks({"@type": "Thing", "name": "Widget"}))
        item = finding.items[0]

        assert item.missing_fields == ["description"]
        assert item.completeness == 0.5

    def test_parse_error_isolated_from_other_blocks(self) -> None:
        doc = doc_with_blocks(None, {"@type": "Organization", "name": "Acme", "url": "https://acme.test"}, errors={0: "Expecting value"})
        finding = analyze_schema(doc)

        assert finding.parse_error_count == 1
        assert not finding.blocks[0].parsed
        assert finding.blocks[0].error == "Expecting value"
        assert finding.has_valid("Organization")

    def test_untyped_block_is_invalid(self) -> None:
        doc = doc_with_blocks({"name": "No type here"})
        finding = analyze_schema(doc)

        assert finding.items == []
        assert not finding.blocks[0].is_valid
        assert "schema_untyped" in doc.schema_blocks[0].issues

    def test_validity_threshold(self) -> None:
        doc = doc_with_blocks({"@type": "Article", "headline": "Title", "author": "Jo"})

        assert not SchemaAnalyzer().analyze(doc).items[0].is_valid
        assert SchemaAnalyzer(validity_threshold=0.5).analyze(doc).items[0].is_valid

    def test_microdata_from_markup(self) -> None:
        html = """
        <html><body>
        <h1>Trail Shoe</h1>
        <p>A light shoe for rough ground.</p>
        <div itemscope itemtype="https://schema.org/Product">
            <span itemprop="name">Trail Shoe</span>
            <span itemprop="description">A light shoe for rough ground.</span>
            <div itemprop="offers" itemscope itemtype="https://schema.org/Offer">
                <span itemprop="price">120</span>
                <span itemprop="priceCurrency">USD</span>
            </div>
        </div>
        </body></html>
        """
        finding = analyze_schema(extract_document(html, "https://shop.test/trail"))

        assert finding.types == ["Product"]
        assert finding.blocks[0].source == "microdata"
        assert finding.has_valid("Product")

    def test_to_dict(self) -> None:
        data = analyze_schema(doc_with_blocks(FAQ_PAGE)).to_dict()

        assert data["types"] == ["FAQPage"]
        assert data["blockCount"] == 1
        assert data["faqPairs"] == 2


class TestSchemaScorer:
    """Tests for the schema sub-score."""

    def test_no_schema_scores_zero(self) -> None:
        assert calculate_schema_score(analyze_schema(doc_with_blocks())).score == 0

    def test_complete_faq_page(self) -> None:
        result = calculate_schema_score(analyze_schema(doc_with_blocks(FAQ_PAGE)))

        # base 25 + completeness 35 + diversity 16 + volume 5 + faq 10
        assert result.score == 91

    def test_faq_page_raises_score(self) -> None:
        org = {"@type": "Organization", "name": "Acme", "url": "https://acme.test"}
        without_faq = calculate_schema_score(analyze_schema(doc_with_blocks(org))).score
        with_faq = calculate_schema_score(analyze_schema(doc_with_blocks(org, FAQ_PAGE))).score

        assert with_faq > without_faq

    def test_parse_error_only(self) -> None:
        finding = analyze_schema(doc_with_blocks(None, errors={0: "bad json"}))

        # base 25 less one invalid block
        assert calculate_schema_score(finding).score == 20

    def test_incomplete_scores_below_complete(self) -> None:
        incomplete = analyze_schema(doc_with_blocks({"@type": "Article", "headline": "Title"}))
        complete = analyze_schema(
            doc_with_blocks({"@type": "Article", "headline": "Title", "author": "Jo", "datePublished": "2024-01-01"})
        )

        assert calculate_schema_score(incomplete).score < calculate_schema_score(complete).score

    def test_unknown_type_scores_low_diversity(self) -> None:
        finding = analyze_schema(doc_with_blocks({"@type": "Thing", "name": "Widget", "description": "A widget"}))
        result = calculate_schema_score(finding)

        # base 25 + completeness 35 + diversity 2 + volume 5
        assert result.score == 67

    def test_penalty_is_capped(self) -> None:
        config = SchemaScoreConfig()
        finding = analyze_schema(doc_with_blocks(*([None] * 10), errors={i: "bad" for i in range(10)}))

        assert calculate_schema_score(finding, config).score == config.base_points - config.invalid_penalty_cap

    def test_score_bounded(self) -> None:
        blocks = [FAQ_PAGE] + [
            {"@type": t, "name": "X", "url": "https://x.test", "headline": "H", "author": "A", "datePublished": "D"}
            for t in ("Article", "Organization", "WebSite", "Person")
        ]
        result = calculate_schema_score(analyze_schema(doc_with_blocks(*blocks)))

        assert 0 <= result.score <= 100
