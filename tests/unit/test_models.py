"""Tests for request validation and result models."""

import json

import pytest
from pydantic import ValidationError

from aeoscore.models import (
    AnalysisDetails,
    AnalysisRequest,
    AnalysisResult,
    QuickWin,
    Recommendation,
    Scores,
)


def make_details(**overrides) -> AnalysisDetails:
    fields = dict(
        word_count=120,
        has_schema=False,
        heading_count=3,
        image_count=0,
        image_alt_text_rate=0,
        readability_metrics={},
        heading_analysis={},
        schema_details={},
        paragraph_count=4,
        lists_and_tables=1,
        faq_count=0,
        content_to_code_ratio=12.5,
    )
    fields.update(overrides)
    return AnalysisDetails(**fields)


class TestAnalysisRequest:
    """Tests for AnalysisRequest validation."""

    def test_valid_request(self) -> None:
        request = AnalysisRequest(html="<p>Hi</p>", url="https://example.com/page")

        assert request.url == "https://example.com/page"
        assert request.target_keywords == []
        assert request.industry_hint is None

    def test_scheme_added(self) -> None:
        assert AnalysisRequest(html="x", url="example.com/page").url == "https://example.com/page"

    def test_whitespace_stripped(self) -> None:
        assert AnalysisRequest(html="x", url="  https://example.com  ").url == "https://example.com"

    def test_localhost_allowed(self) -> None:
        assert AnalysisRequest(html="x", url="http://localhost:8000/page").url == "http://localhost:8000/page"

    @pytest.mark.parametrize(
        "url",
        ["", "   ", "ftp://example.com/file", "https://nodot", "javascript:alert(1)", "https://" + "a" * 2050 + ".com"],
    )
    def test_invalid_urls(self, url: str) -> None:
        with pytest.raises(ValidationError):
            AnalysisRequest(html="x", url=url)

    @pytest.mark.parametrize("html", [None, 42, b"<p>bytes</p>", ["<p>"]])
    def test_html_must_be_a_string(self, html: object) -> None:
        with pytest.raises(ValidationError):
            AnalysisRequest(html=html, url="https://example.com")

    def test_keywords_from_comma_string(self) -> None:
        request = AnalysisRequest(html="x", url="https://example.com", target_keywords="solar, panels , ,")
        assert request.target_keywords == ["solar", "panels"]

    def test_keywords_list_cleaned(self) -> None:
        request = AnalysisRequest(html="x", url="https://example.com", target_keywords=[" solar ", "", "wind"])
        assert request.target_keywords == ["solar", "wind"]

    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AnalysisRequest(html="x", url="https://example.com", depth=3)


class TestResultModels:
    """Tests for result serialization."""

    def test_scores_omit_absent_optional_fields(self) -> None:
        scores = Scores(readability=70, schema=0, question_answer_match=50, headings_structure=90, overall_score=55)
        data = scores.to_dict()

        assert data == {
            "readability": 70,
            "schema": 0,
            "questionAnswerMatch": 50,
            "headingsStructure": 90,
            "overallScore": 55,
        }

    def test_scores_include_present_optional_fields(self) -> None:
        scores = Scores(
            readability=70,
            schema=0,
            question_answer_match=50,
            headings_structure=90,
            overall_score=55,
            content_depth=40,
            keyword_optimization=0,
            ai_analysis_score=65,
        )
        data = scores.to_dict()

        assert data["keywordOptimization"] == 0
        assert data["aiAnalysisScore"] == 65
        assert "overallScore" not in scores.sub_scores()
        assert scores.sub_scores()["contentDepth"] == 40

    def test_details_omit_absent_fields(self) -> None:
        data = make_details().to_dict()

        assert "aiAnalysis" not in data
        assert "industry" not in data
        assert data["contentToCodeRatio"] == 12.5
        assert data["warnings"] == []

    def test_details_round_weights(self) -> None:
        data = make_details(weights={"schema": 0.15 / 0.85}, industry="generic").to_dict()

        assert data["weights"] == {"schema": 0.1765}
        assert data["industry"] == "generic"

    def test_recommendation_to_dict_hides_ranking_impact(self) -> None:
        recommendation = Recommendation(
            title="Add FAQ schema",
            description="Mark up questions.",
            rationale="Engines read it.",
            example="{}",
            expected_impact="Better extraction",
            priority="high",
            category="technical",
            impact=7.5,
        )
        data = recommendation.to_dict()

        assert data["expectedImpact"] == "Better extraction"
        assert data["source"] == "rule"
        assert "impact" not in data

    def test_quick_win_to_dict(self) -> None:
        data = QuickWin(action="Add H1", impact="Clear topic", effort="low", potential_increase=3.5).to_dict()
        assert data == {"action": "Add H1", "impact": "Clear topic", "effort": "low", "potentialIncrease": 3.5}

    def test_result_to_json(self) -> None:
        result = AnalysisResult(
            url="https://example.com",
            timestamp="2024-01-15T12:00:00+00:00",
            scores=Scores(readability=1, schema=2, question_answer_match=3, headings_structure=4, overall_score=3),
            recommendations=(),
            quick_wins=(),
            details=make_details(),
        )
        data = json.loads(result.to_json())

        assert result.overall_score == 3
        assert data["url"] == "https://example.com"
        assert data["quickWins"] == []
        assert list(data) == ["url", "timestamp", "scores", "recommendations", "quickWins", "details"]
