"""End-to-end tests for the analysis pipeline."""

import asyncio
import math

import pytest

from aeoscore import (
    ContentAnalysisEngine,
    EmptyContentError,
    ErrorCode,
    InvalidInputError,
    analyze_content_sync,
)
from aeoscore.config import Settings
from aeoscore.extraction.classifier import Industry
from aeoscore.fixes.generator import RecommendationConfig
from aeoscore.fixes.templates import Trigger, get_template
from aeoscore.models import AnalysisResult
from aeoscore.qualitative.models import CompletionRequest, CompletionResponse
from aeoscore.qualitative.providers import MockProvider

pytestmark = pytest.mark.integration

EXAMPLE_HTML = (
    "<h1>Best Running Shoes</h1><p>We tested dozens of pairs to find the best fit.</p>"
    "<h2>FAQ</h2><h3>What are the best running shoes?</h3>"
    "<p>The best running shoes are the ones that fit your foot and your training.</p>"
)
SKIPPED_LEVEL_HTML = EXAMPLE_HTML.replace("<h2>FAQ</h2>", "")

BROKEN_SCHEMA_BLOCK = '<script type="application/ld+json">{"@type": "FAQPage", </script>'


class RaisingProvider(MockProvider):
    """Provider whose call fails with an exception."""

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.calls.append(request)
        raise ConnectionError("collaborator down")


@pytest.fixture
def engine_factory(settings: Settings, clock):
    """Build engines sharing the test settings and the fixed clock."""

    def make(provider: MockProvider | None = None, **overrides) -> ContentAnalysisEngine:
        engine_settings = settings.model_copy(update=overrides) if overrides else settings
        return ContentAnalysisEngine(settings=engine_settings, provider=provider, clock=clock)

    return make


@pytest.fixture
def broken_schema_html(running_shoes_html: str) -> str:
    return running_shoes_html.replace("</main>", f"{BROKEN_SCHEMA_BLOCK}</main>")


def assert_bounded(result: AnalysisResult) -> None:
    sub_scores = result.scores.sub_scores()
    for value in [*sub_scores.values(), result.overall_score]:
        assert 0 <= value <= 100

    weights = result.details.weights
    contributing = [sub_scores[key] for key, weight in weights.items() if weight > 0]
    assert min(contributing) <= result.overall_score <= max(contributing)
    assert math.isclose(math.fsum(weights.values()), 1.0)


class TestExampleScenario:
    """The running-shoes example page."""

    @pytest.mark.asyncio
    async def test_question_answer_match_and_headings(self, engine_factory) -> None:
        result = await engine_factory().analyze(
            EXAMPLE_HTML, "example.com/shoes", target_keywords=["best running shoes"]
        )

        assert result.url == "https://example.com/shoes"
        assert result.scores.question_answer_match >= 70
        assert result.details.heading_analysis["hierarchyValid"] is True
        assert result.details.heading_analysis["skipCount"] == 0
        assert result.scores.headings_structure == 100

    @pytest.mark.asyncio
    async def test_skipped_level_scores_lower(self, engine_factory) -> None:
        engine = engine_factory()
        valid = await engine.analyze(EXAMPLE_HTML, "example.com/shoes", target_keywords=["best running shoes"])
        skipped = await engine.analyze(SKIPPED_LEVEL_HTML, "example.com/shoes", target_keywords=["best running shoes"])

        assert valid.scores.headings_structure > skipped.scores.headings_structure
        assert skipped.details.heading_analysis["skipCount"] == 1

    @pytest.mark.asyncio
    async def test_faq_page_schema_raises_schema_score(
        self, engine_factory, running_shoes_html: str, faq_page_schema: str
    ) -> None:
        engine = engine_factory()
        without = await engine.analyze(running_shoes_html, "https://example.com/shoes")
        with_schema = await engine.analyze(
            running_shoes_html.replace("</main>", f"{faq_page_schema}</main>"), "https://example.com/shoes"
        )

        assert with_schema.scores.schema > without.scores.schema
        assert with_schema.details.has_schema
        assert not without.details.has_schema

    @pytest.mark.asyncio
    async def test_keywords_derived_when_omitted(self, engine_factory, running_shoes_html: str) -> None:
        result = await engine_factory().analyze(running_shoes_html, "https://example.com/shoes")

        assert "best running shoes" in result.details.keywords_found
        assert result.scores.keyword_optimization is not None
        assert result.scores.keyword_optimization > 0


class TestDeterminism:
    """Repeat runs with a deterministic model stub."""

    @pytest.mark.asyncio
    async def test_identical_runs_produce_identical_json(self, engine_factory, article_html: str) -> None:
        first = await engine_factory(MockProvider()).analyze(article_html, "https://example.com/blog/solar")
        second = await engine_factory(MockProvider()).analyze(article_html, "https://example.com/blog/solar")

        assert first.to_json() == second.to_json()
        assert first.timestamp == "2024-01-15T12:00:00+00:00"

    @pytest.mark.asyncio
    async def test_concurrent_runs_are_independent(
        self, engine_factory, article_html: str, running_shoes_html: str
    ) -> None:
        engine = engine_factory(MockProvider())
        solo_article = await engine.analyze(article_html, "https://example.com/blog/solar")
        solo_shoes = await engine.analyze(running_shoes_html, "https://example.com/shoes")

        article, shoes = await asyncio.gather(
            engine.analyze(article_html, "https://example.com/blog/solar"),
            engine.analyze(running_shoes_html, "https://example.com/shoes"),
        )

        assert article.to_json() == solo_article.to_json()
        assert shoes.to_json() == solo_shoes.to_json()


class TestQualitativeStage:
    """The optional model stage and its degradation."""

    @pytest.mark.asyncio
    async def test_model_score_participates(self, engine_factory, article_html: str) -> None:
        result = await engine_factory(MockProvider()).analyze(article_html, "https://example.com/blog/solar")
        data = result.to_dict()

        assert result.scores.ai_analysis_score == 70
        assert data["scores"]["aiAnalysisScore"] == 70
        assert data["details"]["aiAnalysis"]["contentClarity"]["score"] == 70
        assert "aiAnalysisScore" in result.details.weights
        assert data["details"]["aiAnalysis"]["suggestions"][0]["title"] == "Add a summary paragraph"
        assert_bounded(result)

    @pytest.mark.asyncio
    async def test_timeout_omits_model_fields(self, engine_factory, article_html: str) -> None:
        provider = MockProvider(delay_seconds=5.0)
        engine = engine_factory(provider, qualitative_timeout_seconds=0.05)

        result = await engine.analyze(article_html, "https://example.com/blog/solar")
        data = result.to_dict()

        assert "aiAnalysisScore" not in data["scores"]
        assert "aiAnalysis" not in data["details"]
        assert "aiAnalysisScore" not in result.details.weights
        assert math.isclose(math.fsum(result.details.weights.values()), 1.0)
        for key in ("readability", "schema", "questionAnswerMatch", "headingsStructure"):
            assert key in data["scores"]
        assert {"code": "QUALITATIVE_UNAVAILABLE", "message": "Qualitative analysis unavailable (timeout)"} in (
            result.details.warnings
        )
        assert provider.cancelled

    @pytest.mark.asyncio
    async def test_invalid_model_reply_degrades(self, engine_factory, article_html: str) -> None:
        result = await engine_factory(MockProvider(content="not json")).analyze(
            article_html, "https://example.com/blog/solar"
        )

        assert result.scores.ai_analysis_score is None
        assert result.details.warnings[-1]["message"] == "Qualitative analysis unavailable (invalid_response)"
        assert_bounded(result)

    @pytest.mark.asyncio
    async def test_raising_provider_degrades(self, engine_factory, running_shoes_html: str) -> None:
        result = await engine_factory(RaisingProvider()).analyze(running_shoes_html, "https://example.com/shoes")
        data = result.to_dict()

        assert "aiAnalysisScore" not in data["scores"]
        assert result.details.warnings == [
            {"code": "QUALITATIVE_UNAVAILABLE", "message": "Qualitative analysis unavailable (provider_error)"}
        ]
        assert_bounded(result)

    @pytest.mark.asyncio
    async def test_no_provider_means_no_model_stage(self, engine_factory, article_html: str) -> None:
        result = await engine_factory().analyze(article_html, "https://example.com/blog/solar")

        assert result.scores.ai_analysis_score is None
        assert result.details.warnings == []

    @pytest.mark.asyncio
    async def test_cancellation_reaches_model_call(self, engine_factory, article_html: str) -> None:
        provider = MockProvider(delay_seconds=5.0)
        engine = engine_factory(provider)

        task = asyncio.create_task(engine.analyze(article_html, "https://example.com/blog/solar"))
        while not provider.calls:
            await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert provider.cancelled


class TestErrors:
    """Fatal input errors and recovered extraction problems."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "html",
        [
            "",
            "   \n\t ",
            "<html><body><script>var tracking = 1;</script><style>p { color: red; }</style></body></html>",
            "<div><span></span></div>",
        ],
    )
    async def test_empty_content(self, engine_factory, html: str) -> None:
        with pytest.raises(EmptyContentError) as exc_info:
            await engine_factory().analyze(html, "https://example.com")

        assert exc_info.value.code == ErrorCode.EMPTY_CONTENT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("html", "url", "field"),
        [
            ("<p>Hello there.</p>", "ftp://example.com/file", "url"),
            ("<p>Hello there.</p>", "not a url", "url"),
            (None, "https://example.com", "html"),
            (b"<p>bytes</p>", "https://example.com", "html"),
        ],
    )
    async def test_invalid_input(self, engine_factory, html: object, url: str, field: str) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            await engine_factory().analyze(html, url)  # type: ignore[arg-type]

        assert exc_info.value.code == ErrorCode.INVALID_INPUT
        assert exc_info.value.details["field"] == field

    @pytest.mark.asyncio
    async def test_broken_schema_block_is_recovered(self, engine_factory, broken_schema_html: str) -> None:
        result = await engine_factory().analyze(broken_schema_html, "https://example.com/shoes")

        codes = [w["code"] for w in result.details.warnings]
        assert codes == ["EXTRACTION_PARTIAL"]
        assert result.details.schema_details["parseErrors"] == 1
        assert "Fix invalid structured data" in [r.title for r in result.recommendations]
        assert_bounded(result)


class TestResultShape:
    """Invariants over the full result."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("html_fixture", ["running_shoes_html", "article_html", "broken_schema_html"])
    @pytest.mark.parametrize("industry_hint", [None, "ecommerce", "healthcare", "local business"])
    async def test_scores_bounded(
        self, request: pytest.FixtureRequest, engine_factory, html_fixture: str, industry_hint: str | None
    ) -> None:
        html = request.getfixturevalue(html_fixture)
        for provider in (None, MockProvider()):
            result = await engine_factory(provider).analyze(
                html, "https://example.com/page", industry_hint=industry_hint
            )
            assert_bounded(result)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("html", [EXAMPLE_HTML, SKIPPED_LEVEL_HTML])
    async def test_small_pages_bounded(self, engine_factory, html: str) -> None:
        assert_bounded(await engine_factory().analyze(html, "https://example.com/shoes"))

    @pytest.mark.asyncio
    async def test_industry_hint_applied(self, engine_factory, article_html: str) -> None:
        result = await engine_factory().analyze(article_html, "https://example.com/x", industry_hint="e-commerce")

        assert result.details.industry == "ecommerce"
        assert result.details.content_type is not None

    @pytest.mark.asyncio
    async def test_details(self, engine_factory, article_html: str) -> None:
        result = await engine_factory().analyze(article_html, "https://example.com/blog/solar")
        details = result.details

        assert details.image_count == 2
        assert details.image_alt_text_rate == 50
        assert details.lists_and_tables == 2
        assert details.faq_count == 1
        assert details.word_count > 0
        assert 0 < details.content_to_code_ratio <= 100

    @pytest.mark.asyncio
    async def test_recommendations_sorted_and_quick_wins_bounded(self, engine_factory) -> None:
        result = await engine_factory().analyze(SKIPPED_LEVEL_HTML, "https://example.com/shoes")
        ranks = {"high": 0, "medium": 1, "low": 2}
        priorities = [ranks[r.priority] for r in result.recommendations]

        assert priorities == sorted(priorities)
        assert len(result.quick_wins) <= 5
        increases = [q.potential_increase for q in result.quick_wins]
        assert increases == sorted(increases, reverse=True)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("html_fixture", ["running_shoes_html", "article_html", "broken_schema_html"])
    async def test_quick_wins_target_weak_sub_scores(
        self, request: pytest.FixtureRequest, engine_factory, html_fixture: str
    ) -> None:
        result = await engine_factory().analyze(request.getfixturevalue(html_fixture), "https://example.com/shoes")
        sub_scores = result.scores.sub_scores()
        industry = Industry(result.details.industry)
        config = RecommendationConfig()
        templates = [get_template(trigger, industry) for trigger in Trigger]
        target_by_action = {t.action: t.target for t in templates}

        for quick_win in result.quick_wins:
            target = target_by_action[quick_win.action]
            assert target is not None
            assert sub_scores[target] < config.threshold_for(target, industry)
            assert quick_win.potential_increase > 0


def test_sync_wrapper() -> None:
    result = analyze_content_sync(EXAMPLE_HTML, "example.com/shoes", target_keywords=["best running shoes"])

    assert isinstance(result, AnalysisResult)
    assert result.scores.question_answer_match >= 70
    assert result.scores.ai_analysis_score is None
