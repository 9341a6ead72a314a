"""Analysis pipeline.

Runs the stages in order for one page:

    extract -> readability -> structure -> schema -> question/answer match
    -> classify -> qualitative (optional, the only await) -> aggregate
    -> recommendations

Every run owns its ContentDocument; nothing mutable is shared across runs.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from pydantic import ValidationError

from aeoscore.config import Settings, get_settings
from aeoscore.exceptions import AnalysisWarning, EmptyContentError, ErrorCode, InvalidInputError
from aeoscore.extraction.classifier import ClassifierConfig, ContentClassifier
from aeoscore.extraction.document import NodeType
from aeoscore.extraction.extractor import ContentExtractor, ExtractorConfig
from aeoscore.extraction.headings import HeadingAnalyzer
from aeoscore.extraction.keywords import resolve_keywords
from aeoscore.extraction.readability import compute_readability
from aeoscore.extraction.schema import SchemaAnalyzer
from aeoscore.fixes.generator import RecommendationConfig, RecommendationGenerator
from aeoscore.models import AnalysisDetails, AnalysisRequest, AnalysisResult, Scores
from aeoscore.qualitative.analyzer import QualitativeAnalyzer, QualitativeOutcome
from aeoscore.qualitative.providers import QualitativeProvider, provider_from_settings
from aeoscore.scoring.answers import AnswerMatchConfig, AnswerMatcher
from aeoscore.scoring.calculator import ScoreAggregator
from aeoscore.scoring.content import ContentDepthConfig, ContentDepthScorer, KeywordConfig, KeywordScorer
from aeoscore.scoring.readability import ReadabilityConfig, ReadabilityScorer
from aeoscore.scoring.schema import SchemaScoreConfig, SchemaScorer
from aeoscore.scoring.structure import StructureConfig, StructureScorer
from aeoscore.scoring.weights import (
    AI_ANALYSIS,
    CONTENT_DEPTH,
    HEADINGS_STRUCTURE,
    KEYWORD_OPTIMIZATION,
    QUESTION_ANSWER_MATCH,
    READABILITY,
    SCHEMA,
    select_plan,
)

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _validation_message(error: ValidationError) -> tuple[str, str | None]:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    return first.get("msg", "Invalid input"), field


class ContentAnalysisEngine:
    """Content analysis and scoring engine."""

    def __init__(
        self,
        settings: Settings | None = None,
        provider: QualitativeProvider | None = None,
        qualitative: QualitativeAnalyzer | None = None,
        clock: Clock | None = None,
        extractor_config: ExtractorConfig | None = None,
        readability_config: ReadabilityConfig | None = None,
        structure_config: StructureConfig | None = None,
        schema_config: SchemaScoreConfig | None = None,
        answer_config: AnswerMatchConfig | None = None,
        content_depth_config: ContentDepthConfig | None = None,
        keyword_config: KeywordConfig | None = None,
        classifier_config: ClassifierConfig | None = None,
        recommendation_config: RecommendationConfig | None = None,
    ):
        self.settings = settings or get_settings()
        self.clock = clock or _utc_now

        if qualitative is None:
            if provider is None and self.settings.qualitative_enabled:
                provider = provider_from_settings(self.settings)
            if provider is not None:
                qualitative = QualitativeAnalyzer(
                    provider,
                    model=self.settings.qualitative_model,
                    timeout_seconds=self.settings.qualitative_timeout_seconds,
                    temperature=self.settings.qualitative_temperature,
                    max_tokens=self.settings.qualitative_max_tokens,
                    digest_token_budget=self.settings.digest_token_budget,
                    digest_max_paragraphs=self.settings.digest_max_paragraphs,
                    digest_max_list_items=self.settings.digest_max_list_items,
                )
        self.qualitative = qualitative

        self.extractor = ContentExtractor(extractor_config)
        self.heading_analyzer = HeadingAnalyzer()
        self.schema_analyzer = SchemaAnalyzer()
        self.classifier = ContentClassifier(classifier_config)
        self.readability_scorer = ReadabilityScorer(readability_config)
        self.structure_scorer = StructureScorer(structure_config)
        self.schema_scorer = SchemaScorer(schema_config)
        self.answer_matcher = AnswerMatcher(answer_config)
        self.content_depth_scorer = ContentDepthScorer(content_depth_config)
        self.keyword_scorer = KeywordScorer(keyword_config)
        self.aggregator = ScoreAggregator()
        self.recommender = RecommendationGenerator(recommendation_config)

    def _validate(
        self,
        html: object,
        url: object,
        industry_hint: str | None,
        target_keywords: list[str] | None,
    ) -> AnalysisRequest:
        try:
            return AnalysisRequest(
                html=html,
                url=url,
                industry_hint=industry_hint,
                target_keywords=target_keywords or [],
            )
        except ValidationError as e:
            message, field = _validation_message(e)
            logger.warning("analysis_invalid_input", field=field, error=message)
            raise InvalidInputError(message, field=field) from e

    async def analyze(
        self,
        html: str,
        url: str,
        industry_hint: str | None = None,
        target_keywords: list[str] | None = None,
    ) -> AnalysisResult:
        """
        Analyze one page.

        Args:
            html: Raw HTML or plain text of the page
            url: Page URL; https:// is assumed when no scheme is given
            industry_hint: Optional industry overriding detection
            target_keywords: Optional keywords; derived from H1 and title when omitted

        Returns:
            AnalysisResult

        Raises:
            InvalidInputError: Malformed URL or non-string content
            EmptyContentError: No usable text in the content
        """
        request = self._validate(html, url, industry_hint, target_keywords)
        if not request.html.strip():
            raise EmptyContentError(url=request.url)

        warnings: list[AnalysisWarning] = []

        # 1. Extract
        doc = self.extractor.extract(request.html, request.url)
        if doc.word_count == 0:
            raise EmptyContentError(url=request.url)
        for issue in doc.issues:
            warnings.append(AnalysisWarning(ErrorCode.EXTRACTION_PARTIAL, issue.message))
        if doc.issues:
            logger.warning("extraction_partial", url=request.url, issues=len(doc.issues))

        keywords = resolve_keywords(doc, request.target_keywords)

        # 2. Readability
        metrics = compute_readability(doc.prose_text())
        readability = self.readability_scorer.calculate(metrics)

        # 3. Structure
        headings = self.heading_analyzer.analyze(doc, keywords)
        structure = self.structure_scorer.calculate(headings, has_keywords=bool(keywords))

        # 4. Schema
        schema = self.schema_analyzer.analyze(doc)
        schema_score = self.schema_scorer.calculate(schema)

        # 5. Question/answer match
        answers = self.answer_matcher.match(doc, keywords, schema)

        # Supplementary sub-scores
        depth = self.content_depth_scorer.calculate(doc)
        keyword_score = self.keyword_scorer.calculate(doc, keywords)
        keywords_found = self.keyword_scorer.keywords_found(doc, keywords)

        # 6. Classify
        classification = self.classifier.classify(doc, schema, request.industry_hint)

        # 7. Qualitative model stage
        outcome: QualitativeOutcome | None = None
        if self.qualitative is not None:
            outcome = await self.qualitative.analyze(doc, classification, schema)
            if not outcome.available:
                warnings.append(
                    AnalysisWarning(
                        ErrorCode.QUALITATIVE_UNAVAILABLE,
                        f"Qualitative analysis unavailable ({outcome.reason})",
                    )
                )
        assessment = outcome.assessment if outcome is not None else None
        ai_score = assessment.score if assessment is not None else None

        # 8. Aggregate
        sub_scores = {
            READABILITY: readability.score,
            SCHEMA: schema_score.score,
            QUESTION_ANSWER_MATCH: answers.score,
            HEADINGS_STRUCTURE: structure.score,
            CONTENT_DEPTH: depth.score,
            KEYWORD_OPTIMIZATION: keyword_score.score,
        }
        plan = select_plan(classification.industry, ai_score)
        aggregate = self.aggregator.aggregate(sub_scores, plan)

        # 9. Recommendations
        scored = dict(sub_scores)
        if ai_score is not None:
            scored[AI_ANALYSIS] = ai_score
        recommendations = self.recommender.generate(
            scores=scored,
            weights=aggregate.weights,
            industry=classification.industry,
            doc=doc,
            headings=headings,
            schema=schema,
            faq_count=answers.faq_count,
            assessment=assessment,
        )

        result = AnalysisResult(
            url=request.url,
            timestamp=self.clock().isoformat(),
            scores=Scores(
                readability=readability.score,
                schema=schema_score.score,
                question_answer_match=answers.score,
                headings_structure=structure.score,
                overall_score=aggregate.overall,
                content_depth=depth.score,
                keyword_optimization=keyword_score.score,
                ai_analysis_score=ai_score,
            ),
            recommendations=tuple(recommendations.recommendations),
            quick_wins=tuple(recommendations.quick_wins),
            details=AnalysisDetails(
                word_count=doc.word_count,
                has_schema=schema.has_schema,
                heading_count=len(doc.headings),
                image_count=len(doc.images),
                image_alt_text_rate=doc.image_alt_text_rate,
                readability_metrics=metrics.to_dict(),
                heading_analysis=headings.to_dict(),
                schema_details=schema.to_dict(),
                paragraph_count=len(doc.paragraphs),
                lists_and_tables=len(doc.of_type(NodeType.LIST, NodeType.TABLE)),
                faq_count=answers.faq_count,
                content_to_code_ratio=doc.content_to_code_ratio,
                keywords_found=keywords_found,
                ai_analysis=assessment.to_dict() if assessment is not None else None,
                content_type=classification.content_type.value,
                industry=classification.industry.value,
                weights=aggregate.weights,
                warnings=[w.to_dict() for w in warnings],
            ),
        )

        logger.info(
            "analysis_complete",
            url=request.url,
            overall=aggregate.overall,
            plan=aggregate.plan_name,
            industry=classification.industry.value,
            recommendations=len(result.recommendations),
            warnings=len(warnings),
        )
        return result


async def analyze_content(
    html: str,
    url: str,
    industry_hint: str | None = None,
    target_keywords: list[str] | None = None,
    provider: QualitativeProvider | None = None,
) -> AnalysisResult:
    """Convenience function to analyze a page with default settings."""
    engine = ContentAnalysisEngine(provider=provider)
    return await engine.analyze(html, url, industry_hint=industry_hint, target_keywords=target_keywords)


def analyze_content_sync(
    html: str,
    url: str,
    industry_hint: str | None = None,
    target_keywords: list[str] | None = None,
    provider: QualitativeProvider | None = None,
) -> AnalysisResult:
    """Blocking wrapper around analyze_content for callers without an event loop."""
    return asyncio.run(
        analyze_content(html, url, industry_hint=industry_hint, target_keywords=target_keywords, provider=provider)
    )
