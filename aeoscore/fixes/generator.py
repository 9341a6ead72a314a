"""Recommendation generator.

Turns sub-scores and findings into ranked recommendations and quick wins,
then merges in suggestions from the qualitative model.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

import structlog

from aeoscore.extraction.classifier import Industry
from aeoscore.extraction.document import ContentDocument
from aeoscore.extraction.headings import HeadingAnalysis
from aeoscore.extraction.schema import SchemaFinding
from aeoscore.fixes.templates import (
    RECOMMENDATION_TEMPLATES,
    Effort,
    RecommendationTemplate,
    Trigger,
    get_template,
)
from aeoscore.models import PRIORITY_RANK, QuickWin, Recommendation
from aeoscore.qualitative.models import QualitativeAssessment
from aeoscore.scoring.weights import (
    AI_ANALYSIS,
    CONTENT_DEPTH,
    HEADINGS_STRUCTURE,
    KEYWORD_OPTIMIZATION,
    QUESTION_ANSWER_MATCH,
    READABILITY,
    SCHEMA,
)

logger = structlog.get_logger(__name__)

SCORE_TRIGGERS: dict[Trigger, str] = {
    Trigger.LOW_READABILITY: READABILITY,
    Trigger.LOW_SCHEMA: SCHEMA,
    Trigger.LOW_QUESTION_ANSWER: QUESTION_ANSWER_MATCH,
    Trigger.LOW_HEADINGS: HEADINGS_STRUCTURE,
    Trigger.LOW_CONTENT_DEPTH: CONTENT_DEPTH,
    Trigger.LOW_KEYWORDS: KEYWORD_OPTIMIZATION,
    Trigger.LOW_AI_ANALYSIS: AI_ANALYSIS,
}

TEMPLATE_ORDER: dict[Trigger, int] = {trigger: i for i, trigger in enumerate(RECOMMENDATION_TEMPLATES)}

PUNCTUATION = re.compile(r"[^\w\s]")
WHITESPACE = re.compile(r"\s+")


def _default_industry_thresholds() -> dict[Industry, dict[str, int]]:
    return {
        Industry.ECOMMERCE: {SCHEMA: 80, QUESTION_ANSWER_MATCH: 75},
        Industry.SAAS: {QUESTION_ANSWER_MATCH: 75, CONTENT_DEPTH: 75},
        Industry.LOCAL_BUSINESS: {SCHEMA: 80},
        Industry.HEALTHCARE: {READABILITY: 75, CONTENT_DEPTH: 75},
        Industry.PROFESSIONAL_SERVICES: {AI_ANALYSIS: 75},
    }


@dataclass
class RecommendationConfig:
    """Configuration for recommendation generation."""

    default_threshold: int = 70
    industry_thresholds: dict[Industry, dict[str, int]] = field(default_factory=_default_industry_thresholds)

    # Detail triggers
    alt_text_min_rate: int = 80
    thin_content_words: int = 500
    meta_description_min_chars: int = 50

    # Priority from gap x weight
    high_priority_impact: float = 6.0
    medium_priority_impact: float = 2.5

    # Limits
    max_recommendations: int = 12
    max_quick_wins: int = 5

    def threshold_for(self, key: str, industry: Industry) -> int:
        return self.industry_thresholds.get(industry, {}).get(key, self.default_threshold)


@dataclass
class RecommendationSet:
    """Ranked recommendations and quick wins for one analysis."""

    recommendations: list[Recommendation] = field(default_factory=list)
    quick_wins: list[QuickWin] = field(default_factory=list)
    triggers: list[Trigger] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "quickWins": [q.to_dict() for q in self.quick_wins],
            "triggers": [t.value for t in self.triggers],
        }


def normalize_title(title: str) -> str:
    """Case-insensitive, punctuation-stripped title key."""
    text = PUNCTUATION.sub(" ", title.casefold())
    return WHITESPACE.sub(" ", text).strip()


class RecommendationGenerator:
    """Generates recommendations and quick wins from scores and findings."""

    def __init__(self, config: RecommendationConfig | None = None):
        self.config = config or RecommendationConfig()

    def generate(
        self,
        scores: Mapping[str, int],
        weights: Mapping[str, float],
        industry: Industry,
        doc: ContentDocument,
        headings: HeadingAnalysis,
        schema: SchemaFinding,
        faq_count: int = 0,
        assessment: QualitativeAssessment | None = None,
    ) -> RecommendationSet:
        """
        Generate ranked recommendations.

        Args:
            scores: Sub-scores keyed by name; aiAnalysisScore only when present
            weights: Effective weights of the selected plan
            industry: Industry used for thresholds and template text
            doc: Extracted document
            headings: Heading analysis
            schema: Schema finding
            faq_count: Question units found on the page
            assessment: Qualitative assessment with model suggestions, if any

        Returns:
            RecommendationSet
        """
        triggers = self._score_triggers(scores, industry) + self._detail_triggers(doc, headings, schema, faq_count)

        ranked: list[tuple[tuple, Recommendation, RecommendationTemplate, float]] = []
        for trigger in triggers:
            template = get_template(trigger, industry)
            if template.target is None:
                # Measured by no sub-score: ranked by its floor, never a quick win
                impact = template.min_impact
                potential = 0.0
            else:
                score = scores.get(template.target)
                if score is None:
                    continue
                weight = weights.get(template.target, 0.0)
                threshold = self.config.threshold_for(template.target, industry)
                impact = max(max(0, threshold - score) * weight, template.min_impact)
                # Only actions on a sub-score below its threshold can be quick wins
                potential = round(min(template.max_gain, 100 - score) * weight, 1) if score < threshold else 0.0
            recommendation = Recommendation(
                title=template.title,
                description=template.description,
                rationale=template.rationale,
                example=template.example,
                expected_impact=template.expected_impact,
                priority=self._priority(impact),
                category=template.category.value,
                source="rule",
                target=template.target,
                impact=round(impact, 2),
            )
            key = (PRIORITY_RANK[recommendation.priority], -impact, TEMPLATE_ORDER[trigger])
            ranked.append((key, recommendation, template, potential))

        ranked.sort(key=lambda entry: entry[0])
        recommendations = [entry[1] for entry in ranked]
        quick_wins = self._quick_wins(ranked)

        if assessment is not None and assessment.suggestions:
            recommendations = self._merge_model_suggestions(recommendations, assessment)

        logger.debug(
            "recommendations_generated",
            triggers=[t.value for t in triggers],
            recommendations=len(recommendations),
            quick_wins=len(quick_wins),
        )

        return RecommendationSet(
            recommendations=recommendations[: self.config.max_recommendations],
            quick_wins=quick_wins,
            triggers=triggers,
        )

    def _score_triggers(self, scores: Mapping[str, int], industry: Industry) -> list[Trigger]:
        triggers = []
        for trigger, key in SCORE_TRIGGERS.items():
            score = scores.get(key)
            if score is not None and score < self.config.threshold_for(key, industry):
                triggers.append(trigger)
        return triggers

    def _detail_triggers(
        self,
        doc: ContentDocument,
        headings: HeadingAnalysis,
        schema: SchemaFinding,
        faq_count: int,
    ) -> list[Trigger]:
        triggers = []
        if headings.h1_count == 0:
            triggers.append(Trigger.MISSING_H1)
        if headings.skip_count > 0:
            triggers.append(Trigger.HEADING_SKIPS)
        if doc.images and doc.image_alt_text_rate < self.config.alt_text_min_rate:
            triggers.append(Trigger.MISSING_ALT_TEXT)
        if doc.word_count < self.config.thin_content_words:
            triggers.append(Trigger.THIN_CONTENT)
        if schema.parse_error_count > 0:
            triggers.append(Trigger.SCHEMA_PARSE_ERROR)
        if faq_count > 0 and not schema.has_valid("FAQPage"):
            triggers.append(Trigger.FAQ_WITHOUT_SCHEMA)
        if len(doc.meta_description or "") < self.config.meta_description_min_chars:
            triggers.append(Trigger.WEAK_META_DESCRIPTION)
        return triggers

    def _priority(self, impact: float) -> str:
        if impact >= self.config.high_priority_impact:
            return "high"
        if impact >= self.config.medium_priority_impact:
            return "medium"
        return "low"

    def _quick_wins(self, ranked: list[tuple[tuple, Recommendation, RecommendationTemplate, float]]) -> list[QuickWin]:
        """Low-effort actions, largest potential increase first."""
        candidates = [
            (potential, TEMPLATE_ORDER[template.trigger], template)
            for _, _, template, potential in ranked
            if template.effort == Effort.LOW and potential > 0
        ]
        candidates.sort(key=lambda c: (-c[0], c[1]))
        return [
            QuickWin(
                action=template.action,
                impact=template.expected_impact,
                effort=template.effort.value,
                potential_increase=potential,
            )
            for potential, _, template in candidates[: self.config.max_quick_wins]
        ]

    def _merge_model_suggestions(
        self,
        recommendations: list[Recommendation],
        assessment: QualitativeAssessment,
    ) -> list[Recommendation]:
        """Append model suggestions, deduplicated by normalized title."""
        merged = list(recommendations)
        positions = {normalize_title(r.title): i for i, r in enumerate(merged)}

        for suggestion in assessment.suggestions:
            key = normalize_title(suggestion.title)
            if not key:
                continue
            if key in positions:
                existing = merged[positions[key]]
                if suggestion.priority == "high" and existing.priority != "high":
                    merged[positions[key]] = replace(existing, priority="high")
                continue
            positions[key] = len(merged)
            merged.append(
                Recommendation(
                    title=suggestion.title.strip(),
                    description=suggestion.description,
                    rationale=suggestion.rationale,
                    example=suggestion.example,
                    expected_impact=suggestion.expected_impact,
                    priority=suggestion.priority,
                    category="ai",
                    source="model",
                    target=AI_ANALYSIS,
                )
            )

        # Stable sort keeps rule order ahead of model order within a priority
        return sorted(merged, key=lambda r: (PRIORITY_RANK[r.priority], -r.impact))


def generate_recommendations(
    scores: Mapping[str, int],
    weights: Mapping[str, float],
    industry: Industry,
    doc: ContentDocument,
    headings: HeadingAnalysis,
    schema: SchemaFinding,
    faq_count: int = 0,
    assessment: QualitativeAssessment | None = None,
) -> RecommendationSet:
    """Convenience function to generate recommendations."""
    generator = RecommendationGenerator()
    return generator.generate(scores, weights, industry, doc, headings, schema, faq_count, assessment)
