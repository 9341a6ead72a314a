"""Headings-structure sub-score.

Blends heading hierarchy quality (penalties per issue) with keyword
presence in headings.
"""

from dataclasses import dataclass

import structlog

from aeoscore.extraction.headings import HeadingAnalysis, HeadingIssueType
from aeoscore.scoring.components import ScoreComponent, SubScore, blend

logger = structlog.get_logger(__name__)


@dataclass
class StructureConfig:
    """Penalty and blend constants for the headings-structure sub-score."""

    penalty_missing_h1: float = 25.0
    penalty_multiple_h1: float = 10.0  # Once, regardless of how many extra H1s
    penalty_skip: float = 10.0  # Per skipped level transition
    penalty_empty: float = 5.0
    penalty_duplicate: float = 3.0
    penalty_too_long: float = 2.0

    keyword_points_per_heading: float = 50.0
    keyword_neutral_score: float = 50.0  # Used when no target keywords exist

    weight_hierarchy: float = 0.7
    weight_keywords: float = 0.3


class StructureScorer:
    """Calculates the headings-structure sub-score."""

    def __init__(self, config: StructureConfig | None = None):
        self.config = config or StructureConfig()

    def calculate(self, analysis: HeadingAnalysis, has_keywords: bool = True) -> SubScore:
        cfg = self.config
        if analysis.total_headings == 0:
            return SubScore(name="headingsStructure", score=0, explanation="No headings found")

        penalties = {
            "missing_h1": cfg.penalty_missing_h1 if analysis.h1_count == 0 else 0.0,
            "multiple_h1": cfg.penalty_multiple_h1 if analysis.h1_count > 1 else 0.0,
            "skips": cfg.penalty_skip * analysis.skip_count,
            "empty": cfg.penalty_empty * analysis.count_issues(HeadingIssueType.EMPTY_HEADING),
            "duplicates": cfg.penalty_duplicate * analysis.duplicate_count,
            "too_long": cfg.penalty_too_long * analysis.count_issues(HeadingIssueType.TOO_LONG),
        }
        hierarchy = max(0.0, 100.0 - sum(penalties.values()))

        if has_keywords:
            keyword_score = min(100.0, analysis.keyword_heading_count * cfg.keyword_points_per_heading)
            keyword_explanation = f"{analysis.keyword_heading_count} headings contain a target keyword"
        else:
            keyword_score = cfg.keyword_neutral_score
            keyword_explanation = "No target keywords to look for"

        components = [
            ScoreComponent(
                name="hierarchy",
                raw_score=hierarchy,
                weight=cfg.weight_hierarchy,
                explanation=(
                    "Valid heading hierarchy"
                    if analysis.hierarchy_valid
                    else f"{len(analysis.issues)} hierarchy issues found"
                ),
                details={k: v for k, v in penalties.items() if v},
            ),
            ScoreComponent(
                name="keyword_headings",
                raw_score=keyword_score,
                weight=cfg.weight_keywords,
                explanation=keyword_explanation,
            ),
        ]
        score = blend(components)

        logger.info(
            "structure_score_calculated",
            score=score,
            headings=analysis.total_headings,
            issues=len(analysis.issues),
        )
        return SubScore(
            name="headingsStructure",
            score=score,
            components=components,
            explanation=f"{analysis.total_headings} headings, {len(analysis.issues)} issues",
        )


def calculate_structure_score(
    analysis: HeadingAnalysis,
    has_keywords: bool = True,
    config: StructureConfig | None = None,
) -> SubScore:
    """Convenience function to calculate the headings-structure sub-score."""
    return StructureScorer(config).calculate(analysis, has_keywords)
