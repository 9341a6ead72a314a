"""Schema sub-score.

Zero when a page carries no structured data at all. Otherwise a base score
plus completeness, relevant-type diversity, volume and an FAQPage bonus,
less a penalty for invalid or unparseable blocks.
"""

from dataclasses import dataclass

import structlog

from aeoscore.extraction.schema import VALUABLE_SCHEMA_TYPES, SchemaFinding
from aeoscore.scoring.components import ScoreComponent, SubScore, clamp_score

logger = structlog.get_logger(__name__)


@dataclass
class SchemaScoreConfig:
    """Point allocations for the schema sub-score."""

    base_points: float = 25.0
    completeness_points: float = 35.0  # Scaled by average completeness
    diversity_points_per_weight: float = 4.0
    diversity_cap: float = 20.0
    unknown_type_weight: float = 0.5
    volume_points_per_item: float = 5.0
    volume_cap: float = 10.0
    faq_bonus: float = 10.0
    invalid_penalty_per_block: float = 5.0
    invalid_penalty_cap: float = 20.0


class SchemaScorer:
    """Calculates the schema sub-score."""

    def __init__(self, config: SchemaScoreConfig | None = None):
        self.config = config or SchemaScoreConfig()

    def calculate(self, finding: SchemaFinding) -> SubScore:
        cfg = self.config
        if not finding.has_schema:
            return SubScore(name="schema", score=0, explanation="No structured data found")

        valid_types = sorted({i.schema_type for i in finding.valid_items})
        type_weight = sum(VALUABLE_SCHEMA_TYPES.get(t, cfg.unknown_type_weight) for t in valid_types)

        completeness = cfg.completeness_points * finding.avg_completeness
        diversity = min(cfg.diversity_cap, type_weight * cfg.diversity_points_per_weight)
        volume = min(cfg.volume_cap, len(finding.valid_items) * cfg.volume_points_per_item)
        faq = cfg.faq_bonus if finding.has_valid("FAQPage") else 0.0
        penalty = min(cfg.invalid_penalty_cap, finding.invalid_block_count * cfg.invalid_penalty_per_block)

        score = clamp_score(cfg.base_points + completeness + diversity + volume + faq - penalty)

        components = [
            ScoreComponent(
                name="completeness",
                raw_score=finding.avg_completeness * 100,
                weight=cfg.completeness_points / 100,
                explanation=f"Average required-field completeness {finding.avg_completeness:.0%}",
            ),
            ScoreComponent(
                name="diversity",
                raw_score=diversity / cfg.diversity_cap * 100 if cfg.diversity_cap else 0.0,
                weight=cfg.diversity_cap / 100,
                explanation=f"Valid types: {', '.join(valid_types) or 'none'}",
            ),
            ScoreComponent(
                name="volume",
                raw_score=volume / cfg.volume_cap * 100 if cfg.volume_cap else 0.0,
                weight=cfg.volume_cap / 100,
                explanation=f"{len(finding.valid_items)} valid entities",
            ),
            ScoreComponent(
                name="faq_page",
                raw_score=100.0 if faq else 0.0,
                weight=cfg.faq_bonus / 100,
                explanation="Valid FAQPage markup" if faq else "No valid FAQPage markup",
            ),
        ]

        logger.info(
            "schema_score_calculated",
            score=score,
            blocks=len(finding.blocks),
            valid_types=valid_types,
            invalid_blocks=finding.invalid_block_count,
        )
        return SubScore(
            name="schema",
            score=score,
            components=components,
            explanation=(
                f"{len(finding.blocks)} blocks, {finding.invalid_block_count} invalid, "
                f"avg completeness {finding.avg_completeness:.0%}"
            ),
        )


def calculate_schema_score(finding: SchemaFinding, config: SchemaScoreConfig | None = None) -> SubScore:
    """Convenience function to calculate the schema sub-score."""
    return SchemaScorer(config).calculate(finding)
