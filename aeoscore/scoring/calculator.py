"""Score aggregator.

overallScore = round(Σ weight_i * subScore_i) over the participants of the
selected weight plan, clamped into [min, max] of the contributing
sub-scores so rounding can never push it outside the weighted-average
bound.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from aeoscore.scoring.weights import AI_ANALYSIS, Participant, WeightPlan, WithAi

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AggregateScore:
    """The overall score with the plan and weights that produced it."""

    overall: int
    plan_name: str  # with_ai or without_ai
    profile: str
    participants: tuple[Participant, ...]

    @property
    def weights(self) -> dict[str, float]:
        return {p.key: p.weight for p in self.participants}

    def weight_of(self, key: str) -> float:
        return self.weights.get(key, 0.0)

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "plan": self.plan_name,
            "profile": self.profile,
            "weights": {k: round(v, 4) for k, v in self.weights.items()},
        }


class ScoreAggregator:
    """Combines sub-scores using a weight plan."""

    def aggregate(self, sub_scores: Mapping[str, int], plan: WeightPlan) -> AggregateScore:
        """
        Compute the overall score.

        Args:
            sub_scores: Deterministic sub-scores keyed by result name
            plan: WithAi or WithoutAi plan selected for this run

        Returns:
            AggregateScore
        """
        participants = tuple(plan.participants(sub_scores))
        total_weight = math.fsum(p.weight for p in participants)
        if abs(total_weight - 1.0) > 1e-6:
            logger.warning("weights_do_not_sum_to_one", total=total_weight, profile=plan.profile.name)

        weighted = math.fsum(p.weight * p.score for p in participants)
        contributing = [p.score for p in participants if p.weight > 0]
        overall = round(weighted)
        if contributing:
            overall = min(max(contributing), max(min(contributing), overall))

        plan_name = "with_ai" if isinstance(plan, WithAi) else "without_ai"
        logger.info(
            "overall_score_calculated",
            overall=overall,
            plan=plan_name,
            profile=plan.profile.name,
            ai_included=any(p.key == AI_ANALYSIS for p in participants),
        )
        return AggregateScore(
            overall=overall,
            plan_name=plan_name,
            profile=plan.profile.name,
            participants=participants,
        )


def calculate_overall_score(sub_scores: Mapping[str, int], plan: WeightPlan) -> AggregateScore:
    """Convenience function to aggregate sub-scores."""
    return ScoreAggregator().aggregate(sub_scores, plan)
