"""Sub-score calculators and the weighted aggregator."""

from aeoscore.scoring.answers import AnswerMatcher, AnswerMatchResult, match_questions
from aeoscore.scoring.calculator import AggregateScore, ScoreAggregator, calculate_overall_score
from aeoscore.scoring.components import ScoreComponent, SubScore
from aeoscore.scoring.weights import WEIGHT_PROFILES, WeightPlan, WithAi, WithoutAi, select_plan

__all__ = [
    "WEIGHT_PROFILES",
    "AggregateScore",
    "AnswerMatchResult",
    "AnswerMatcher",
    "ScoreAggregator",
    "ScoreComponent",
    "SubScore",
    "WeightPlan",
    "WithAi",
    "WithoutAi",
    "calculate_overall_score",
    "match_questions",
    "select_plan",
]
