"""Shared building blocks for sub-score calculators."""

from dataclasses import dataclass, field


@dataclass
class ScoreComponent:
    """Score for a single component of a sub-score."""

    name: str
    raw_score: float  # 0-100
    weight: float  # Share of the sub-score, 0-1
    explanation: str
    details: dict = field(default_factory=dict)

    @property
    def weighted_score(self) -> float:
        return self.raw_score * self.weight

    @property
    def level(self) -> str:
        return score_level(self.raw_score)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "rawScore": round(self.raw_score, 2),
            "weight": self.weight,
            "weightedScore": round(self.weighted_score, 2),
            "level": self.level,
            "explanation": self.explanation,
            "details": self.details,
        }


@dataclass
class SubScore:
    """A named 0-100 integer sub-score with its breakdown."""

    name: str
    score: int
    components: list[ScoreComponent] = field(default_factory=list)
    explanation: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "score": self.score,
            "level": score_level(self.score),
            "explanation": self.explanation,
            "components": [c.to_dict() for c in self.components],
        }


def clamp_score(value: float) -> int:
    """Round and clamp into the 0-100 integer range."""
    return int(min(100, max(0, round(value))))


def score_level(score: float) -> str:
    """Progress level for a 0-100 score."""
    if score >= 80:
        return "full"
    if score >= 50:
        return "partial"
    return "limited"


def band_score(
    value: float,
    optimal_low: float,
    optimal_high: float,
    below_penalty: float,
    above_penalty: float,
) -> float:
    """
    Map a metric onto 0-100 with an optimal band.

    Inside [optimal_low, optimal_high] the score is 100. Outside it the score
    falls linearly by the given penalty per unit of distance, floored at 0.
    """
    if value < optimal_low:
        return max(0.0, 100.0 - (optimal_low - value) * below_penalty)
    if value > optimal_high:
        return max(0.0, 100.0 - (value - optimal_high) * above_penalty)
    return 100.0


def blend(components: list[ScoreComponent]) -> int:
    total_weight = sum(c.weight for c in components)
    if total_weight <= 0:
        return 0
    return clamp_score(sum(c.weighted_score for c in components) / total_weight)
