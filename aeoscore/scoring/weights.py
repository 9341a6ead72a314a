"""Industry weight profiles and the per-run weight plan.

Each profile assigns a weight to every sub-score, including the model
score, and sums to 1.0. A run selects one plan up front:

- WithAi: the model score is present and participates with its own weight.
- WithoutAi: the model weight is redistributed proportionally,
  w_i / (1 - w_ai), across the remaining sub-scores.

The aggregator only ever asks the plan for its participants.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from aeoscore.extraction.classifier import Industry

READABILITY = "readability"
SCHEMA = "schema"
QUESTION_ANSWER_MATCH = "questionAnswerMatch"
HEADINGS_STRUCTURE = "headingsStructure"
CONTENT_DEPTH = "contentDepth"
KEYWORD_OPTIMIZATION = "keywordOptimization"
AI_ANALYSIS = "aiAnalysisScore"

DETERMINISTIC_KEYS = (
    READABILITY,
    SCHEMA,
    QUESTION_ANSWER_MATCH,
    HEADINGS_STRUCTURE,
    CONTENT_DEPTH,
    KEYWORD_OPTIMIZATION,
)
ALL_KEYS = DETERMINISTIC_KEYS + (AI_ANALYSIS,)

WEIGHT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class WeightProfile:
    """Weights for every sub-score; validated to sum to 1.0."""

    name: str
    weights: Mapping[str, float]

    def __post_init__(self) -> None:
        missing = set(ALL_KEYS) - set(self.weights)
        if missing:
            raise ValueError(f"Weight profile {self.name!r} is missing {sorted(missing)}")
        total = math.fsum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Weight profile {self.name!r} sums to {total}, expected 1.0")
        if self.weights[AI_ANALYSIS] >= 1.0:
            raise ValueError(f"Weight profile {self.name!r} leaves nothing to redistribute")
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))


def _profile(name: str, read: float, schema: float, qa: float, head: float, depth: float, kw: float, ai: float) -> WeightProfile:
    return WeightProfile(
        name=name,
        weights={
            READABILITY: read,
            SCHEMA: schema,
            QUESTION_ANSWER_MATCH: qa,
            HEADINGS_STRUCTURE: head,
            CONTENT_DEPTH: depth,
            KEYWORD_OPTIMIZATION: kw,
            AI_ANALYSIS: ai,
        },
    )


# Content-heavy categories weight readability and depth higher; commerce
# and local categories lean on schema and Q&A coverage.
WEIGHT_PROFILES: Mapping[Industry, WeightProfile] = MappingProxyType(
    {
        Industry.GENERIC: _profile("generic", 0.20, 0.15, 0.20, 0.15, 0.10, 0.05, 0.15),
        Industry.ECOMMERCE: _profile("ecommerce", 0.10, 0.25, 0.20, 0.10, 0.05, 0.10, 0.20),
        Industry.SAAS: _profile("saas", 0.15, 0.15, 0.20, 0.15, 0.10, 0.10, 0.15),
        Industry.LOCAL_BUSINESS: _profile("local_business", 0.10, 0.25, 0.20, 0.10, 0.05, 0.15, 0.15),
        Industry.HEALTHCARE: _profile("healthcare", 0.20, 0.15, 0.20, 0.10, 0.15, 0.05, 0.15),
        Industry.PROFESSIONAL_SERVICES: _profile("professional_services", 0.15, 0.15, 0.15, 0.15, 0.15, 0.10, 0.15),
    }
)


@dataclass(frozen=True)
class Participant:
    """A sub-score taking part in the weighted sum."""

    key: str
    weight: float
    score: int


@dataclass(frozen=True)
class WithAi:
    """Plan used when the qualitative model score is available."""

    profile: WeightProfile
    ai_score: int

    @property
    def weights(self) -> dict[str, float]:
        return dict(self.profile.weights)

    def participants(self, sub_scores: Mapping[str, int]) -> list[Participant]:
        scores = {**sub_scores, AI_ANALYSIS: self.ai_score}
        return [Participant(key, weight, scores[key]) for key, weight in self.weights.items()]


@dataclass(frozen=True)
class WithoutAi:
    """Plan used when the qualitative stage is absent; redistributes its weight."""

    profile: WeightProfile

    @property
    def weights(self) -> dict[str, float]:
        remaining = 1.0 - self.profile.weights[AI_ANALYSIS]
        return {key: w / remaining for key, w in self.profile.weights.items() if key != AI_ANALYSIS}

    def participants(self, sub_scores: Mapping[str, int]) -> list[Participant]:
        return [Participant(key, weight, sub_scores[key]) for key, weight in self.weights.items()]


WeightPlan = WithAi | WithoutAi


def get_profile(industry: Industry) -> WeightProfile:
    return WEIGHT_PROFILES.get(industry, WEIGHT_PROFILES[Industry.GENERIC])


def select_plan(industry: Industry, ai_score: int | None) -> WeightPlan:
    """Pick the weight plan once per run."""
    profile = get_profile(industry)
    if ai_score is None:
        return WithoutAi(profile)
    return WithAi(profile, ai_score)
