"""Recommendation and quick-win generation."""

from aeoscore.fixes.generator import (
    RecommendationConfig,
    RecommendationGenerator,
    RecommendationSet,
    generate_recommendations,
    normalize_title,
)
from aeoscore.fixes.templates import (
    INDUSTRY_OVERRIDES,
    RECOMMENDATION_TEMPLATES,
    Category,
    Effort,
    RecommendationTemplate,
    Trigger,
    get_template,
)

__all__ = [
    "INDUSTRY_OVERRIDES",
    "RECOMMENDATION_TEMPLATES",
    "Category",
    "Effort",
    "RecommendationConfig",
    "RecommendationGenerator",
    "RecommendationSet",
    "RecommendationTemplate",
    "Trigger",
    "generate_recommendations",
    "get_template",
    "normalize_title",
]
