"""Qualitative assessment by an external language model."""

from aeoscore.qualitative.analyzer import QualitativeAnalyzer, QualitativeOutcome
from aeoscore.qualitative.models import ProviderType, QualitativeAssessment
from aeoscore.qualitative.providers import (
    MockProvider,
    OpenAIProvider,
    OpenRouterProvider,
    ProviderConfig,
    QualitativeProvider,
    get_provider,
    provider_from_settings,
)

__all__ = [
    "MockProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "ProviderConfig",
    "ProviderType",
    "QualitativeAnalyzer",
    "QualitativeAssessment",
    "QualitativeOutcome",
    "QualitativeProvider",
    "get_provider",
    "provider_from_settings",
]
