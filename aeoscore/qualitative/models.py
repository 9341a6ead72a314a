"""Data models for the qualitative model stage."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ProviderType(StrEnum):
    """Supported language-model providers."""

    OPENROUTER = "openrouter"
    OPENAI = "openai"
    MOCK = "mock"


@dataclass
class UsageStats:
    """Token usage for one completion."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class ProviderError:
    """Error from a provider."""

    provider: ProviderType
    error_type: str  # api_error, timeout, transport, malformed_response
    message: str
    retryable: bool = True

    def to_dict(self) -> dict:
        return {
            "provider": self.provider.value,
            "error_type": self.error_type,
            "message": self.message,
            "retryable": self.retryable,
        }


@dataclass
class CompletionRequest:
    """The payload sent to the model: instruction, digest and target schema."""

    system_instruction: str
    content_digest: str
    target_schema: dict[str, Any]
    model: str = "openai/gpt-4o-mini"
    temperature: float = 0.2
    max_tokens: int = 2000

    def to_messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system_instruction},
            {"role": "user", "content": self.content_digest},
        ]


@dataclass
class CompletionResponse:
    """Response from a single completion call."""

    provider: ProviderType
    model: str
    content: str
    usage: UsageStats = field(default_factory=UsageStats)
    latency_ms: float = 0.0
    success: bool = True
    error: ProviderError | None = None

    def to_dict(self) -> dict:
        return {
            "provider": self.provider.value,
            "model": self.model,
            "content": self.content[:500] + "..." if len(self.content) > 500 else self.content,
            "usage": self.usage.to_dict(),
            "latency_ms": round(self.latency_ms, 2),
            "success": self.success,
            "error": self.error.to_dict() if self.error else None,
        }


# -- expected model output ------------------------------------------------


class DimensionAssessment(BaseModel):
    """One qualitative dimension: a 0-100 score with observations."""

    model_config = ConfigDict(extra="ignore")

    score: int = Field(ge=0, le=100)
    observations: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _round_score(cls, value: Any) -> Any:
        # Models sometimes answer 72.5 or "72"
        if isinstance(value, str):
            value = value.strip().rstrip("%")
            try:
                value = float(value)
            except ValueError:
                return value
        if isinstance(value, float):
            return round(value)
        return value

    @field_validator("observations", "recommendations", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value


class ModelSuggestion(BaseModel):
    """A recommendation proposed by the model."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1)
    description: str = ""
    priority: Literal["high", "medium", "low"] = "medium"
    rationale: str = ""
    example: str = ""
    expected_impact: str = Field(default="", validation_alias=AliasChoices("expected_impact", "expectedImpact"))

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            if value not in ("high", "medium", "low"):
                return "medium"
        return value


DIMENSIONS = (
    "content_clarity",
    "semantic_relevance",
    "entity_coverage",
    "information_completeness",
    "factual_accuracy",
)


class QualitativeAssessment(BaseModel):
    """Strict JSON shape expected back from the model."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    content_clarity: DimensionAssessment
    semantic_relevance: DimensionAssessment
    entity_coverage: DimensionAssessment = Field(
        validation_alias=AliasChoices("entity_coverage", "entity_recognition"),
    )
    information_completeness: DimensionAssessment
    factual_accuracy: DimensionAssessment
    suggestions: list[ModelSuggestion] = Field(
        default_factory=list,
        validation_alias=AliasChoices("suggestions", "priority_actions"),
    )

    @field_validator("suggestions", mode="before")
    @classmethod
    def _drop_bad_suggestions(cls, value: Any) -> Any:
        # One malformed suggestion must not sink the whole assessment
        if not isinstance(value, list):
            return []
        return [s for s in value if isinstance(s, dict) and isinstance(s.get("title"), str) and s["title"].strip()]

    def dimensions(self) -> dict[str, DimensionAssessment]:
        return {name: getattr(self, name) for name in DIMENSIONS}

    @property
    def score(self) -> int:
        """Mean of the five dimension scores, rounded."""
        values = [d.score for d in self.dimensions().values()]
        return round(sum(values) / len(values))

    def to_dict(self) -> dict:
        def camel(name: str) -> str:
            head, *rest = name.split("_")
            return head + "".join(part.title() for part in rest)

        return {
            "score": self.score,
            **{camel(name): dim.model_dump() for name, dim in self.dimensions().items()},
            "suggestions": [s.model_dump(include={"title", "description", "priority"}) for s in self.suggestions],
        }
