"""Request and result models for the analysis engine."""

import json
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

Priority = Literal["high", "medium", "low"]
PRIORITY_RANK: dict[str, int] = {"high": 0, "medium": 1, "low": 2}

MAX_URL_LENGTH = 2048


class AnalysisRequest(BaseModel):
    """Validated input to a single analysis."""

    model_config = ConfigDict(extra="forbid")

    html: StrictStr
    url: StrictStr
    industry_hint: str | None = None
    target_keywords: list[str] = Field(default_factory=list)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        if len(v) > MAX_URL_LENGTH:
            raise ValueError(f"URL too long (max {MAX_URL_LENGTH} characters)")
        if "://" not in v:
            v = f"https://{v}"
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https"):
            raise ValueError("Only HTTP and HTTPS URLs are allowed")
        hostname = (parsed.hostname or "").lower()
        if not hostname or ("." not in hostname and hostname != "localhost"):
            raise ValueError("Invalid URL")
        return v

    @field_validator("target_keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, list | tuple):
            return [k.strip() for k in v if isinstance(k, str) and k.strip()]
        return v


@dataclass(frozen=True)
class Recommendation:
    """A single improvement action."""

    title: str
    description: str
    rationale: str
    example: str
    expected_impact: str
    priority: Priority
    category: str  # technical, content, structure, ai
    source: str = "rule"  # rule or model
    target: str | None = None  # Sub-score key this improves
    impact: float = 0.0  # gap x weight, used for ranking

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "rationale": self.rationale,
            "example": self.example,
            "expectedImpact": self.expected_impact,
            "priority": self.priority,
            "category": self.category,
            "source": self.source,
            "target": self.target,
        }


@dataclass(frozen=True)
class QuickWin:
    """A low-effort action with its estimated overall score increase."""

    action: str
    impact: str
    effort: str  # low, medium, high
    potential_increase: float

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "impact": self.impact,
            "effort": self.effort,
            "potentialIncrease": self.potential_increase,
        }


@dataclass(frozen=True)
class Scores:
    """Named sub-scores and the weighted overall score."""

    readability: int
    schema: int
    question_answer_match: int
    headings_structure: int
    overall_score: int
    content_depth: int | None = None
    keyword_optimization: int | None = None
    ai_analysis_score: int | None = None

    def to_dict(self) -> dict:
        data: dict[str, int] = {
            "readability": self.readability,
            "schema": self.schema,
            "questionAnswerMatch": self.question_answer_match,
            "headingsStructure": self.headings_structure,
            "overallScore": self.overall_score,
        }
        if self.content_depth is not None:
            data["contentDepth"] = self.content_depth
        if self.keyword_optimization is not None:
            data["keywordOptimization"] = self.keyword_optimization
        if self.ai_analysis_score is not None:
            data["aiAnalysisScore"] = self.ai_analysis_score
        return data

    def sub_scores(self) -> dict[str, int]:
        """Sub-scores that are present, keyed as in to_dict, without the overall score."""
        data = self.to_dict()
        data.pop("overallScore")
        return data


@dataclass(frozen=True)
class AnalysisDetails:
    """Measurements behind the scores."""

    word_count: int
    has_schema: bool
    heading_count: int
    image_count: int
    image_alt_text_rate: int
    readability_metrics: dict
    heading_analysis: dict
    schema_details: dict
    paragraph_count: int
    lists_and_tables: int
    faq_count: int
    content_to_code_ratio: float
    keywords_found: list[str] = field(default_factory=list)
    ai_analysis: dict | None = None
    content_type: str | None = None
    industry: str | None = None
    weights: dict[str, float] = field(default_factory=dict)
    warnings: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            "wordCount": self.word_count,
            "hasSchema": self.has_schema,
            "headingCount": self.heading_count,
            "imageCount": self.image_count,
            "imageAltTextRate": self.image_alt_text_rate,
            "readabilityMetrics": self.readability_metrics,
            "headingAnalysis": self.heading_analysis,
            "schemaDetails": self.schema_details,
            "paragraphCount": self.paragraph_count,
            "listsAndTables": self.lists_and_tables,
            "faqCount": self.faq_count,
            "contentToCodeRatio": self.content_to_code_ratio,
            "keywordsFound": list(self.keywords_found),
        }
        if self.ai_analysis is not None:
            data["aiAnalysis"] = self.ai_analysis
        if self.content_type is not None:
            data["contentType"] = self.content_type
        if self.industry is not None:
            data["industry"] = self.industry
        data["weights"] = {key: round(w, 4) for key, w in self.weights.items()}
        data["warnings"] = list(self.warnings)
        return data


@dataclass(frozen=True)
class AnalysisResult:
    """Complete output of one analysis."""

    url: str
    timestamp: str
    scores: Scores
    recommendations: tuple[Recommendation, ...]
    quick_wins: tuple[QuickWin, ...]
    details: AnalysisDetails

    @property
    def overall_score(self) -> int:
        return self.scores.overall_score

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "timestamp": self.timestamp,
            "scores": self.scores.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "quickWins": [q.to_dict() for q in self.quick_wins],
            "details": self.details.to_dict(),
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=False)
