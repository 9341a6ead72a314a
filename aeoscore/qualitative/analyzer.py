"""Qualitative model analyzer.

The only stage that performs I/O. It sends a token-budgeted digest to a
language model and parses a five-dimension assessment back. Timeouts,
provider errors and unusable replies all degrade to an absent assessment.
Cancellation by the caller is never swallowed, so the outbound request is
torn down with it.
"""

import asyncio
import json
from dataclasses import dataclass

import structlog

from aeoscore.extraction.classifier import Classification, ContentType, Industry
from aeoscore.extraction.document import ContentDocument
from aeoscore.extraction.schema import SchemaFinding
from aeoscore.qualitative.digest import ContentDigest, build_digest
from aeoscore.qualitative.models import CompletionRequest, QualitativeAssessment
from aeoscore.qualitative.parser import parse_assessment
from aeoscore.qualitative.providers import QualitativeProvider

logger = structlog.get_logger(__name__)


SYSTEM_INSTRUCTION = """You are an answer-engine optimization analyst. You review web page content \
for how well AI assistants and answer engines can understand, extract and cite it.

Assess the page digest on five dimensions, each scored 0-100:
- content_clarity: how clearly and directly the content communicates its main points
- semantic_relevance: how well the content stays on topic for its headings and title
- entity_coverage: how well key entities (products, people, places, concepts) are named and described
- information_completeness: how fully the content answers the questions a reader would ask
- factual_accuracy: how verifiable and specific the claims are (figures, sources, dates)

For every dimension give a short list of observations and a short list of recommendations.
Add up to five suggestions, each with a title, a description and a priority of high, medium or low.

Respond with a single JSON object matching the provided schema. No prose, no markdown."""

# Focus lines per content type, appended to the instruction
CONTENT_TYPE_FOCUS: dict[ContentType, str] = {
    ContentType.PRODUCT: "Focus on the value proposition, specifications and differentiation from alternatives.",
    ContentType.SERVICE: "Focus on service scope, process explanation and who the service is for.",
    ContentType.BLOG: "Focus on topical depth, expertise signals and direct answers to questions.",
    ContentType.HOMEPAGE: "Focus on how clearly the organization and its offering are described.",
    ContentType.ABOUT: "Focus on organization identity, credentials and trust signals.",
    ContentType.CONTACT: "Focus on completeness of contact, location and availability details.",
}

# Industry-specific focus lines; take precedence over CONTENT_TYPE_FOCUS
INDUSTRY_FOCUS: dict[tuple[ContentType, Industry], str] = {
    (ContentType.PRODUCT, Industry.ECOMMERCE): (
        "Focus on product descriptions, pricing clarity, trust signals and purchase intent."
    ),
    (ContentType.PRODUCT, Industry.SAAS): "Focus on plans and pricing, integrations and onboarding clarity.",
    (ContentType.SERVICE, Industry.PROFESSIONAL_SERVICES): (
        "Focus on credibility indicators, case studies and demonstrated expertise."
    ),
    (ContentType.SERVICE, Industry.HEALTHCARE): (
        "Focus on treatment scope, practitioner credentials and patient-friendly explanations."
    ),
    (ContentType.SERVICE, Industry.LOCAL_BUSINESS): "Focus on service area, opening hours and how to book.",
    (ContentType.BLOG, Industry.HEALTHCARE): "Focus on medical accuracy, cited sources and author credentials.",
    (ContentType.HOMEPAGE, Industry.LOCAL_BUSINESS): (
        "Focus on location, contact details and the services offered in the area."
    ),
}


def focus_line(content_type: ContentType, industry: Industry) -> str | None:
    """Focus line for a page, falling back from the industry pair to the content type."""
    return INDUSTRY_FOCUS.get((content_type, industry)) or CONTENT_TYPE_FOCUS.get(content_type)


@dataclass(frozen=True)
class QualitativeOutcome:
    """Result of the qualitative stage: an assessment, or the reason it is absent."""

    assessment: QualitativeAssessment | None
    reason: str | None = None  # timeout, provider_error, invalid_response, disabled
    digest_tokens: int = 0
    latency_ms: float = 0.0

    @property
    def available(self) -> bool:
        return self.assessment is not None


class QualitativeAnalyzer:
    """Runs the qualitative model stage with a bounded timeout."""

    def __init__(
        self,
        provider: QualitativeProvider,
        model: str = "openai/gpt-4o-mini",
        timeout_seconds: float = 30.0,
        temperature: float = 0.2,
        max_tokens: int = 2000,
        digest_token_budget: int = 2000,
        digest_max_paragraphs: int = 8,
        digest_max_list_items: int = 15,
    ):
        self.provider = provider
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.digest_token_budget = digest_token_budget
        self.digest_max_paragraphs = digest_max_paragraphs
        self.digest_max_list_items = digest_max_list_items

    def build_request(self, digest: ContentDigest, classification: Classification | None = None) -> CompletionRequest:
        instruction = SYSTEM_INSTRUCTION
        focus = focus_line(classification.content_type, classification.industry) if classification is not None else None
        if focus:
            instruction = f"{instruction}\n\n{focus}"

        schema = QualitativeAssessment.model_json_schema()
        user_message = f"{digest.text}\n\nTARGET JSON SCHEMA:\n{json.dumps(schema, sort_keys=True)}"
        return CompletionRequest(
            system_instruction=instruction,
            content_digest=user_message,
            target_schema=schema,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    async def analyze(
        self,
        doc: ContentDocument,
        classification: Classification | None = None,
        schema: SchemaFinding | None = None,
    ) -> QualitativeOutcome:
        """
        Request and validate a qualitative assessment.

        Args:
            doc: Extracted document
            classification: Industry and content type
            schema: Schema finding, for the digest

        Returns:
            QualitativeOutcome; assessment is None when the stage degraded
        """
        digest = build_digest(
            doc,
            classification,
            schema,
            token_budget=self.digest_token_budget,
            max_paragraphs=self.digest_max_paragraphs,
            max_list_items=self.digest_max_list_items,
        )
        request = self.build_request(digest, classification)

        try:
            response = await asyncio.wait_for(self.provider.complete(request), timeout=self.timeout_seconds)
        except TimeoutError:
            logger.warning(
                "qualitative_timeout",
                url=doc.url,
                timeout_seconds=self.timeout_seconds,
                provider=self.provider.provider_type.value,
            )
            return QualitativeOutcome(assessment=None, reason="timeout", digest_tokens=digest.estimated_tokens)
        except Exception as e:
            # CancelledError is not an Exception and still propagates
            logger.warning(
                "qualitative_provider_error",
                url=doc.url,
                provider=self.provider.provider_type.value,
                error_type=type(e).__name__,
                error=str(e),
            )
            return QualitativeOutcome(assessment=None, reason="provider_error", digest_tokens=digest.estimated_tokens)

        if not response.success:
            logger.warning(
                "qualitative_provider_error",
                url=doc.url,
                provider=response.provider.value,
                error_type=response.error.error_type if response.error else None,
                error=response.error.message if response.error else None,
            )
            return QualitativeOutcome(
                assessment=None,
                reason="provider_error",
                digest_tokens=digest.estimated_tokens,
                latency_ms=response.latency_ms,
            )

        assessment = parse_assessment(response.content)
        if assessment is None:
            logger.warning(
                "qualitative_invalid_response",
                url=doc.url,
                provider=response.provider.value,
                content_preview=response.content[:200],
            )
            return QualitativeOutcome(
                assessment=None,
                reason="invalid_response",
                digest_tokens=digest.estimated_tokens,
                latency_ms=response.latency_ms,
            )

        logger.info(
            "qualitative_analysis_complete",
            url=doc.url,
            provider=response.provider.value,
            model=response.model,
            score=assessment.score,
            digest_tokens=digest.estimated_tokens,
            latency_ms=round(response.latency_ms, 1),
        )
        return QualitativeOutcome(
            assessment=assessment,
            digest_tokens=digest.estimated_tokens,
            latency_ms=response.latency_ms,
        )
