"""Content-type and industry classification.

Industry drives the scoring weight profile and recommendation templates;
content type shapes the qualitative digest. Both classifiers are
table-driven and never fail: below the confidence threshold the industry is
"generic" and the content type "unknown".
"""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from urllib.parse import urlparse

import structlog

from aeoscore.extraction.document import ContentDocument
from aeoscore.extraction.schema import SchemaFinding

logger = structlog.get_logger(__name__)


class Industry(StrEnum):
    """Coarse content categories used to select weights and templates."""

    ECOMMERCE = "ecommerce"
    SAAS = "saas"
    LOCAL_BUSINESS = "local_business"
    HEALTHCARE = "healthcare"
    PROFESSIONAL_SERVICES = "professional_services"
    GENERIC = "generic"


class ContentType(StrEnum):
    """Page content types."""

    PRODUCT = "product"
    SERVICE = "service"
    BLOG = "blog"
    HOMEPAGE = "homepage"
    ABOUT = "about"
    CONTACT = "contact"
    UNKNOWN = "unknown"


# Vocabulary per industry; order breaks ties
INDUSTRY_VOCABULARY: dict[Industry, list[str]] = {
    Industry.ECOMMERCE: [
        "shop",
        "buy",
        "cart",
        "checkout",
        "product",
        "store",
        "price",
        "shipping",
        "order",
        "sale",
        "discount",
        "in stock",
        "returns",
        "add to cart",
    ],
    Industry.SAAS: [
        "software",
        "platform",
        "api",
        "dashboard",
        "subscription",
        "integration",
        "saas",
        "cloud",
        "free trial",
        "workflow",
        "automation",
        "sign up",
        "pricing plan",
    ],
    Industry.LOCAL_BUSINESS: [
        "location",
        "address",
        "local",
        "near me",
        "hours",
        "directions",
        "visit us",
        "call us",
        "neighborhood",
        "walk-in",
        "serving",
    ],
    Industry.HEALTHCARE: [
        "health",
        "medical",
        "doctor",
        "treatment",
        "clinic",
        "patient",
        "symptom",
        "diagnosis",
        "therapy",
        "physician",
        "hospital",
        "appointment",
    ],
    Industry.PROFESSIONAL_SERVICES: [
        "consulting",
        "consultant",
        "legal",
        "attorney",
        "lawyer",
        "accounting",
        "agency",
        "advisory",
        "firm",
        "clients",
        "tax",
    ],
}

# Schema types that are strong industry evidence
INDUSTRY_SCHEMA_TYPES: dict[str, Industry] = {
    "Product": Industry.ECOMMERCE,
    "Offer": Industry.ECOMMERCE,
    "SoftwareApplication": Industry.SAAS,
    "LocalBusiness": Industry.LOCAL_BUSINESS,
    "MedicalOrganization": Industry.HEALTHCARE,
    "Physician": Industry.HEALTHCARE,
    "LegalService": Industry.PROFESSIONAL_SERVICES,
    "ProfessionalService": Industry.PROFESSIONAL_SERVICES,
}

INDUSTRY_ALIASES: dict[str, Industry] = {
    "e_commerce": Industry.ECOMMERCE,
    "retail": Industry.ECOMMERCE,
    "shop": Industry.ECOMMERCE,
    "software": Industry.SAAS,
    "tech": Industry.SAAS,
    "local": Industry.LOCAL_BUSINESS,
    "health": Industry.HEALTHCARE,
    "medical": Industry.HEALTHCARE,
    "professional": Industry.PROFESSIONAL_SERVICES,
    "legal": Industry.PROFESSIONAL_SERVICES,
    "consulting": Industry.PROFESSIONAL_SERVICES,
    "general": Industry.GENERIC,
}

# URL patterns for content type detection
URL_PATTERNS: dict[ContentType, list[str]] = {
    ContentType.ABOUT: [r"/about", r"/company", r"/team", r"/who-we-are"],
    ContentType.BLOG: [r"/blog/[^/]+", r"/posts?/[^/]+", r"/articles?/[^/]+", r"/news/[^/]+", r"/guides?/"],
    ContentType.PRODUCT: [r"/products?/", r"/shop/", r"/store/", r"/item/", r"/p/"],
    ContentType.SERVICE: [r"/services?(/|$)", r"/solutions?/"],
    ContentType.CONTACT: [r"/contact", r"/locations?(/|$)"],
}


@dataclass
class ClassifierConfig:
    """Thresholds for the industry classifier."""

    min_hits: int = 3  # Vocabulary hits required before density is considered
    min_density: float = 0.5  # Hits per 100 words
    heading_weight: int = 2  # Title and heading hits count extra
    schema_bonus: float = 1.0  # Density added for a matching schema type


@dataclass
class Classification:
    """Industry and content type of a page."""

    industry: Industry
    industry_source: str  # hint, detected, default
    confidence: float  # Winning density, hits per 100 words
    content_type: ContentType
    densities: dict[str, float] = field(default_factory=dict)
    signals: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "industry": self.industry.value,
            "industrySource": self.industry_source,
            "confidence": round(self.confidence, 2),
            "contentType": self.content_type.value,
            "densities": {k: round(v, 2) for k, v in self.densities.items()},
            "signals": self.signals,
        }


def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(term) + r"(s|es)?\b", re.I)


_VOCABULARY_PATTERNS: dict[Industry, list[re.Pattern[str]]] = {
    industry: [_term_pattern(t) for t in terms] for industry, terms in INDUSTRY_VOCABULARY.items()
}


def parse_industry_hint(hint: str | None) -> Industry | None:
    """Map a free-form industry hint onto a known category, or None."""
    if not hint:
        return None
    key = re.sub(r"[\s\-]+", "_", hint.strip().lower())
    try:
        return Industry(key)
    except ValueError:
        return INDUSTRY_ALIASES.get(key)


class ContentClassifier:
    """Rule-based industry and content-type classifier."""

    def __init__(self, config: ClassifierConfig | None = None):
        self.config = config or ClassifierConfig()

    def classify(
        self,
        doc: ContentDocument,
        schema: SchemaFinding | None = None,
        industry_hint: str | None = None,
    ) -> Classification:
        """
        Classify a document.

        Args:
            doc: Extracted document
            schema: Schema finding, used as extra evidence
            industry_hint: Caller-supplied industry; overrides detection when recognized

        Returns:
            Classification, never failing
        """
        densities = self._industry_densities(doc, schema)
        content_type, signals = self._content_type(doc, schema)

        hinted = parse_industry_hint(industry_hint)
        if industry_hint and hinted is None:
            logger.warning("unknown_industry_hint", hint=industry_hint, url=doc.url)

        if hinted is not None:
            industry, source = hinted, "hint"
            confidence = densities.get(hinted.value, 0.0)
        else:
            industry, confidence = self._pick(densities)
            source = "default" if industry == Industry.GENERIC else "detected"

        result = Classification(
            industry=industry,
            industry_source=source,
            confidence=confidence,
            content_type=content_type,
            densities=densities,
            signals=signals,
        )
        logger.debug(
            "content_classified",
            url=doc.url,
            industry=industry.value,
            source=source,
            content_type=content_type.value,
        )
        return result

    def _industry_densities(self, doc: ContentDocument, schema: SchemaFinding | None) -> dict[str, float]:
        body = doc.full_text()
        emphasized = " ".join(filter(None, [doc.title, doc.meta_description] + [h.text for h in doc.headings]))
        words = max(1, len(body.split()))

        densities: dict[str, float] = {}
        for industry, patterns in _VOCABULARY_PATTERNS.items():
            hits = sum(len(p.findall(body)) for p in patterns)
            hits += self.config.heading_weight * sum(len(p.findall(emphasized)) for p in patterns)
            density = hits / words * 100 if hits >= self.config.min_hits else 0.0
            densities[industry.value] = density

        if schema is not None:
            for schema_type in schema.types:
                matched = INDUSTRY_SCHEMA_TYPES.get(schema_type)
                if matched is not None:
                    densities[matched.value] += self.config.schema_bonus
        return densities

    def _pick(self, densities: dict[str, float]) -> tuple[Industry, float]:
        best = Industry.GENERIC
        best_density = 0.0
        for industry in INDUSTRY_VOCABULARY:
            density = densities.get(industry.value, 0.0)
            if density > best_density:
                best, best_density = industry, density
        if best_density < self.config.min_density:
            return Industry.GENERIC, best_density
        return best, best_density

    def _content_type(self, doc: ContentDocument, schema: SchemaFinding | None) -> tuple[ContentType, list[str]]:
        signals: list[str] = []
        path = urlparse(doc.url).path or "/"

        for content_type, patterns in URL_PATTERNS.items():
            for pattern in patterns:
                if re.search(pattern, path, re.I):
                    signals.append(f"url:{pattern}")
                    return content_type, signals

        types = set(schema.types) if schema is not None else set()
        page_signals = set(doc.signals)
        heading_text = " ".join(filter(None, [doc.title, doc.h1])).lower()

        if "Product" in types or {"add_to_cart", "price"} <= page_signals:
            signals.append("product_markers")
            return ContentType.PRODUCT, signals
        if types & {"Article", "BlogPosting", "NewsArticle"} or (
            "article_tag" in page_signals and ("publish_date" in page_signals or "author" in page_signals)
        ):
            signals.append("article_markers")
            return ContentType.BLOG, signals
        if "contact" in heading_text or "contact_form" in page_signals:
            signals.append("contact_markers")
            return ContentType.CONTACT, signals
        if re.search(r"\babout\b", heading_text):
            signals.append("about_heading")
            return ContentType.ABOUT, signals
        if re.search(r"\bservices?\b", heading_text) or "Service" in types:
            signals.append("service_heading")
            return ContentType.SERVICE, signals
        if path.rstrip("/") == "":
            signals.append("root_path")
            return ContentType.HOMEPAGE, signals
        return ContentType.UNKNOWN, signals


def classify_content(
    doc: ContentDocument,
    schema: SchemaFinding | None = None,
    industry_hint: str | None = None,
) -> Classification:
    """Convenience function to classify a document."""
    return ContentClassifier().classify(doc, schema, industry_hint)
