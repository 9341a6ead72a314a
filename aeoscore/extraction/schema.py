"""Schema.org structured data validation.

Validates the structured-data blocks found by the extractor against a
static type→required-fields table. Each block was parsed independently, so
one broken block never hides the others.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from aeoscore.extraction.document import ContentDocument, ContentNode

logger = structlog.get_logger(__name__)


# Required fields per schema type
REQUIRED_FIELDS: dict[str, list[str]] = {
    "Article": ["headline", "author", "datePublished"],
    "NewsArticle": ["headline", "author", "datePublished", "dateModified"],
    "BlogPosting": ["headline", "author", "datePublished"],
    "FAQPage": ["mainEntity"],
    "QAPage": ["mainEntity"],
    "Question": ["name", "acceptedAnswer"],
    "HowTo": ["name", "step"],
    "Recipe": ["name", "recipeIngredient", "recipeInstructions"],
    "Product": ["name", "description", "offers"],
    "Offer": ["price", "priceCurrency"],
    "Review": ["author", "reviewRating"],
    "Organization": ["name", "url"],
    "LocalBusiness": ["name", "address", "telephone"],
    "MedicalOrganization": ["name", "address"],
    "Physician": ["name", "address"],
    "Service": ["name", "provider"],
    "SoftwareApplication": ["name", "operatingSystem", "applicationCategory"],
    "Event": ["name", "startDate", "location"],
    "VideoObject": ["name", "thumbnailUrl", "uploadDate"],
    "Person": ["name"],
    "WebSite": ["name", "url"],
    "WebPage": ["name"],
    "BreadcrumbList": ["itemListElement"],
}

# Fallback for types not in the table
DEFAULT_REQUIRED_FIELDS = ["name", "description"]

# Types that are particularly valuable for answer engines
VALUABLE_SCHEMA_TYPES: dict[str, int] = {
    "FAQPage": 4,
    "QAPage": 3,
    "Article": 3,
    "NewsArticle": 3,
    "HowTo": 3,
    "BlogPosting": 2,
    "Recipe": 2,
    "Product": 2,
    "Organization": 2,
    "LocalBusiness": 2,
    "MedicalOrganization": 2,
    "Service": 2,
    "SoftwareApplication": 2,
    "Event": 1,
    "Person": 1,
    "WebPage": 1,
    "WebSite": 1,
    "BreadcrumbList": 1,
}

DEFAULT_VALIDITY_THRESHOLD = 0.6


@dataclass
class SchemaItem:
    """A single typed schema.org entity."""

    schema_type: str
    source: str  # json-ld or microdata
    block_index: int  # Index of the schema_block node
    completeness: float = 0.0  # 0-1
    missing_fields: list[str] = field(default_factory=list)
    is_valid: bool = False

    def to_dict(self) -> dict:
        return {
            "type": self.schema_type,
            "source": self.source,
            "completeness": round(self.completeness, 2),
            "missingFields": self.missing_fields,
            "valid": self.is_valid,
        }


@dataclass
class SchemaFAQ:
    """A question-answer pair declared in FAQPage markup."""

    question: str
    answer: str

    def to_dict(self) -> dict:
        return {"question": self.question[:200], "answer": self.answer[:500]}


@dataclass
class SchemaBlockResult:
    """Validity of one structured-data block."""

    node_index: int
    source: str
    parsed: bool
    is_valid: bool
    types: list[str]
    completeness: float
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "nodeIndex": self.node_index,
            "source": self.source,
            "parsed": self.parsed,
            "valid": self.is_valid,
            "types": self.types,
            "completeness": round(self.completeness, 2),
            "error": self.error,
        }


@dataclass
class SchemaFinding:
    """Structured data detected on a page."""

    blocks: list[SchemaBlockResult] = field(default_factory=list)
    items: list[SchemaItem] = field(default_factory=list)
    faq_pairs: list[SchemaFAQ] = field(default_factory=list)

    @property
    def types(self) -> list[str]:
        return sorted({i.schema_type for i in self.items})

    @property
    def has_schema(self) -> bool:
        return bool(self.blocks)

    @property
    def valid_items(self) -> list[SchemaItem]:
        return [i for i in self.items if i.is_valid]

    @property
    def invalid_block_count(self) -> int:
        return sum(1 for b in self.blocks if not b.is_valid)

    @property
    def parse_error_count(self) -> int:
        return sum(1 for b in self.blocks if not b.parsed)

    @property
    def avg_completeness(self) -> float:
        if not self.items:
            return 0.0
        return sum(i.completeness for i in self.items) / len(self.items)

    def has_valid(self, schema_type: str) -> bool:
        return any(i.schema_type == schema_type and i.is_valid for i in self.items)

    def to_dict(self) -> dict:
        return {
            "types": self.types,
            "blockCount": len(self.blocks),
            "validBlocks": sum(1 for b in self.blocks if b.is_valid),
            "parseErrors": self.parse_error_count,
            "avgCompleteness": round(self.avg_completeness, 2),
            "blocks": [b.to_dict() for b in self.blocks],
            "items": [i.to_dict() for i in self.items[:20]],
            "faqPairs": len(self.faq_pairs),
        }


def normalize_type(raw: Any) -> str | None:
    """Return a bare schema.org type name ("http://schema.org/Article" → "Article")."""
    if isinstance(raw, list):
        raw = next((r for r in raw if isinstance(r, str)), None)
    if not isinstance(raw, str) or not raw.strip():
        return None
    return raw.strip().rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]


def iter_entities(data: Any) -> list[dict]:
    """Top-level typed entities in a JSON-LD payload (handles @graph and arrays)."""
    entities: list[dict] = []
    if isinstance(data, list):
        for item in data:
            entities.extend(iter_entities(item))
    elif isinstance(data, dict):
        if "@graph" in data:
            entities.extend(iter_entities(data["@graph"]))
        if "@type" in data:
            entities.append(data)
    return entities


def _has_field(data: dict, name: str) -> bool:
    """Check if field exists and has a value."""
    value = data.get(name)
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return not (isinstance(value, list | dict) and not value)


def _text_value(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        return _text_value(value.get("text") or value.get("name") or "")
    if isinstance(value, list) and value:
        return _text_value(value[0])
    return ""


def extract_faq_pairs(data: dict) -> list[SchemaFAQ]:
    """Question/answer pairs from a FAQPage entity's mainEntity."""
    main_entity = data.get("mainEntity", [])
    if isinstance(main_entity, dict):
        main_entity = [main_entity]
    if not isinstance(main_entity, list):
        return []

    pairs = []
    for qa in main_entity:
        if not isinstance(qa, dict):
            continue
        question = _text_value(qa.get("name"))
        answer = _text_value(qa.get("acceptedAnswer"))
        if question and answer:
            pairs.append(SchemaFAQ(question=question, answer=answer))
    return pairs


class SchemaAnalyzer:
    """Validates structured-data blocks for completeness."""

    def __init__(self, validity_threshold: float = DEFAULT_VALIDITY_THRESHOLD):
        self.validity_threshold = validity_threshold

    def analyze(self, doc: ContentDocument) -> SchemaFinding:
        """
        Validate all schema blocks in a document.

        Args:
            doc: Extracted document

        Returns:
            SchemaFinding with per-block and per-entity results
        """
        finding = SchemaFinding()

        for node in doc.schema_blocks:
            finding.blocks.append(self._analyze_block(node, finding))

        logger.debug(
            "schema_analysis_complete",
            url=doc.url,
            blocks=len(finding.blocks),
            types=finding.types,
            parse_errors=finding.parse_error_count,
        )
        return finding

    def _analyze_block(self, node: ContentNode, finding: SchemaFinding) -> SchemaBlockResult:
        source = node.attrs.get("format", "json-ld")
        error = node.attrs.get("error")
        if error is not None:
            return SchemaBlockResult(
                node_index=node.index,
                source=source,
                parsed=False,
                is_valid=False,
                types=[],
                completeness=0.0,
                error=error,
            )

        items: list[SchemaItem] = []
        for entity in iter_entities(node.attrs.get("data")):
            item = self._analyze_entity(entity, source, node.index, finding)
            if item is not None:
                items.append(item)

        finding.items.extend(items)
        completeness = sum(i.completeness for i in items) / len(items) if items else 0.0
        is_valid = bool(items) and all(i.is_valid for i in items)
        if not is_valid:
            node.issues.append("schema_incomplete" if items else "schema_untyped")

        return SchemaBlockResult(
            node_index=node.index,
            source=source,
            parsed=True,
            is_valid=is_valid,
            types=[i.schema_type for i in items],
            completeness=completeness,
        )

    def _analyze_entity(self, entity: dict, source: str, block_index: int, finding: SchemaFinding) -> SchemaItem | None:
        schema_type = normalize_type(entity.get("@type"))
        if not schema_type:
            return None

        required = REQUIRED_FIELDS.get(schema_type, DEFAULT_REQUIRED_FIELDS)
        missing = [f for f in required if not _has_field(entity, f)]
        completeness = (len(required) - len(missing)) / len(required) if required else 1.0

        if schema_type == "FAQPage":
            pairs = extract_faq_pairs(entity)
            finding.faq_pairs.extend(pairs)
            declared = entity.get("mainEntity")
            total = len(declared) if isinstance(declared, list) else (1 if isinstance(declared, dict) else 0)
            # Questions without an answer count against the block
            if total:
                completeness *= len(pairs) / total

        return SchemaItem(
            schema_type=schema_type,
            source=source,
            block_index=block_index,
            completeness=completeness,
            missing_fields=missing,
            is_valid=completeness >= self.validity_threshold,
        )


def analyze_schema(doc: ContentDocument) -> SchemaFinding:
    """Convenience function to validate structured data."""
    return SchemaAnalyzer().analyze(doc)
