"""Token-budgeted content digest for the qualitative model.

The model never sees the raw page. Sections are added in priority order
(title, meta description, page type, headings, key paragraphs, FAQ
questions, key list items, calls to action, schema types) until the
character budget, about four characters per token, is spent.
"""

import re
from dataclasses import dataclass, field

from aeoscore.extraction.classifier import Classification
from aeoscore.extraction.document import ContentDocument, NodeType
from aeoscore.extraction.schema import SchemaFinding

CHARS_PER_TOKEN = 4

MAX_H2 = 8
MAX_H3 = 6
MIN_KEY_PARAGRAPH_CHARS = 50
LIST_ITEM_CHARS = (10, 200)
MAX_FAQ_QUESTIONS = 10
MAX_CALL_TO_ACTIONS = 5

CONCLUSION_PATTERN = re.compile(
    r"\b(in conclusion|in summary|to summarize|overall|key takeaways?|bottom line|in short)\b",
    re.I,
)


@dataclass
class ContentDigest:
    """Prioritized text sent to the model."""

    text: str
    sections: list[str] = field(default_factory=list)  # Section labels that made it in
    truncated: bool = False

    @property
    def estimated_tokens(self) -> int:
        return -(-len(self.text) // CHARS_PER_TOKEN)


def _key_paragraphs(doc: ContentDocument, limit: int) -> list[str]:
    """First substantial paragraph, section intros, then concluding paragraphs."""
    prose = doc.of_type(NodeType.PARAGRAPH, NodeType.FAQ_ITEM)
    chosen: list[int] = []

    first = next((n for n in prose if len(n.text) > MIN_KEY_PARAGRAPH_CHARS), None)
    if first is not None:
        chosen.append(first.index)

    # Intro paragraph of each H2 section
    for heading in doc.headings:
        if heading.level != 2:
            continue
        intro = next(
            (n for n in doc.section_nodes(heading.index) if n.node_type == NodeType.PARAGRAPH and n.text),
            None,
        )
        if intro is not None and intro.index not in chosen:
            chosen.append(intro.index)

    for node in prose:
        if CONCLUSION_PATTERN.search(node.text) and node.index not in chosen:
            chosen.append(node.index)

    return [doc.nodes[i].text for i in chosen[:limit]]


def _key_list_items(doc: ContentDocument, limit: int) -> list[str]:
    low, high = LIST_ITEM_CHARS
    items: list[str] = []
    for node in doc.of_type(NodeType.LIST):
        for item in node.attrs.get("items", []):
            if low <= len(item) <= high:
                items.append(item)
            if len(items) >= limit:
                return items
    return items


def build_digest(
    doc: ContentDocument,
    classification: Classification | None = None,
    schema: SchemaFinding | None = None,
    token_budget: int = 2000,
    max_paragraphs: int = 8,
    max_list_items: int = 15,
) -> ContentDigest:
    """
    Build a prioritized digest within the token budget.

    Args:
        doc: Extracted document
        classification: Industry and content type, if known
        schema: Schema finding, for detected types
        token_budget: Approximate token ceiling for the digest
        max_paragraphs: Key paragraphs to include
        max_list_items: Key list items to include

    Returns:
        ContentDigest
    """
    sections: list[tuple[str, str]] = []

    sections.append(("title", f"TITLE: {doc.title or doc.h1 or '(none)'}"))
    if doc.meta_description:
        sections.append(("meta", f"META DESCRIPTION: {doc.meta_description}"))
    if classification is not None:
        sections.append(
            (
                "content_type",
                f"CONTENT TYPE: {classification.content_type.value}\nINDUSTRY: {classification.industry.value}",
            )
        )

    headings = doc.headings
    heading_lines = [f"H1: {h.text}" for h in headings if h.level == 1]
    heading_lines += [f"H2: {h.text}" for h in headings if h.level == 2][:MAX_H2]
    heading_lines += [f"H3: {h.text}" for h in headings if h.level == 3][:MAX_H3]
    if heading_lines:
        sections.append(("headings", "HEADINGS:\n" + "\n".join(heading_lines)))

    paragraphs = _key_paragraphs(doc, max_paragraphs)
    if paragraphs:
        sections.append(("key_content", "KEY CONTENT:\n" + "\n\n".join(paragraphs)))

    questions = [str(n.attrs.get("question", "")) for n in doc.faq_items][:MAX_FAQ_QUESTIONS]
    if questions:
        sections.append(("faq", "FAQ QUESTIONS:\n" + "\n".join(f"- {q}" for q in questions)))

    items = _key_list_items(doc, max_list_items)
    if items:
        sections.append(("list_items", "KEY POINTS:\n" + "\n".join(f"- {i}" for i in items)))

    if doc.call_to_actions:
        ctas = " | ".join(doc.call_to_actions[:MAX_CALL_TO_ACTIONS])
        sections.append(("call_to_actions", f"CALL-TO-ACTIONS: {ctas}"))

    if schema is not None and schema.types:
        sections.append(("schema", "SCHEMA TYPES: " + ", ".join(schema.types)))

    budget = max(0, token_budget) * CHARS_PER_TOKEN
    parts: list[str] = []
    included: list[str] = []
    used = 0
    truncated = False
    for label, text in sections:
        separator = 2 if parts else 0
        remaining = budget - used - separator
        if len(text) > remaining:
            truncated = True
            if remaining < 4:
                break
            text = text[: remaining - 3].rstrip() + "..."
        parts.append(text)
        included.append(label)
        used += len(text) + separator
        if truncated:
            break

    return ContentDigest(text="\n\n".join(parts), sections=included, truncated=truncated)
