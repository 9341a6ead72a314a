"""Parent-indexed document model.

A page is an ordered arena of ContentNode objects. Each node stores the
index of its enclosing heading (or None for the implicit root section), so
the heading hierarchy is a tree without nested object references.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class NodeType(StrEnum):
    """Kinds of content nodes."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    IMAGE = "image"
    LIST = "list"
    TABLE = "table"
    FAQ_ITEM = "faq_item"
    SCHEMA_BLOCK = "schema_block"


# Node types whose text counts as prose for readability and word counts
PROSE_TYPES = frozenset([NodeType.PARAGRAPH, NodeType.FAQ_ITEM])


@dataclass
class ContentNode:
    """A single node in the document arena."""

    index: int
    node_type: NodeType
    text: str = ""
    word_count: int = 0
    parent: int | None = None  # Index of enclosing heading, None = root section
    level: int | None = None  # 1-6, headings only
    attrs: dict[str, Any] = field(default_factory=dict)
    issues: list[str] = field(default_factory=list)

    @property
    def is_heading(self) -> bool:
        return self.node_type == NodeType.HEADING

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "node_type": self.node_type.value,
            "text": self.text[:200],
            "word_count": self.word_count,
            "parent": self.parent,
            "level": self.level,
            "issues": list(self.issues),
        }


@dataclass
class ExtractionIssue:
    """A block that could not be fully extracted."""

    node_index: int | None
    kind: str  # e.g. "schema_parse_error"
    message: str

    def to_dict(self) -> dict:
        return {"node_index": self.node_index, "kind": self.kind, "message": self.message}


@dataclass
class ContentDocument:
    """Structured representation of one page."""

    url: str
    title: str | None = None
    meta_description: str | None = None
    nodes: list[ContentNode] = field(default_factory=list)
    html_size: int = 0
    text_size: int = 0
    signals: list[str] = field(default_factory=list)  # Page-type hints seen while parsing
    call_to_actions: list[str] = field(default_factory=list)  # Button and CTA link texts
    issues: list[ExtractionIssue] = field(default_factory=list)

    # Open heading stack used while building; indices into nodes
    _heading_stack: list[int] = field(default_factory=list, init=False, repr=False, compare=False)

    def add_node(
        self,
        node_type: NodeType,
        text: str = "",
        level: int | None = None,
        **attrs: Any,
    ) -> ContentNode:
        """Append a node, assigning its parent from the open heading stack."""
        if node_type == NodeType.HEADING:
            if level is None:
                raise ValueError("Heading nodes require a level")
            while self._heading_stack and (self.nodes[self._heading_stack[-1]].level or 0) >= level:
                self._heading_stack.pop()

        parent = self._heading_stack[-1] if self._heading_stack else None
        node = ContentNode(
            index=len(self.nodes),
            node_type=node_type,
            text=text,
            word_count=count_words(text),
            parent=parent,
            level=level,
            attrs=dict(attrs),
        )
        self.nodes.append(node)

        if node_type == NodeType.HEADING:
            self._heading_stack.append(node.index)
        return node

    def add_issue(self, node_index: int | None, kind: str, message: str) -> None:
        self.issues.append(ExtractionIssue(node_index=node_index, kind=kind, message=message))

    def of_type(self, *node_types: NodeType) -> list[ContentNode]:
        return [n for n in self.nodes if n.node_type in node_types]

    @property
    def headings(self) -> list[ContentNode]:
        return self.of_type(NodeType.HEADING)

    @property
    def paragraphs(self) -> list[ContentNode]:
        return self.of_type(NodeType.PARAGRAPH)

    @property
    def images(self) -> list[ContentNode]:
        return self.of_type(NodeType.IMAGE)

    @property
    def faq_items(self) -> list[ContentNode]:
        return self.of_type(NodeType.FAQ_ITEM)

    @property
    def schema_blocks(self) -> list[ContentNode]:
        return self.of_type(NodeType.SCHEMA_BLOCK)

    @property
    def h1(self) -> str | None:
        for node in self.headings:
            if node.level == 1 and node.text:
                return node.text
        return None

    def children(self, index: int | None) -> list[ContentNode]:
        """Direct children of a heading (or of the root section when index is None)."""
        return [n for n in self.nodes if n.parent == index]

    def section_nodes(self, heading_index: int) -> list[ContentNode]:
        """All non-heading nodes under a heading, including nested subsections."""
        owned = {heading_index}
        result: list[ContentNode] = []
        for node in self.nodes[heading_index + 1 :]:
            if node.parent not in owned:
                # Arena is in document order, so the section ends here
                break
            if node.is_heading:
                owned.add(node.index)
            else:
                result.append(node)
        return result

    def section_text(self, heading_index: int) -> str:
        return " ".join(
            n.text for n in self.section_nodes(heading_index) if n.node_type in PROSE_TYPES | {NodeType.LIST}
        )

    def prose_text(self) -> str:
        """Flattened paragraph and FAQ-answer text."""
        return "\n".join(n.text for n in self.nodes if n.node_type in PROSE_TYPES and n.text)

    def full_text(self) -> str:
        """All textual content, including headings, lists and tables."""
        return "\n".join(
            n.text for n in self.nodes if n.text and n.node_type not in (NodeType.IMAGE, NodeType.SCHEMA_BLOCK)
        )

    @property
    def word_count(self) -> int:
        return sum(
            n.word_count for n in self.nodes if n.node_type not in (NodeType.IMAGE, NodeType.SCHEMA_BLOCK)
        )

    @property
    def image_alt_text_rate(self) -> int:
        images = self.images
        if not images:
            return 0
        with_alt = sum(1 for n in images if n.attrs.get("has_alt"))
        return round(with_alt / len(images) * 100)

    @property
    def content_to_code_ratio(self) -> float:
        if self.html_size <= 0:
            return 0.0
        return round(self.text_size / self.html_size * 100, 1)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "title": self.title,
            "meta_description": self.meta_description,
            "nodes": [n.to_dict() for n in self.nodes],
            "html_size": self.html_size,
            "text_size": self.text_size,
            "call_to_actions": list(self.call_to_actions),
            "issues": [i.to_dict() for i in self.issues],
        }


def count_words(text: str) -> int:
    return len(text.split()) if text else 0
