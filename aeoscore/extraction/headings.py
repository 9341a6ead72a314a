"""Heading hierarchy analysis for content structure.

Validates proper heading structure (H1→H2→H3), which answer engines rely on
to segment a page into extractable sections. Issues are attached to the
offending heading nodes so they can be surfaced later.
"""

from dataclasses import dataclass, field
from enum import StrEnum

import structlog

from aeoscore.extraction.document import ContentDocument, ContentNode
from aeoscore.extraction.extractor import is_question
from aeoscore.extraction.keywords import contains_keyword

logger = structlog.get_logger(__name__)


class HeadingIssueType(StrEnum):
    """Types of heading hierarchy issues."""

    MISSING_H1 = "missing_h1"
    MULTIPLE_H1 = "multiple_h1"
    SKIP_LEVEL = "skip_level"  # e.g., H1 → H3 (skips H2)
    EMPTY_HEADING = "empty_heading"
    TOO_LONG = "too_long"
    DUPLICATE = "duplicate"


@dataclass
class HeadingIssue:
    """A single heading hierarchy issue."""

    issue_type: HeadingIssueType
    level: int
    text: str
    node_index: int | None  # None for document-level issues
    details: str

    def to_dict(self) -> dict:
        return {
            "type": self.issue_type.value,
            "level": self.level,
            "text": self.text[:100],
            "nodeIndex": self.node_index,
            "details": self.details,
        }


@dataclass
class HeadingAnalysis:
    """Complete heading hierarchy analysis result."""

    level_counts: dict[int, int] = field(default_factory=lambda: {lvl: 0 for lvl in range(1, 7)})
    total_headings: int = 0

    hierarchy_valid: bool = True
    issues: list[HeadingIssue] = field(default_factory=list)

    skip_count: int = 0
    duplicate_count: int = 0
    max_depth: int = 0
    keyword_heading_count: int = 0
    question_headings: int = 0
    has_faq_heading: bool = False
    outline: list[str] = field(default_factory=list)

    @property
    def h1_count(self) -> int:
        return self.level_counts.get(1, 0)

    def count_issues(self, issue_type: HeadingIssueType) -> int:
        return sum(1 for i in self.issues if i.issue_type == issue_type)

    def to_dict(self) -> dict:
        return {
            "counts": {f"h{lvl}": n for lvl, n in self.level_counts.items()},
            "totalHeadings": self.total_headings,
            "hierarchyValid": self.hierarchy_valid,
            "hasH1": self.h1_count > 0,
            "multipleH1": self.h1_count > 1,
            "skipCount": self.skip_count,
            "duplicateCount": self.duplicate_count,
            "maxDepth": self.max_depth,
            "keywordHeadingCount": self.keyword_heading_count,
            "questionHeadings": self.question_headings,
            "hasFaqHeading": self.has_faq_heading,
            "issues": [i.to_dict() for i in self.issues],
            "outline": self.outline,
        }


FAQ_PATTERNS = [
    "faq",
    "frequently asked",
    "common questions",
    "questions and answers",
    "q&a",
    "q & a",
]


class HeadingAnalyzer:
    """Analyzes heading hierarchy in a ContentDocument."""

    def __init__(self, max_heading_length: int = 120, max_outline: int = 30):
        self.max_heading_length = max_heading_length
        self.max_outline = max_outline

    def analyze(self, doc: ContentDocument, keywords: list[str] | None = None) -> HeadingAnalysis:
        """
        Analyze heading hierarchy.

        Args:
            doc: Extracted document; offending heading nodes get issue tags
            keywords: Target keywords counted in heading text

        Returns:
            HeadingAnalysis with issues and counts
        """
        result = HeadingAnalysis()
        headings = doc.headings
        result.total_headings = len(headings)

        if not headings:
            result.hierarchy_valid = False
            result.issues.append(
                HeadingIssue(
                    issue_type=HeadingIssueType.MISSING_H1,
                    level=1,
                    text="",
                    node_index=None,
                    details="Page has no headings at all",
                )
            )
            return result

        for h in headings:
            level = h.level or 1
            result.level_counts[level] = result.level_counts.get(level, 0) + 1
        result.max_depth = max(h.level or 1 for h in headings)
        result.outline = [f"{'  ' * ((h.level or 1) - 1)}H{h.level}: {h.text[:80]}" for h in headings][
            : self.max_outline
        ]

        if result.h1_count == 0:
            result.issues.append(
                HeadingIssue(
                    issue_type=HeadingIssueType.MISSING_H1,
                    level=1,
                    text="",
                    node_index=None,
                    details="Page is missing an H1 heading",
                )
            )

        if result.h1_count > 1:
            h1s = [h for h in headings if h.level == 1]
            for i, h in enumerate(h1s[1:], start=2):
                self._flag(result, h, HeadingIssueType.MULTIPLE_H1, f"Multiple H1 headings found (this is #{i})")

        # Every skip is flagged, e.g. H2 directly to H4
        prev_level = 0
        for h in headings:
            level = h.level or 1
            if prev_level > 0 and level > prev_level + 1:
                self._flag(result, h, HeadingIssueType.SKIP_LEVEL, f"Skips from H{prev_level} to H{level}")
                result.skip_count += 1
            prev_level = level

        seen: set[str] = set()
        for h in headings:
            normalized = h.text.lower().strip()
            if not normalized:
                self._flag(result, h, HeadingIssueType.EMPTY_HEADING, "Empty heading found")
                continue
            if normalized in seen:
                self._flag(result, h, HeadingIssueType.DUPLICATE, "Duplicate heading text")
                result.duplicate_count += 1
            seen.add(normalized)

            if len(h.text) > self.max_heading_length:
                self._flag(result, h, HeadingIssueType.TOO_LONG, f"Heading too long ({len(h.text)} chars)")

        for h in headings:
            text_lower = h.text.lower()
            if any(pattern in text_lower for pattern in FAQ_PATTERNS):
                result.has_faq_heading = True
            if is_question(h.text):
                result.question_headings += 1
            if keywords and any(contains_keyword(h.text, k) for k in keywords):
                result.keyword_heading_count += 1

        result.hierarchy_valid = not result.issues

        logger.debug(
            "heading_analysis_complete",
            url=doc.url,
            total=result.total_headings,
            issues=len(result.issues),
            skips=result.skip_count,
            keyword_headings=result.keyword_heading_count,
        )
        return result

    def _flag(self, result: HeadingAnalysis, node: ContentNode, issue_type: HeadingIssueType, details: str) -> None:
        node.issues.append(issue_type.value)
        result.issues.append(
            HeadingIssue(
                issue_type=issue_type,
                level=node.level or 1,
                text=node.text,
                node_index=node.index,
                details=details,
            )
        )


def analyze_headings(doc: ContentDocument, keywords: list[str] | None = None) -> HeadingAnalysis:
    """Convenience function to analyze heading structure."""
    return HeadingAnalyzer().analyze(doc, keywords)
