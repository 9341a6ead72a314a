"""Content depth and keyword optimization sub-scores."""

from dataclasses import dataclass

import structlog

from aeoscore.extraction.document import ContentDocument, NodeType
from aeoscore.extraction.keywords import contains_keyword, content_stems, count_occurrences
from aeoscore.scoring.components import ScoreComponent, SubScore, blend, clamp_score

logger = structlog.get_logger(__name__)


@dataclass
class ContentDepthConfig:
    """Banding constants for the content-depth sub-score."""

    # (word count, score) breakpoints, linearly interpolated
    word_breakpoints: tuple[tuple[int, float], ...] = ((0, 0.0), (300, 40.0), (800, 75.0), (1200, 100.0))
    points_per_paragraph: float = 10.0
    points_per_structured_block: float = 35.0  # Lists and tables
    points_per_section: float = 20.0

    weight_words: float = 0.5
    weight_paragraphs: float = 0.2
    weight_structured: float = 0.15
    weight_sections: float = 0.15


@dataclass
class KeywordConfig:
    """Point allocations for the keyword-optimization sub-score."""

    title_points: float = 25.0
    h1_points: float = 25.0
    first_paragraph_points: float = 20.0
    subheading_points: float = 15.0
    density_points: float = 15.0
    density_optimal: tuple[float, float] = (0.5, 3.0)  # Percent of words
    sparse_density_points: float = 8.0
    stuffed_density_points: float = 5.0
    coverage_floor: float = 0.7  # Multiplier when no secondary keyword appears


def _interpolate(value: float, breakpoints: tuple[tuple[int, float], ...]) -> float:
    if value <= breakpoints[0][0]:
        return breakpoints[0][1]
    for (x0, y0), (x1, y1) in zip(breakpoints, breakpoints[1:], strict=False):
        if value <= x1:
            return y0 + (value - x0) / (x1 - x0) * (y1 - y0)
    return breakpoints[-1][1]


def count_sections(doc: ContentDocument) -> int:
    """Headings that own at least one prose, list or table node."""
    owners = {
        n.parent
        for n in doc.nodes
        if n.parent is not None and n.node_type in (NodeType.PARAGRAPH, NodeType.FAQ_ITEM, NodeType.LIST, NodeType.TABLE)
    }
    return len(owners)


class ContentDepthScorer:
    """Calculates the content-depth sub-score."""

    def __init__(self, config: ContentDepthConfig | None = None):
        self.config = config or ContentDepthConfig()

    def calculate(self, doc: ContentDocument) -> SubScore:
        cfg = self.config
        words = doc.word_count
        paragraphs = len(doc.paragraphs) + len(doc.faq_items)
        structured = len(doc.of_type(NodeType.LIST, NodeType.TABLE))
        sections = count_sections(doc)

        components = [
            ScoreComponent(
                name="word_count",
                raw_score=_interpolate(words, cfg.word_breakpoints),
                weight=cfg.weight_words,
                explanation=f"{words} words",
            ),
            ScoreComponent(
                name="paragraphs",
                raw_score=min(100.0, paragraphs * cfg.points_per_paragraph),
                weight=cfg.weight_paragraphs,
                explanation=f"{paragraphs} paragraphs",
            ),
            ScoreComponent(
                name="lists_and_tables",
                raw_score=min(100.0, structured * cfg.points_per_structured_block),
                weight=cfg.weight_structured,
                explanation=f"{structured} lists or tables",
            ),
            ScoreComponent(
                name="sections",
                raw_score=min(100.0, sections * cfg.points_per_section),
                weight=cfg.weight_sections,
                explanation=f"{sections} headed sections with content",
            ),
        ]
        score = blend(components)
        logger.info("content_depth_calculated", score=score, words=words, sections=sections)
        return SubScore(
            name="contentDepth",
            score=score,
            components=components,
            explanation=f"{words} words across {sections} sections",
        )


class KeywordScorer:
    """Calculates the keyword-optimization sub-score."""

    def __init__(self, config: KeywordConfig | None = None):
        self.config = config or KeywordConfig()

    def keywords_found(self, doc: ContentDocument, keywords: list[str]) -> list[str]:
        text = " ".join(filter(None, [doc.title, doc.full_text()]))
        return [k for k in keywords if contains_keyword(text, k)]

    def calculate(self, doc: ContentDocument, keywords: list[str]) -> SubScore:
        cfg = self.config
        if not keywords:
            return SubScore(name="keywordOptimization", score=0, explanation="No target keywords available")

        primary = keywords[0]
        first_paragraph = next((n.text for n in doc.of_type(NodeType.PARAGRAPH, NodeType.FAQ_ITEM)), "")
        subheadings = [h.text for h in doc.headings if (h.level or 1) > 1]

        placements = {
            "title": (cfg.title_points, bool(doc.title) and contains_keyword(doc.title or "", primary)),
            "h1": (cfg.h1_points, bool(doc.h1) and contains_keyword(doc.h1 or "", primary)),
            "first_paragraph": (cfg.first_paragraph_points, contains_keyword(first_paragraph, primary)),
            "subheadings": (cfg.subheading_points, any(contains_keyword(h, primary) for h in subheadings)),
        }
        placement_points = sum(points for points, hit in placements.values() if hit)

        body = doc.full_text()
        total_words = max(1, len(content_stems(body)))
        occurrences = count_occurrences(body, primary)
        density = occurrences * len(content_stems(primary)) / total_words * 100
        low, high = cfg.density_optimal
        if low <= density <= high:
            density_points = cfg.density_points
        elif 0 < density < low:
            density_points = cfg.sparse_density_points
        elif density > high:
            density_points = cfg.stuffed_density_points
        else:
            density_points = 0.0

        found = self.keywords_found(doc, keywords)
        coverage = len(found) / len(keywords)
        multiplier = cfg.coverage_floor + (1 - cfg.coverage_floor) * coverage
        score = clamp_score((placement_points + density_points) * multiplier)

        components = [
            ScoreComponent(
                name=name,
                raw_score=100.0 if hit else 0.0,
                weight=points / 100,
                explanation=f"Primary keyword {'in' if hit else 'missing from'} {name.replace('_', ' ')}",
            )
            for name, (points, hit) in placements.items()
        ]
        components.append(
            ScoreComponent(
                name="density",
                raw_score=density_points / cfg.density_points * 100 if cfg.density_points else 0.0,
                weight=cfg.density_points / 100,
                explanation=f"Primary keyword density {density:.2f}%",
            )
        )

        logger.info(
            "keyword_score_calculated",
            score=score,
            primary=primary,
            density=round(density, 2),
            found=len(found),
        )
        return SubScore(
            name="keywordOptimization",
            score=score,
            components=components,
            explanation=f"{len(found)} of {len(keywords)} keywords present",
        )


def calculate_content_depth(doc: ContentDocument, config: ContentDepthConfig | None = None) -> SubScore:
    """Convenience function to calculate the content-depth sub-score."""
    return ContentDepthScorer(config).calculate(doc)


def calculate_keyword_score(
    doc: ContentDocument,
    keywords: list[str],
    config: KeywordConfig | None = None,
) -> SubScore:
    """Convenience function to calculate the keyword-optimization sub-score."""
    return KeywordScorer(config).calculate(doc, keywords)
