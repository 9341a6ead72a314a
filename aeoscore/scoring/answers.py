"""Question-answer match sub-score.

Collects question-like units from the page (FAQ items, question-phrased
headings with their section text, FAQPage markup) and checks which target
keywords they address.
"""

from dataclasses import dataclass, field

import structlog

from aeoscore.extraction.document import ContentDocument
from aeoscore.extraction.extractor import is_question
from aeoscore.extraction.keywords import contains_keyword, normalize_keyword
from aeoscore.extraction.schema import SchemaFinding
from aeoscore.scoring.components import ScoreComponent, SubScore, clamp_score

logger = structlog.get_logger(__name__)


@dataclass
class AnswerMatchConfig:
    """Constants for the question-answer match sub-score."""

    faq_floor_points: float = 10.0  # Per FAQ item
    question_heading_floor_points: float = 5.0  # Per question heading without an FAQ answer
    floor_cap: float = 40.0


@dataclass
class QuestionUnit:
    """A question with the text that answers it."""

    question: str
    answer: str
    source: str  # faq_item, heading, schema
    node_index: int | None = None

    @property
    def text(self) -> str:
        return f"{self.question} {self.answer}"


@dataclass
class AnswerMatchResult:
    """Outcome of matching keywords against question units."""

    units: list[QuestionUnit] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    matched: dict[str, list[str]] = field(default_factory=dict)  # keyword → questions
    sub_score: SubScore | None = None

    @property
    def faq_count(self) -> int:
        return sum(1 for u in self.units if u.source in ("faq_item", "schema"))

    @property
    def matched_keywords(self) -> list[str]:
        return [k for k in self.keywords if self.matched.get(k)]

    @property
    def score(self) -> int:
        return self.sub_score.score if self.sub_score else 0


def collect_question_units(doc: ContentDocument, schema: SchemaFinding | None = None) -> list[QuestionUnit]:
    """Gather question-like units, deduplicated by normalized question text."""
    units: list[QuestionUnit] = []
    seen: set[str] = set()

    def add(unit: QuestionUnit) -> None:
        key = normalize_keyword(unit.question)
        if not key or key in seen:
            return
        seen.add(key)
        units.append(unit)

    for node in doc.faq_items:
        add(QuestionUnit(str(node.attrs.get("question", "")), node.text, "faq_item", node.index))

    for node in doc.headings:
        if is_question(node.text):
            add(QuestionUnit(node.text, doc.section_text(node.index), "heading", node.index))

    if schema is not None:
        for pair in schema.faq_pairs:
            add(QuestionUnit(pair.question, pair.answer, "schema"))

    return units


class AnswerMatcher:
    """Scores how well question-like content addresses the target keywords."""

    def __init__(self, config: AnswerMatchConfig | None = None):
        self.config = config or AnswerMatchConfig()

    def match(
        self,
        doc: ContentDocument,
        keywords: list[str],
        schema: SchemaFinding | None = None,
    ) -> AnswerMatchResult:
        cfg = self.config
        result = AnswerMatchResult(units=collect_question_units(doc, schema), keywords=list(keywords))

        for keyword in keywords:
            result.matched[keyword] = [u.question for u in result.units if contains_keyword(u.text, keyword)]

        ratio = len(result.matched_keywords) / len(keywords) if keywords else 0.0
        headings_only = sum(1 for u in result.units if u.source == "heading")
        floor = min(
            cfg.floor_cap,
            result.faq_count * cfg.faq_floor_points + headings_only * cfg.question_heading_floor_points,
        )
        score = clamp_score(max(ratio * 100, floor))

        result.sub_score = SubScore(
            name="questionAnswerMatch",
            score=score,
            components=[
                ScoreComponent(
                    name="keyword_coverage",
                    raw_score=ratio * 100,
                    weight=1.0,
                    explanation=f"{len(result.matched_keywords)} of {len(keywords)} keywords addressed by a question",
                    details={"matched": result.matched_keywords},
                ),
                ScoreComponent(
                    name="faq_density_floor",
                    raw_score=floor,
                    weight=0.0,
                    explanation=f"{result.faq_count} FAQ items, {headings_only} question headings",
                ),
            ],
            explanation=f"{len(result.units)} question-like units found",
        )

        logger.info(
            "answer_match_calculated",
            score=score,
            units=len(result.units),
            keywords=len(keywords),
            matched=len(result.matched_keywords),
        )
        return result


def match_questions(
    doc: ContentDocument,
    keywords: list[str],
    schema: SchemaFinding | None = None,
) -> AnswerMatchResult:
    """Convenience function to run the question-answer matcher."""
    return AnswerMatcher().match(doc, keywords, schema)
