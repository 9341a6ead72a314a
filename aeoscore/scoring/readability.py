"""Readability sub-score.

Maps raw readability metrics onto 0-100 through banded components. Each
band has an optimal range: prose inside it scores 100, and the score falls
on both sides, so fragmented text with very short sentences does not beat
well-formed prose.
"""

from dataclasses import dataclass

import structlog

from aeoscore.extraction.readability import ReadabilityMetrics
from aeoscore.scoring.components import ScoreComponent, SubScore, band_score, blend

logger = structlog.get_logger(__name__)


@dataclass
class ReadabilityConfig:
    """Banding constants for the readability sub-score."""

    # Words per sentence
    sentence_optimal: tuple[float, float] = (12.0, 20.0)
    sentence_below_penalty: float = 5.0  # per word
    sentence_above_penalty: float = 4.0

    # Characters per word
    word_optimal: tuple[float, float] = (4.0, 5.5)
    word_below_penalty: float = 30.0  # per character
    word_above_penalty: float = 40.0

    # Flesch reading ease (0-100)
    ease_optimal: tuple[float, float] = (60.0, 80.0)
    ease_below_penalty: float = 1.5
    ease_above_penalty: float = 1.0

    # Mean of the three grade levels
    grade_optimal: tuple[float, float] = (6.0, 10.0)
    grade_below_penalty: float = 6.0
    grade_above_penalty: float = 8.0

    weight_sentence: float = 0.35
    weight_word: float = 0.15
    weight_ease: float = 0.25
    weight_grade: float = 0.25

    # Samples shorter than this are scaled down proportionally
    min_reliable_words: int = 50


class ReadabilityScorer:
    """Calculates the readability sub-score."""

    def __init__(self, config: ReadabilityConfig | None = None):
        self.config = config or ReadabilityConfig()

    def calculate(self, metrics: ReadabilityMetrics) -> SubScore:
        cfg = self.config
        if metrics.is_empty:
            return SubScore(name="readability", score=0, explanation="No sentences to evaluate")

        avg_grade = (metrics.flesch_kincaid_grade + metrics.smog_grade + metrics.coleman_liau_grade) / 3

        components = [
            ScoreComponent(
                name="sentence_length",
                raw_score=band_score(
                    metrics.avg_sentence_length,
                    *cfg.sentence_optimal,
                    cfg.sentence_below_penalty,
                    cfg.sentence_above_penalty,
                ),
                weight=cfg.weight_sentence,
                explanation=f"{metrics.avg_sentence_length:.1f} words per sentence",
            ),
            ScoreComponent(
                name="word_length",
                raw_score=band_score(
                    metrics.avg_word_length,
                    *cfg.word_optimal,
                    cfg.word_below_penalty,
                    cfg.word_above_penalty,
                ),
                weight=cfg.weight_word,
                explanation=f"{metrics.avg_word_length:.2f} characters per word",
            ),
            ScoreComponent(
                name="reading_ease",
                raw_score=band_score(
                    metrics.flesch_reading_ease,
                    *cfg.ease_optimal,
                    cfg.ease_below_penalty,
                    cfg.ease_above_penalty,
                ),
                weight=cfg.weight_ease,
                explanation=f"Flesch reading ease {metrics.flesch_reading_ease:.0f}",
            ),
            ScoreComponent(
                name="grade_level",
                raw_score=band_score(
                    avg_grade,
                    *cfg.grade_optimal,
                    cfg.grade_below_penalty,
                    cfg.grade_above_penalty,
                ),
                weight=cfg.weight_grade,
                explanation=f"Average grade level {avg_grade:.1f}",
                details={
                    "fleschKincaid": round(metrics.flesch_kincaid_grade, 1),
                    "smog": round(metrics.smog_grade, 1),
                    "colemanLiau": round(metrics.coleman_liau_grade, 1),
                },
            ),
        ]

        score = blend(components)
        if metrics.word_count < cfg.min_reliable_words:
            score = round(score * metrics.word_count / cfg.min_reliable_words)

        logger.info(
            "readability_score_calculated",
            score=score,
            words=metrics.word_count,
            avg_sentence_length=round(metrics.avg_sentence_length, 1),
        )
        return SubScore(
            name="readability",
            score=score,
            components=components,
            explanation=f"Average grade level {avg_grade:.1f}, reading ease {metrics.flesch_reading_ease:.0f}",
        )


def calculate_readability_score(metrics: ReadabilityMetrics, config: ReadabilityConfig | None = None) -> SubScore:
    """Convenience function to calculate the readability sub-score."""
    return ReadabilityScorer(config).calculate(metrics)
