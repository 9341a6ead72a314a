"""Tests for readability metrics and the readability sub-score."""

from dataclasses import FrozenInstanceError

import pytest

from aeoscore.extraction.readability import (
    ReadabilityMetrics,
    compute_readability,
    grade_to_index,
    split_sentences,
    tokenize_words,
)
from aeoscore.scoring.readability import ReadabilityConfig, ReadabilityScorer, calculate_readability_score

PLAIN_PROSE = (
    "Solar panels turn sunlight into electricity for your home. "
    "Each panel holds many small cells that are made of silicon. "
    "When light hits a cell, it frees electrons and makes a current. "
    "An inverter then changes that current into the kind your lights use. "
    "Most homes need between ten and twenty panels to cover daily use. "
    "The panels work best when they face the sun for most of the day."
)

DENSE_PROSE = (
    "Notwithstanding the aforementioned considerations, the implementation of photovoltaic "
    "infrastructure necessitates comprehensive evaluation of multidimensional environmental, "
    "regulatory, and socioeconomic determinants, particularly regarding interconnection "
    "standardization, intermittency mitigation methodologies, and longitudinal maintenance "
    "obligations that fundamentally characterize contemporary decentralized electrification paradigms."
)


class TestSegmentation:
    """Tests for sentence and word segmentation."""

    def test_split_sentences(self) -> None:
        sentences = split_sentences("The cat sat. The dog ran! Did it stop?")
        assert sentences == ["The cat sat", "The dog ran", "Did it stop"]

    def test_abbreviations_and_decimals_do_not_split(self) -> None:
        sentences = split_sentences("Dr. Smith measured 3.5 litres. It was enough.")
        assert len(sentences) == 2

    def test_line_breaks_end_sentences(self) -> None:
        sentences = split_sentences("First paragraph without a period\nSecond paragraph")
        assert len(sentences) == 2

    def test_tokenize_words(self) -> None:
        assert tokenize_words("It's 3.5 metres, isn't it?") == ["It's", "3.5", "metres", "isn't", "it"]


class TestComputeReadability:
    """Tests for compute_readability."""

    def test_empty_text(self) -> None:
        metrics = compute_readability("")
        assert metrics.is_empty
        assert metrics == ReadabilityMetrics()

    def test_punctuation_only(self) -> None:
        assert compute_readability("... !!! ???").is_empty

    def test_counts(self) -> None:
        metrics = compute_readability("The cat sat on the mat. The dog ran.")

        assert metrics.sentence_count == 2
        assert metrics.word_count == 9
        assert metrics.avg_sentence_length == 4.5

    def test_reading_ease_is_clamped(self) -> None:
        for text in ("Go. Run. Sit. Eat.", DENSE_PROSE):
            metrics = compute_readability(text)
            assert 0.0 <= metrics.flesch_reading_ease <= 100.0

    def test_plain_prose_is_easier_than_dense_prose(self) -> None:
        plain = compute_readability(PLAIN_PROSE)
        dense = compute_readability(DENSE_PROSE)

        assert plain.flesch_reading_ease > dense.flesch_reading_ease
        assert plain.flesch_kincaid_grade < dense.flesch_kincaid_grade
        assert plain.flesch_kincaid_index > dense.flesch_kincaid_index

    def test_metrics_are_frozen(self) -> None:
        metrics = compute_readability(PLAIN_PROSE)
        with pytest.raises(FrozenInstanceError):
            metrics.word_count = 0  # type: ignore[misc]

    def test_to_dict_keys(self) -> None:
        data = compute_readability(PLAIN_PROSE).to_dict()

        assert "fleschReadingEase" in data
        assert "avgSentenceLength" in data
        assert "smogGrade" in data


class TestGradeToIndex:
    """Tests for grade_to_index."""

    def test_bounds(self) -> None:
        assert grade_to_index(-3) == 100
        assert grade_to_index(1) == 100
        assert grade_to_index(18) == 0
        assert grade_to_index(30) == 0

    def test_monotonic(self) -> None:
        assert grade_to_index(6) > grade_to_index(10) > grade_to_index(14)


class TestReadabilityScorer:
    """Tests for the readability sub-score."""

    def test_empty_metrics_score_zero(self) -> None:
        result = calculate_readability_score(ReadabilityMetrics())

        assert result.score == 0
        assert result.name == "readability"

    def test_plain_prose_scores_higher(self) -> None:
        plain = calculate_readability_score(compute_readability(PLAIN_PROSE))
        dense = calculate_readability_score(compute_readability(DENSE_PROSE))

        assert plain.score > dense.score
        assert 0 <= dense.score <= 100
        assert 0 <= plain.score <= 100

    def test_fragmented_text_does_not_beat_prose(self) -> None:
        fragments = " ".join(["Buy now. Great price. Fast ship. Call us."] * 5)
        fragmented = calculate_readability_score(compute_readability(fragments))
        plain = calculate_readability_score(compute_readability(PLAIN_PROSE))

        assert fragmented.score < plain.score

    def test_short_sample_is_scaled_down(self) -> None:
        short = compute_readability("The cat sat on the mat. The dog ran to the park.")
        full = ReadabilityScorer(ReadabilityConfig(min_reliable_words=0)).calculate(short)
        scaled = ReadabilityScorer().calculate(short)

        assert scaled.score < full.score

    def test_components(self) -> None:
        result = calculate_readability_score(compute_readability(PLAIN_PROSE))
        names = [c.name for c in result.components]

        assert names == ["sentence_length", "word_length", "reading_ease", "grade_level"]
        assert abs(sum(c.weight for c in result.components) - 1.0) < 1e-9
