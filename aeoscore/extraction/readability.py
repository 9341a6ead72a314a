"""Linguistic readability metrics over flattened prose.

Grade-level formulas (Flesch-Kincaid, SMOG, Coleman-Liau) are computed from
our own sentence/word segmentation with syllables estimated by textstat, so
the counts reported here and the counts behind each grade always agree.
"""

import math
import re
from dataclasses import dataclass

import structlog
import textstat

logger = structlog.get_logger(__name__)

WORD_PATTERN = re.compile(r"[A-Za-zÀ-ɏ]+(?:['’][A-Za-z]+)*|\d+(?:[.,]\d+)*")

# Grade levels at or below MIN_GRADE map to 100, at or above MAX_GRADE to 0
MIN_GRADE = 1.0
MAX_GRADE = 18.0

COMPLEX_WORD_SYLLABLES = 3


@dataclass(frozen=True)
class ReadabilityMetrics:
    """Derived, immutable readability metrics for one analysis."""

    sentence_count: int = 0
    word_count: int = 0
    syllable_count: int = 0
    complex_word_count: int = 0
    letter_count: int = 0

    avg_sentence_length: float = 0.0  # words per sentence
    avg_word_length: float = 0.0  # characters per word
    syllables_per_word: float = 0.0

    flesch_reading_ease: float = 0.0  # 0-100, higher is easier
    flesch_kincaid_grade: float = 0.0
    smog_grade: float = 0.0
    coleman_liau_grade: float = 0.0

    # Grade levels mapped to 0-100 (higher = easier)
    flesch_kincaid_index: int = 0
    smog_index: int = 0
    coleman_liau_index: int = 0

    @property
    def is_empty(self) -> bool:
        return self.sentence_count == 0 or self.word_count == 0

    def to_dict(self) -> dict:
        return {
            "sentenceCount": self.sentence_count,
            "wordCount": self.word_count,
            "syllableCount": self.syllable_count,
            "avgSentenceLength": round(self.avg_sentence_length, 1),
            "avgWordLength": round(self.avg_word_length, 2),
            "syllablesPerWord": round(self.syllables_per_word, 2),
            "fleschReadingEase": round(self.flesch_reading_ease, 1),
            "fleschKincaidGrade": round(self.flesch_kincaid_grade, 1),
            "smogGrade": round(self.smog_grade, 1),
            "colemanLiauGrade": round(self.coleman_liau_grade, 1),
            "fleschKincaidIndex": self.flesch_kincaid_index,
            "smogIndex": self.smog_index,
            "colemanLiauIndex": self.coleman_liau_index,
        }


def split_sentences(text: str) -> list[str]:
    """Split text into sentences, protecting common abbreviations and decimals."""
    text = re.sub(r"\b(Mr|Mrs|Ms|Dr|Prof|Inc|Ltd|Jr|Sr|St|vs|etc)\.", r"\1<PERIOD>", text)
    text = re.sub(r"(\d)\.(\d)", r"\1<PERIOD>\2", text)

    # Line breaks separate paragraphs, which always end a sentence
    sentences = re.split(r"[.!?]+|\n+", text)
    return [s.strip() for s in sentences if WORD_PATTERN.search(s)]


def tokenize_words(text: str) -> list[str]:
    return WORD_PATTERN.findall(text)


def _syllables(word: str) -> int:
    if word[0].isdigit():
        return 1
    return max(1, textstat.syllable_count(word))


def grade_to_index(grade: float) -> int:
    """Map a US grade level onto 0-100 where lower grades score higher."""
    scaled = 100 * (1 - (grade - MIN_GRADE) / (MAX_GRADE - MIN_GRADE))
    return round(min(100.0, max(0.0, scaled)))


def compute_readability(text: str) -> ReadabilityMetrics:
    """
    Compute readability metrics for flattened prose.

    Args:
        text: Paragraph text, one paragraph per line

    Returns:
        ReadabilityMetrics; all zeros when there are no words or sentences
    """
    sentences = split_sentences(text)
    words = tokenize_words(text)

    if not sentences or not words:
        return ReadabilityMetrics()

    n_sent = len(sentences)
    n_words = len(words)
    syllable_counts = [_syllables(w) for w in words]
    n_syll = sum(syllable_counts)
    n_complex = sum(1 for s in syllable_counts if s >= COMPLEX_WORD_SYLLABLES)
    n_letters = sum(sum(1 for ch in w if ch.isalnum()) for w in words)

    wps = n_words / n_sent
    spw = n_syll / n_words

    ease = 206.835 - 1.015 * wps - 84.6 * spw
    fk_grade = 0.39 * wps + 11.8 * spw - 15.59
    smog = 1.043 * math.sqrt(n_complex * (30 / n_sent)) + 3.1291
    letters_per_100 = n_letters / n_words * 100
    sentences_per_100 = n_sent / n_words * 100
    cl_grade = 0.0588 * letters_per_100 - 0.296 * sentences_per_100 - 15.8

    metrics = ReadabilityMetrics(
        sentence_count=n_sent,
        word_count=n_words,
        syllable_count=n_syll,
        complex_word_count=n_complex,
        letter_count=n_letters,
        avg_sentence_length=wps,
        avg_word_length=n_letters / n_words,
        syllables_per_word=spw,
        flesch_reading_ease=min(100.0, max(0.0, ease)),
        flesch_kincaid_grade=fk_grade,
        smog_grade=smog,
        coleman_liau_grade=cl_grade,
        flesch_kincaid_index=grade_to_index(fk_grade),
        smog_index=grade_to_index(smog),
        coleman_liau_index=grade_to_index(cl_grade),
    )

    logger.debug(
        "readability_computed",
        sentences=n_sent,
        words=n_words,
        ease=round(metrics.flesch_reading_ease, 1),
        fk_grade=round(fk_grade, 1),
    )
    return metrics
