"""Target keyword derivation and matching."""

import re

from aeoscore.extraction.document import ContentDocument

TOKEN_PATTERN = re.compile(r"\b\w+\b")

# Title separators: "Best Running Shoes | Acme", "Guide - Brand"
TITLE_SEPARATORS = re.compile(r"\s+[|\-–—:·»]\s+|\s*\|\s*")

STOPWORDS = frozenset(
    [
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "by",
        "for",
        "from",
        "how",
        "in",
        "is",
        "it",
        "of",
        "on",
        "or",
        "our",
        "that",
        "the",
        "this",
        "to",
        "we",
        "what",
        "when",
        "where",
        "which",
        "who",
        "why",
        "with",
        "you",
        "your",
    ]
)

MAX_DERIVED_KEYWORDS = 5


def tokenize(text: str) -> list[str]:
    return TOKEN_PATTERN.findall(text.lower())


def stem(token: str) -> str:
    """Light suffix-stripping stemmer; enough to match plural and verb forms."""
    if len(token) <= 3:
        return token
    if token.endswith("ies") and len(token) > 4:
        return token[:-3] + "y"
    if token.endswith(("sses", "xes", "zes", "ches", "shes")):
        return token[:-2]
    if token.endswith("s") and not token.endswith(("ss", "us", "is")):
        return token[:-1]
    if token.endswith("ing") and len(token) > 5:
        return token[:-3]
    if token.endswith("ed") and len(token) > 4:
        return token[:-2]
    return token


def content_stems(text: str) -> list[str]:
    """Stemmed, stopword-free tokens."""
    return [stem(t) for t in tokenize(text) if t not in STOPWORDS]


def normalize_keyword(keyword: str) -> str:
    return " ".join(tokenize(keyword))


def contains_keyword(text: str, keyword: str) -> bool:
    """
    Check whether text mentions a keyword.

    Matches the case-insensitive phrase on word boundaries first, then falls back to every
    content stem of the keyword appearing among the text's stems.
    """
    needle = normalize_keyword(keyword)
    if not needle:
        return False
    haystack = " ".join(tokenize(text))
    if f" {needle} " in f" {haystack} ":
        return True
    wanted = content_stems(keyword)
    if not wanted:
        return False
    have = set(content_stems(text))
    return all(s in have for s in wanted)


def count_occurrences(text: str, keyword: str) -> int:
    """Count non-overlapping stem-level occurrences of a keyword phrase."""
    wanted = content_stems(keyword)
    if not wanted:
        return 0
    stems = content_stems(text)
    size = len(wanted)
    count = 0
    i = 0
    while i <= len(stems) - size:
        if stems[i : i + size] == wanted:
            count += 1
            i += size
        else:
            i += 1
    return count


def derive_keywords(doc: ContentDocument) -> list[str]:
    """
    Derive target keywords from the page's H1 and title.

    Returns:
        Lower-cased keyword phrases, H1 first, without duplicates
    """
    candidates: list[str] = []
    if doc.h1:
        candidates.append(doc.h1)
    if doc.title:
        # Brand names usually trail the separator
        candidates.append(TITLE_SEPARATORS.split(doc.title)[0])

    keywords: list[str] = []
    seen_stems: set[tuple[str, ...]] = set()
    for candidate in candidates:
        phrase = normalize_keyword(candidate)
        stems = tuple(content_stems(phrase))
        if not stems or stems in seen_stems:
            continue
        seen_stems.add(stems)
        keywords.append(phrase)
        if len(keywords) >= MAX_DERIVED_KEYWORDS:
            break
    return keywords


def resolve_keywords(doc: ContentDocument, explicit: list[str] | None) -> list[str]:
    """Explicit keywords win; otherwise derive them from the document."""
    if explicit:
        cleaned = [normalize_keyword(k) for k in explicit]
        return list(dict.fromkeys(k for k in cleaned if k))
    return derive_keywords(doc)
