"""Parse and validate the model's JSON assessment.

Models do not always return bare JSON. Recovery tries, in order: the whole
reply, the contents of each code fence, then every embedded JSON object
found by scanning for '{'. The first candidate that validates wins.
"""

import json
import re
from collections.abc import Iterator
from typing import Any

import structlog
from pydantic import ValidationError

from aeoscore.qualitative.models import QualitativeAssessment

logger = structlog.get_logger(__name__)

CODE_FENCE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.S)

# Wrapper keys some models nest the payload under
WRAPPER_KEYS = ("analysis", "assessment", "result", "data")


def _candidates(content: str) -> Iterator[Any]:
    text = content.strip()
    if not text:
        return

    try:
        yield json.loads(text)
    except json.JSONDecodeError:
        pass

    for match in CODE_FENCE.finditer(text):
        try:
            yield json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            continue

    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            obj = None
        if obj is not None:
            yield obj
        start = text.find("{", start + 1)


def _unwrap(obj: Any) -> Iterator[dict]:
    if isinstance(obj, dict):
        yield obj
        for key in WRAPPER_KEYS:
            inner = obj.get(key)
            if isinstance(inner, dict):
                yield inner


def parse_assessment(content: str) -> QualitativeAssessment | None:
    """
    Recover a validated assessment from a model reply.

    Args:
        content: Raw model output

    Returns:
        QualitativeAssessment, or None when no candidate matches the shape
    """
    last_error: str | None = None
    attempts = 0
    for candidate in _candidates(content):
        for obj in _unwrap(candidate):
            attempts += 1
            try:
                return QualitativeAssessment.model_validate(obj)
            except ValidationError as e:
                last_error = f"{e.error_count()} validation errors"

    logger.debug(
        "qualitative_parse_failed",
        attempts=attempts,
        error=last_error or "no JSON object found",
        content_length=len(content),
    )
    return None
