"""Error kinds raised or recorded by the analysis engine."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Error kinds surfaced by the engine."""

    EMPTY_CONTENT = "EMPTY_CONTENT"  # fatal
    INVALID_INPUT = "INVALID_INPUT"  # fatal
    EXTRACTION_PARTIAL = "EXTRACTION_PARTIAL"  # recovered
    QUALITATIVE_UNAVAILABLE = "QUALITATIVE_UNAVAILABLE"  # recovered


class AnalysisError(Exception):
    """Base exception for the analysis engine."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
        fatal: bool = True,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.fatal = fatal
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class EmptyContentError(AnalysisError):
    """No usable text could be extracted from the content."""

    def __init__(self, message: str = "No usable text content found", url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message=message, code=ErrorCode.EMPTY_CONTENT, details=details)


class InvalidInputError(AnalysisError):
    """Malformed URL or non-string content."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, code=ErrorCode.INVALID_INPUT, details=details)


@dataclass(frozen=True)
class AnalysisWarning:
    """A recovered, non-fatal problem noted in the result details."""

    code: ErrorCode
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}
