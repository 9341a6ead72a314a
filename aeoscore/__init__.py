"""Content analysis and answer-engine-optimization (AEO) scoring engine."""

from aeoscore.exceptions import (
    AnalysisError,
    EmptyContentError,
    ErrorCode,
    InvalidInputError,
)
from aeoscore.logging import setup_logging
from aeoscore.models import AnalysisResult
from aeoscore.pipeline import ContentAnalysisEngine, analyze_content, analyze_content_sync

__version__ = "0.1.0"

__all__ = [
    "AnalysisError",
    "AnalysisResult",
    "ContentAnalysisEngine",
    "EmptyContentError",
    "ErrorCode",
    "InvalidInputError",
    "analyze_content",
    "analyze_content_sync",
    "setup_logging",
]
