"""Content extraction: raw markup to a structured ContentDocument."""

from aeoscore.extraction.document import ContentDocument, ContentNode, NodeType
from aeoscore.extraction.extractor import ContentExtractor, ExtractorConfig, extract_document

__all__ = [
    "ContentDocument",
    "ContentExtractor",
    "ContentNode",
    "ExtractorConfig",
    "NodeType",
    "extract_document",
]
