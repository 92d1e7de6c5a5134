"""Prompt rendering and Gemini-backed statement analysis."""

from statement_analyzer.analysis.client import (
    GeminiAnalysisClient,
    build_fallback_analysis,
    extract_json_payload,
    is_fallback_analysis,
)
from statement_analyzer.analysis.document import DocumentType, parse_document_type
from statement_analyzer.analysis.prompts import build_prompt, truncate_text

__all__ = [
    "DocumentType",
    "GeminiAnalysisClient",
    "build_fallback_analysis",
    "build_prompt",
    "extract_json_payload",
    "is_fallback_analysis",
    "parse_document_type",
    "truncate_text",
]
