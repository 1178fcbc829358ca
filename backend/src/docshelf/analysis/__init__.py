"""Document analysis pipeline: strategy selection, classification, conflict-aware apply."""

from .analyzer import (
    AnalysisFailedError,
    AnalysisOutcome,
    AnalysisStrategy,
    DocumentAnalyzer,
    is_text_document,
    metadata_fallback,
    truncate_text,
)
from .orchestrator import AnalysisOrchestrator, AnalysisRunStatus, mark_analysis_failed
from .schemas.analysis_output import AnalysisResult

__all__ = [
    "AnalysisFailedError",
    "AnalysisOutcome",
    "AnalysisStrategy",
    "DocumentAnalyzer",
    "is_text_document",
    "metadata_fallback",
    "truncate_text",
    "AnalysisOrchestrator",
    "AnalysisRunStatus",
    "mark_analysis_failed",
    "AnalysisResult",
]
