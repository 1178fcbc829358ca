"""Analysis output schemas"""

from .analysis_output import AnalysisResult, MAX_SUGGESTED_TAGS

__all__ = ["AnalysisResult", "MAX_SUGGESTED_TAGS"]
