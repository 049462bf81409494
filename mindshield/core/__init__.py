"""
Core scam-detection components: pattern catalog, keyword filter,
risk classifier, scoring engine and risk level mapping.
"""

from .keyword_filter import KeywordFilterResult, run_keyword_filter
from .risk_level import RiskLevel, get_risk_level
from .scam_analysis import ScamAnalysisEngine, ScamAnalysisResult, analyze_transcript

__all__ = [
    "KeywordFilterResult",
    "run_keyword_filter",
    "RiskLevel",
    "get_risk_level",
    "ScamAnalysisEngine",
    "ScamAnalysisResult",
    "analyze_transcript",
]
