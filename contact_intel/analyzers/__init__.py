"""
Pipeline analyzers.

Each analyzer is constructed from its config section and the shared
PatternTables, and exposes a single-item method plus a batch method that
logs and skips failing items.
"""

from .confidence_scorer import ConfidenceScorer
from .duplicate_detector import DuplicateDetector
from .freelancer_analyzer import FreelancerAnalyzer
from .quality_assessor import ContentQualityAssessor

__all__ = [
    "ConfidenceScorer",
    "ContentQualityAssessor",
    "DuplicateDetector",
    "FreelancerAnalyzer",
]
