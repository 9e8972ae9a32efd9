"""
Core data types, lookup tables and scoring helpers.

This package holds everything the analyzers share and that is
independent of any specific pipeline stage.
"""

from .patterns import DEFAULT_TABLES, PatternTables, build_tables
from .types import (
    ContentQualityAssessment,
    DuplicateGroup,
    ExtractedContact,
    FreelancerProfile,
    ParsedContent,
    PipelineInput,
    PipelineResult,
)

__all__ = [
    "DEFAULT_TABLES",
    "PatternTables",
    "build_tables",
    "ContentQualityAssessment",
    "DuplicateGroup",
    "ExtractedContact",
    "FreelancerProfile",
    "ParsedContent",
    "PipelineInput",
    "PipelineResult",
]
