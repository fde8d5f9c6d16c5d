"""
Models Module - Data Models

Record stream types consumed by the analyzers and the immutable result
objects they produce.
NO STREAMLIT OR UI DEPENDENCIES ALLOWED.

Sub-modules:
- records: Sample, LapMarker
- results: Segment, Mile, summaries, TestResult
"""

from models.records import Sample, LapMarker
from models.results import (
    ComplianceLevel,
    ComplianceAssessment,
    Segment,
    Mile,
    BikeSummary,
    RunSummary,
    TestResult,
)

__all__ = [
    'Sample',
    'LapMarker',
    'ComplianceLevel',
    'ComplianceAssessment',
    'Segment',
    'Mile',
    'BikeSummary',
    'RunSummary',
    'TestResult',
]
