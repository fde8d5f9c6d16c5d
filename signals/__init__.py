"""
Signals Module - Input Preparation

Turns the decoded activity into analysis inputs and checks them.
NO STREAMLIT OR UI DEPENDENCIES ALLOWED.

Sub-modules:
- preprocessing: decoded payload -> Samples / LapMarkers -> DataFrame
- validation: protocol preconditions, sensor coverage warnings
"""

# Preprocessing module
from signals.preprocessing import (
    to_datetime,
    parse_records,
    parse_laps,
    parse_decoded_activity,
    records_to_frame,
)

# Validation module
from signals.validation import (
    Severity,
    ValidationWarning,
    ValidationResult,
    validate_record_stream,
    validate_lap_markers,
    coverage_pct,
    detect_missing_data,
    check_channel_coverage,
)

__all__ = [
    # Preprocessing
    'to_datetime',
    'parse_records',
    'parse_laps',
    'parse_decoded_activity',
    'records_to_frame',
    # Validation
    'Severity',
    'ValidationWarning',
    'ValidationResult',
    'validate_record_stream',
    'validate_lap_markers',
    'coverage_pct',
    'detect_missing_data',
    'check_channel_coverage',
]
