"""
Input Validation Module

Two kinds of checks on the decoded input:
- Protocol preconditions (non-empty stream, sorted timestamps, enough laps).
  These RAISE one of the submax validation errors.
- Sensor coverage of the channels a protocol needs. These never raise; they
  return warnings that feed the compliance label.

NO STREAMLIT OR UI DEPENDENCIES ALLOWED.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from enum import Enum
import logging

import pandas as pd

from models.records import Sample, LapMarker
from submax.domain.errors import EmptyRecordStream, UnsortedRecordStream, InsufficientLapMarkers

logger = logging.getLogger("SubmaxLab.Validation")


class Severity(str, Enum):
    """Severity levels for validation warnings."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationWarning:
    """A single validation warning."""
    code: str
    message: str
    severity: Severity = Severity.WARNING
    details: Optional[dict] = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


@dataclass
class ValidationResult:
    """Result of a non-fatal validation pass."""
    is_valid: bool
    warnings: List[ValidationWarning] = field(default_factory=list)
    stats: dict = field(default_factory=dict)

    def has_errors(self) -> bool:
        """Check if any error-level warnings exist."""
        return any(w.severity == Severity.ERROR for w in self.warnings)


# ============================================================
# Protocol preconditions (raise)
# ============================================================

def validate_record_stream(records: Sequence[Sample]) -> None:
    """
    Raise if the stream cannot be analyzed at all.

    Gaps between timestamps are legal; going backwards is not.
    """
    if records is None or len(records) == 0:
        raise EmptyRecordStream()

    previous = records[0].timestamp
    for i in range(1, len(records)):
        current = records[i].timestamp
        if current < previous:
            raise UnsortedRecordStream(i)
        previous = current


def validate_lap_markers(laps: Optional[Sequence[LapMarker]], required: int = 3) -> ValidationResult:
    """
    Raise InsufficientLapMarkers when fewer than `required` laps exist.

    Overlapping or out-of-order test laps are reported as warnings: the
    last laps in file order are still the test laps.
    """
    count = 0 if laps is None else len(laps)
    if count < required:
        raise InsufficientLapMarkers(found=count, required=required)

    warnings = []
    test_laps = list(laps)[-required:]
    for prev, lap in zip(test_laps, test_laps[1:]):
        if lap.start_time < prev.end_time:
            warnings.append(ValidationWarning(
                code="LAPS_OVERLAP",
                message=(
                    f"Lap starting {lap.start_time.isoformat()} begins before the previous "
                    f"lap ended ({prev.end_time.isoformat()})"
                ),
                severity=Severity.WARNING,
            ))
    return ValidationResult(is_valid=True, warnings=warnings, stats={"lap_count": count})


# ============================================================
# Sensor coverage (never raise)
# ============================================================

def coverage_pct(series: Optional[pd.Series]) -> float:
    """Percentage of samples with a present reading (0.0 for empty input)."""
    if series is None or len(series) == 0:
        return 0.0
    return float(series.notna().sum()) / len(series) * 100.0


def detect_missing_data(
    series: pd.Series,
    channel: str,
    min_coverage_pct: float,
    warn_coverage_pct: float,
) -> Optional[ValidationWarning]:
    """
    Detect dropouts in one sensor channel.

    Coverage below min_coverage_pct is an ERROR (channel absent for the
    majority of the window), below warn_coverage_pct a WARNING.
    """
    pct = coverage_pct(series)
    details = {"channel": channel, "coverage_pct": round(pct, 1)}

    if pct == 0.0:
        return ValidationWarning(
            code="CHANNEL_MISSING",
            message=f"{channel}: no readings",
            severity=Severity.ERROR,
            details=details,
        )
    if pct < min_coverage_pct:
        return ValidationWarning(
            code="EXCESSIVE_MISSING_DATA",
            message=f"{channel}: only {pct:.1f}% of samples present",
            severity=Severity.ERROR,
            details=details,
        )
    if pct < warn_coverage_pct:
        return ValidationWarning(
            code="MISSING_DATA",
            message=f"{channel}: {100.0 - pct:.1f}% of samples missing",
            severity=Severity.WARNING,
            details=details,
        )
    return None


def check_channel_coverage(
    frame: pd.DataFrame,
    channels: Dict[str, str],
    min_coverage_pct: float,
    warn_coverage_pct: float,
) -> ValidationResult:
    """
    Check coverage of the required channels.

    Args:
        frame: Record frame (or a slice of it, e.g. the accepted window)
        channels: Mapping column -> display name, e.g. {"heartrate": "Heart rate"}
        min_coverage_pct: Below this the channel counts as absent
        warn_coverage_pct: Below this the channel is flagged as patchy

    Returns:
        ValidationResult with per-channel coverage in stats
    """
    warnings = []
    stats = {}
    for column, name in channels.items():
        series = frame[column] if column in frame.columns else None
        stats[column] = round(coverage_pct(series), 1)
        warning = detect_missing_data(series, name, min_coverage_pct, warn_coverage_pct)
        if warning:
            logger.debug(str(warning))
            warnings.append(warning)

    result = ValidationResult(is_valid=True, warnings=warnings, stats=stats)
    result.is_valid = not result.has_errors()
    return result


__all__ = [
    'Severity',
    'ValidationWarning',
    'ValidationResult',
    'validate_record_stream',
    'validate_lap_markers',
    'coverage_pct',
    'detect_missing_data',
    'check_channel_coverage',
]
