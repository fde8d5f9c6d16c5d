"""
Submax Test Result Objects.

Immutable values handed to the persistence layer. Averages and ratios are
Optional: None means "undefined" (no readings, zero denominator), never NaN.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple, Union
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class ComplianceLevel(str, Enum):
    """Trust label attached to every result (advisory, not a gate)."""
    COMPLIANT = "COMPLIANT"          # Protocol followed
    WARNING = "WARNING"              # Valid, close to a tolerance boundary
    NON_COMPLIANT = "NON_COMPLIANT"  # Discount / exclude in trend analysis


@dataclass(frozen=True)
class ComplianceAssessment:
    level: ComplianceLevel = ComplianceLevel.COMPLIANT
    reasons: Tuple[str, ...] = ()


# ============================================================
# DATA ROWS
# ============================================================

@dataclass(frozen=True)
class Segment:
    """
    One fixed-length block of the accepted bike window.

    start_index / end_index are sample positions in the record stream
    (end exclusive); consecutive segments tile the window exactly.
    """
    segment_index: int
    label: str
    start_index: int
    end_index: int
    start_ts: datetime
    end_ts: datetime
    elapsed_start_sec: float
    elapsed_end_sec: float
    elapsed_start_mmss: str
    elapsed_end_mmss: str
    hr_avg: Optional[float]
    power_avg: Optional[float]
    cadence_avg: Optional[float]
    efficiency: Optional[float]  # W/bpm

    def to_dict(self) -> Dict:
        return {
            "segment_index": self.segment_index,
            "label": self.label,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "start_ts": self.start_ts.isoformat(),
            "end_ts": self.end_ts.isoformat(),
            "elapsed_start_sec": self.elapsed_start_sec,
            "elapsed_end_sec": self.elapsed_end_sec,
            "elapsed_start_mmss": self.elapsed_start_mmss,
            "elapsed_end_mmss": self.elapsed_end_mmss,
            "hr_avg": self.hr_avg,
            "power_avg": self.power_avg,
            "cadence_avg": self.cadence_avg,
            "efficiency": self.efficiency,
        }


@dataclass(frozen=True)
class Mile:
    """One test lap of the treadmill run."""
    mile_index: int
    start_ts: datetime
    end_ts: datetime
    elapsed_start_sec: float
    elapsed_end_sec: float
    elapsed_start_mmss: str
    elapsed_end_mmss: str
    split_time_sec: float
    split_time_mmss: str
    hr_avg: Optional[float]
    cadence_avg: Optional[float]
    sample_count: int = 0

    def to_dict(self) -> Dict:
        return {
            "mile_index": self.mile_index,
            "start_ts": self.start_ts.isoformat(),
            "end_ts": self.end_ts.isoformat(),
            "elapsed_start_sec": self.elapsed_start_sec,
            "elapsed_end_sec": self.elapsed_end_sec,
            "elapsed_start_mmss": self.elapsed_start_mmss,
            "elapsed_end_mmss": self.elapsed_end_mmss,
            "split_time_sec": self.split_time_sec,
            "split_time_mmss": self.split_time_mmss,
            "hr_avg": self.hr_avg,
            "cadence_avg": self.cadence_avg,
            "sample_count": self.sample_count,
        }


# ============================================================
# SUMMARIES
# ============================================================

@dataclass(frozen=True)
class BikeSummary:
    eff_change_pct_seg3_vs_seg1: Optional[float]
    hr_avg: Optional[float]
    power_avg: Optional[float]
    cadence_avg: Optional[float]
    in_band_pct: float
    longest_stop_s: int
    rejected_windows: int
    compliance: ComplianceLevel = ComplianceLevel.COMPLIANT
    compliance_reasons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "eff_change_pct_seg3_vs_seg1": self.eff_change_pct_seg3_vs_seg1,
            "hr_avg": self.hr_avg,
            "power_avg": self.power_avg,
            "cadence_avg": self.cadence_avg,
            "in_band_pct": self.in_band_pct,
            "longest_stop_s": self.longest_stop_s,
            "rejected_windows": self.rejected_windows,
            "compliance": self.compliance.value,
            "compliance_reasons": list(self.compliance_reasons),
        }


@dataclass(frozen=True)
class RunSummary:
    split_range_sec: float
    split_range_mmss: str
    hr_drift_m1_to_m3: Optional[float]
    hr_avg: Optional[float]
    cadence_avg: Optional[float]
    compliance: ComplianceLevel = ComplianceLevel.COMPLIANT
    compliance_reasons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "split_range_sec": self.split_range_sec,
            "split_range_mmss": self.split_range_mmss,
            "hr_drift_m1_to_m3": self.hr_drift_m1_to_m3,
            "hr_avg": self.hr_avg,
            "cadence_avg": self.cadence_avg,
            "compliance": self.compliance.value,
            "compliance_reasons": list(self.compliance_reasons),
        }


# ============================================================
# TEST RESULT
# ============================================================

@dataclass(frozen=True)
class TestResult:
    """
    Assembled output of one analysis call.

    Built once from a single record stream and never mutated. Holds no
    references into the input, so ownership passes to the caller as a value.
    """
    __test__ = False

    test_type: str
    sport: str
    file_name: str
    file_start_ts: datetime
    test_start_ts: datetime
    test_end_ts: datetime
    elapsed_start_sec: float
    elapsed_end_sec: float
    summary: Union[BikeSummary, RunSummary]
    data: Tuple[Union[Segment, Mile], ...] = field(default_factory=tuple)
    target_hr: Optional[float] = None

    @property
    def compliance(self) -> ComplianceLevel:
        return self.summary.compliance

    def to_dict(self) -> Dict:
        """Serialize to dict for JSON export."""
        return {
            "test_type": self.test_type,
            "sport": self.sport,
            "file_name": self.file_name,
            "file_start_ts": self.file_start_ts.isoformat(),
            "test_start_ts": self.test_start_ts.isoformat(),
            "test_end_ts": self.test_end_ts.isoformat(),
            "elapsed_start_sec": self.elapsed_start_sec,
            "elapsed_end_sec": self.elapsed_end_sec,
            "target_hr": self.target_hr,
            "summary": self.summary.to_dict(),
            "data": [row.to_dict() for row in self.data],
        }
