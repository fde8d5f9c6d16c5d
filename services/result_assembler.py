"""
Result Assembler

Pure functions composing search / segmentation / metrics / compliance
outputs into the immutable TestResult, plus JSON export for the
persistence layer. No side effects; deterministic for identical inputs.
"""

import json
from datetime import datetime
from typing import Optional, Sequence

from models.results import (
    BikeSummary,
    ComplianceAssessment,
    Mile,
    RunSummary,
    Segment,
    TestResult,
)
from submax.domain.protocol import Sport, TestType
from submax.calculations.common import elapsed_seconds
from submax.calculations.metrics import BikeMetrics, RunMetrics
from submax.calculations.window_search import WindowSearchResult


def assemble_bike_result(
    file_name: str,
    file_start: datetime,
    search: WindowSearchResult,
    segments: Sequence[Segment],
    metrics: BikeMetrics,
    compliance: ComplianceAssessment,
    target_hr: float,
) -> TestResult:
    test_start = segments[0].start_ts
    test_end = segments[-1].end_ts
    summary = BikeSummary(
        eff_change_pct_seg3_vs_seg1=metrics.eff_change_pct,
        hr_avg=metrics.hr_avg,
        power_avg=metrics.power_avg,
        cadence_avg=metrics.cadence_avg,
        in_band_pct=round(search.in_band_pct, 2),
        longest_stop_s=search.longest_stop_s,
        rejected_windows=len(search.rejected),
        compliance=compliance.level,
        compliance_reasons=compliance.reasons,
    )
    return TestResult(
        test_type=TestType.BIKE_HR_SUBMAX.value,
        sport=Sport.BIKE.value,
        file_name=file_name,
        file_start_ts=file_start,
        test_start_ts=test_start,
        test_end_ts=test_end,
        elapsed_start_sec=elapsed_seconds(test_start, file_start),
        elapsed_end_sec=elapsed_seconds(test_end, file_start),
        summary=summary,
        data=tuple(segments),
        target_hr=float(target_hr),
    )


def assemble_run_result(
    file_name: str,
    file_start: datetime,
    miles: Sequence[Mile],
    metrics: RunMetrics,
    compliance: ComplianceAssessment,
    target_hr: Optional[float] = None,
) -> TestResult:
    summary = RunSummary(
        split_range_sec=metrics.split_range_sec,
        split_range_mmss=metrics.split_range_mmss,
        hr_drift_m1_to_m3=metrics.hr_drift,
        hr_avg=metrics.hr_avg,
        cadence_avg=metrics.cadence_avg,
        compliance=compliance.level,
        compliance_reasons=compliance.reasons,
    )
    return TestResult(
        test_type=TestType.TREADMILL_RUN_LAPS.value,
        sport=Sport.RUN.value,
        file_name=file_name,
        file_start_ts=file_start,
        test_start_ts=miles[0].start_ts,
        test_end_ts=miles[-1].end_ts,
        elapsed_start_sec=miles[0].elapsed_start_sec,
        elapsed_end_sec=miles[-1].elapsed_end_sec,
        summary=summary,
        data=tuple(miles),
        target_hr=float(target_hr) if target_hr is not None else None,
    )


def export_result_json(result: TestResult) -> str:
    """Export a TestResult to a JSON string.

    Args:
        result: TestResult object

    Returns:
        JSON string representation (undefined figures as null)
    """
    return json.dumps(result.to_dict(), indent=2, allow_nan=False)
