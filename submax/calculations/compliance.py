"""
Protocol Compliance Classifier.

Attaches a trust label to a result so trend analysis can discount or
exclude low-quality tests. Advisory only: every label is returned with
its result.

Bike thresholds:
- NON_COMPLIANT: in-band % below min_in_band_pct, a stop of stop_grace_s
  or longer, or HR / power present in less than min_channel_coverage_pct
  of the window
- WARNING: in-band % below warn_in_band_pct, a stop of warn_stop_s or
  longer, channel coverage below warn_channel_coverage_pct, or a segment
  without a defined efficiency

Run thresholds:
- NON_COMPLIANT: the majority of test laps have no HR readings, or HR is
  present in less than min_channel_coverage_pct of the test lap samples
- WARNING: any test lap without HR or without samples, HR coverage below
  warn_channel_coverage_pct, overlapping laps, or split range above
  warn_split_range_s
"""
from typing import List, Optional, Sequence
import logging

import pandas as pd

from models.results import ComplianceAssessment, ComplianceLevel, Mile, Segment
from submax.domain.protocol import BikeProtocolParameters, RunProtocolParameters
from signals.validation import Severity, ValidationResult, ValidationWarning, check_channel_coverage
from .common import COL_HR, COL_POWER

logger = logging.getLogger("SubmaxLab.Compliance")

BIKE_CHANNELS = {COL_HR: "Heart rate", COL_POWER: "Power"}
RUN_CHANNELS = {COL_HR: "Heart rate"}


class _Verdict:
    """Collects reasons and keeps the worst level seen."""

    _RANK = {
        ComplianceLevel.COMPLIANT: 0,
        ComplianceLevel.WARNING: 1,
        ComplianceLevel.NON_COMPLIANT: 2,
    }

    def __init__(self):
        self.level = ComplianceLevel.COMPLIANT
        self.reasons: List[str] = []

    def add(self, level: ComplianceLevel, reason: str):
        self.reasons.append(reason)
        if self._RANK[level] > self._RANK[self.level]:
            self.level = level

    def add_warnings(self, warnings: Sequence[ValidationWarning]):
        for w in warnings:
            if w.severity == Severity.ERROR:
                self.add(ComplianceLevel.NON_COMPLIANT, w.message)
            elif w.severity == Severity.WARNING:
                self.add(ComplianceLevel.WARNING, w.message)

    def assessment(self, sport: str) -> ComplianceAssessment:
        if self.level is not ComplianceLevel.COMPLIANT:
            logger.info(f"{sport} test classified {self.level.value}: {'; '.join(self.reasons)}")
        return ComplianceAssessment(level=self.level, reasons=tuple(self.reasons))


def classify_bike_compliance(
    window: pd.DataFrame,
    segments: Sequence[Segment],
    in_band_pct: float,
    longest_stop_s: int,
    params: BikeProtocolParameters,
) -> ComplianceAssessment:
    """
    Label an accepted bike window.

    Args:
        window: Record frame rows of the accepted window
        segments: Segments built from the window
        in_band_pct: Share of window samples with HR in band [%]
        longest_stop_s: Longest run of stopped samples inside the window
        params: Protocol parameters (tolerances and stricter WARNING pair)
    """
    verdict = _Verdict()

    # re-check of the search constraints
    if in_band_pct < params.min_in_band_pct:
        verdict.add(
            ComplianceLevel.NON_COMPLIANT,
            f"HR in band {in_band_pct:.1f}% (minimum {params.min_in_band_pct:.0f}%)",
        )
    elif in_band_pct < params.warn_in_band_pct:
        verdict.add(
            ComplianceLevel.WARNING,
            f"HR in band {in_band_pct:.1f}%, close to the {params.min_in_band_pct:.0f}% minimum",
        )

    if longest_stop_s >= params.stop_grace_s:
        verdict.add(
            ComplianceLevel.NON_COMPLIANT,
            f"Stopped for {longest_stop_s}s (limit {params.stop_grace_s}s)",
        )
    elif longest_stop_s >= params.warn_stop_s:
        verdict.add(
            ComplianceLevel.WARNING,
            f"Stopped for {longest_stop_s}s, close to the {params.stop_grace_s}s limit",
        )

    coverage: ValidationResult = check_channel_coverage(
        window, BIKE_CHANNELS, params.min_channel_coverage_pct, params.warn_channel_coverage_pct
    )
    verdict.add_warnings(coverage.warnings)

    undefined = [s.segment_index for s in segments if s.efficiency is None]
    if undefined:
        verdict.add(
            ComplianceLevel.WARNING,
            f"Efficiency undefined for segment(s) {', '.join(str(i) for i in undefined)}",
        )

    return verdict.assessment("bike")


def classify_run_compliance(
    miles: Sequence[Mile],
    split_range_sec: float,
    params: RunProtocolParameters,
    lap_warnings: Optional[Sequence[ValidationWarning]] = None,
    test_samples: Optional[pd.DataFrame] = None,
) -> ComplianceAssessment:
    """
    Label a treadmill run.

    Args:
        miles: Test miles
        split_range_sec: max - min split time [s]
        params: Run protocol parameters
        lap_warnings: Non-fatal lap marker warnings (e.g. overlapping laps)
        test_samples: Record frame rows inside the test laps; enables the
            sample-level heart rate coverage check
    """
    verdict = _Verdict()

    if test_samples is not None and not test_samples.empty:
        coverage = check_channel_coverage(
            test_samples, RUN_CHANNELS, params.min_channel_coverage_pct, params.warn_channel_coverage_pct
        )
        verdict.add_warnings(coverage.warnings)

    missing_hr = [m.mile_index for m in miles if m.hr_avg is None]
    present_pct = (len(miles) - len(missing_hr)) / len(miles) * 100.0 if miles else 0.0
    if missing_hr and present_pct < params.min_channel_coverage_pct:
        verdict.add(
            ComplianceLevel.NON_COMPLIANT,
            f"No heart rate for mile(s) {', '.join(str(i) for i in missing_hr)}",
        )
    elif missing_hr:
        verdict.add(
            ComplianceLevel.WARNING,
            f"No heart rate for mile(s) {', '.join(str(i) for i in missing_hr)}",
        )

    empty = [m.mile_index for m in miles if m.sample_count == 0]
    if empty:
        verdict.add(
            ComplianceLevel.WARNING,
            f"No samples recorded during mile(s) {', '.join(str(i) for i in empty)}",
        )

    if split_range_sec > params.warn_split_range_s:
        verdict.add(
            ComplianceLevel.WARNING,
            f"Uneven pacing: split range {split_range_sec:.0f}s "
            f"(above {params.warn_split_range_s:.0f}s)",
        )

    verdict.add_warnings(lap_warnings or [])
    return verdict.assessment("run")
