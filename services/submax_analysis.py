"""
Submax Analysis Service

Entry points of the analyzer. Each call takes an already-decoded record
stream (and lap markers for the run), runs the protocol pipeline and
returns an immutable TestResult:

- Bike: window search -> 3x10 min segments -> efficiency drift -> compliance
- Run: last three laps -> per-mile aggregates -> HR drift / split range -> compliance

Validation failures raise a SubmaxValidationError subclass; no partial
result is ever returned. The inputs are only read.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from models.records import LapMarker, Sample
from models.results import TestResult
from signals.preprocessing import parse_decoded_activity, records_to_frame
from signals.validation import validate_lap_markers, validate_record_stream
from submax.domain.protocol import (
    BikeProtocolParameters,
    RunProtocolParameters,
    Sport,
)
from submax.calculations import (
    build_segments,
    calculate_bike_metrics,
    calculate_run_metrics,
    classify_bike_compliance,
    classify_run_compliance,
    find_test_window,
    samples_in_laps,
    segment_laps,
    select_test_laps,
)
from services.result_assembler import assemble_bike_result, assemble_run_result

logger = logging.getLogger("SubmaxLab.Analysis")


def analyze_bike_submax(
    records: Sequence[Sample],
    target_hr: Optional[float] = None,
    file_name: str = "",
    params: Optional[BikeProtocolParameters] = None,
) -> TestResult:
    """Analyze a 30-minute HR-first bike submax test.

    Args:
        records: Decoded samples, sorted by timestamp (1 Hz)
        target_hr: Target heart rate (typically 170 - age); ignored if params given
        file_name: Source file name, carried into the result
        params: Full protocol parameters (defaults from Config)

    Returns:
        TestResult with one Segment per segment_minutes block

    Raises:
        EmptyRecordStream, UnsortedRecordStream, NoValidWindowFound
    """
    if params is None:
        if target_hr is None:
            raise ValueError("Bike submax analysis needs a target heart rate")
        params = BikeProtocolParameters.from_config(target_hr)

    validate_record_stream(records)
    df = records_to_frame(records)
    file_start = records[0].timestamp
    logger.info(
        f"Bike submax: {len(df)} samples, target HR {params.target_hr:.0f} ± {params.band_bpm:.0f} bpm"
    )

    search = find_test_window(df, params)
    window = df.iloc[search.start:search.end]
    segments = build_segments(
        df,
        start=search.start,
        segment_samples=params.segment_samples,
        segment_count=params.segment_count,
        segment_minutes=params.segment_minutes,
        file_start=file_start,
    )
    metrics = calculate_bike_metrics(window, segments)
    compliance = classify_bike_compliance(
        window, segments, search.in_band_pct, search.longest_stop_s, params
    )
    return assemble_bike_result(
        file_name, file_start, search, segments, metrics, compliance, params.target_hr
    )


def analyze_treadmill_run(
    records: Sequence[Sample],
    laps: Sequence[LapMarker],
    file_name: str = "",
    target_hr: Optional[float] = None,
    params: Optional[RunProtocolParameters] = None,
) -> TestResult:
    """Analyze a 3-mile lap-split treadmill run.

    Args:
        records: Decoded samples, sorted by timestamp
        laps: Lap markers in file order; the last three are the test miles
        file_name: Source file name, carried into the result
        target_hr: Target heart rate (typically 180 - age), informational
        params: Full protocol parameters (defaults from Config)

    Raises:
        EmptyRecordStream, UnsortedRecordStream, InsufficientLapMarkers
    """
    if params is None:
        params = RunProtocolParameters.from_config(target_hr)

    validate_record_stream(records)
    lap_check = validate_lap_markers(laps, params.test_laps)
    df = records_to_frame(records)
    file_start = records[0].timestamp
    logger.info(f"Treadmill run: {len(df)} samples, {len(laps)} laps")

    test_laps = select_test_laps(laps, params.test_laps)
    miles = segment_laps(df, test_laps, file_start, params.test_laps)
    metrics = calculate_run_metrics(miles)
    compliance = classify_run_compliance(
        miles,
        metrics.split_range_sec,
        params,
        lap_warnings=lap_check.warnings,
        test_samples=samples_in_laps(df, test_laps),
    )
    return assemble_run_result(file_name, file_start, miles, metrics, compliance, params.target_hr)


def analyze_submax(
    records: Sequence[Sample],
    mode,
    laps: Optional[Sequence[LapMarker]] = None,
    target_hr: Optional[float] = None,
    file_name: str = "",
) -> TestResult:
    """Dispatch on the caller-selected mode ('bike' or 'run')."""
    sport = Sport.parse(mode)
    if sport is Sport.BIKE:
        return analyze_bike_submax(records, target_hr=target_hr, file_name=file_name)
    return analyze_treadmill_run(records, laps or (), file_name=file_name, target_hr=target_hr)


def analyze_decoded_activity(
    payload: Mapping[str, Any],
    mode,
    target_hr: Optional[float] = None,
    file_name: str = "",
) -> TestResult:
    """Analyze a decoded activity mapping ({'records': [...], 'laps': [...]})."""
    records, laps = parse_decoded_activity(payload)
    return analyze_submax(records, mode, laps=laps, target_hr=target_hr, file_name=file_name)
