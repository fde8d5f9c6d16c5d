"""
Lap Segmenter (run protocol).

The test laps are the last N lap presses in the file: athletes may press
lap during the warm-up before the test miles start.
"""
from datetime import datetime
from typing import List, Sequence
import logging

import pandas as pd

from models.records import LapMarker
from models.results import Mile
from .common import (
    COL_TIMESTAMP,
    COL_HR,
    COL_CADENCE,
    safe_mean,
    format_mmss,
    elapsed_seconds,
)

logger = logging.getLogger("SubmaxLab.LapSegmenter")


def select_test_laps(laps: Sequence[LapMarker], test_laps: int = 3) -> List[LapMarker]:
    """Last `test_laps` markers in file order (caller guarantees enough laps)."""
    selected = list(laps)[-test_laps:]
    if len(laps) > test_laps:
        logger.info(f"Using laps {len(laps) - test_laps + 1}-{len(laps)} of {len(laps)} as test laps")
    return selected


def lap_samples(df: pd.DataFrame, lap: LapMarker) -> pd.DataFrame:
    """Rows whose timestamp falls within [start_time, end_time], inclusive."""
    ts = df[COL_TIMESTAMP]
    mask = (ts >= pd.Timestamp(lap.start_time)) & (ts <= pd.Timestamp(lap.end_time))
    return df.loc[mask]


def samples_in_laps(df: pd.DataFrame, laps: Sequence[LapMarker]) -> pd.DataFrame:
    """Rows inside any of the given laps, each row once even where laps overlap."""
    ts = df[COL_TIMESTAMP]
    mask = pd.Series(False, index=df.index)
    for lap in laps:
        mask |= (ts >= pd.Timestamp(lap.start_time)) & (ts <= pd.Timestamp(lap.end_time))
    return df.loc[mask]


def build_mile(df: pd.DataFrame, lap: LapMarker, mile_index: int, file_start: datetime) -> Mile:
    """Per-lap aggregates. Averages are None when the lap has no readings."""
    block = lap_samples(df, lap)
    hr_avg = safe_mean(block[COL_HR]) if COL_HR in block.columns else None
    cadence_avg = safe_mean(block[COL_CADENCE]) if COL_CADENCE in block.columns else None
    if block.empty:
        logger.warning(f"Mile {mile_index}: no samples between lap start and end")

    split_sec = lap.duration_sec
    start_sec = elapsed_seconds(lap.start_time, file_start)
    end_sec = elapsed_seconds(lap.end_time, file_start)
    return Mile(
        mile_index=mile_index,
        start_ts=lap.start_time,
        end_ts=lap.end_time,
        elapsed_start_sec=start_sec,
        elapsed_end_sec=end_sec,
        elapsed_start_mmss=format_mmss(start_sec),
        elapsed_end_mmss=format_mmss(end_sec),
        split_time_sec=split_sec,
        split_time_mmss=format_mmss(split_sec),
        hr_avg=hr_avg,
        cadence_avg=cadence_avg,
        sample_count=int(len(block)),
    )


def segment_laps(
    df: pd.DataFrame,
    laps: Sequence[LapMarker],
    file_start: datetime,
    test_laps: int = 3,
) -> List[Mile]:
    """
    Build the test miles from lap markers.

    Args:
        df: Record frame (see signals.preprocessing.records_to_frame)
        laps: All lap markers of the file, in file order
        file_start: Timestamp of the first record
        test_laps: Number of trailing laps forming the test

    Returns:
        Miles in chronological order, mile_index starting at 1
    """
    return [
        build_mile(df, lap, i + 1, file_start)
        for i, lap in enumerate(select_test_laps(laps, test_laps))
    ]
