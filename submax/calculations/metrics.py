"""
Segment Metrics & Drift Module.

Bike:
- Per-segment HR / power / cadence averages over the accepted window
- Efficiency = power / HR [W/bpm]; higher = more watts per heartbeat
- Efficiency change last vs first segment [%]: rising = aerobic
  improvement, falling = aerobic drift / fatigue

Run:
- HR drift mile 3 - mile 1 [bpm]
- Split range max - min [s]; the tighter, the more even the pacing

All figures are None when an input is undefined or a denominator is zero.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

import pandas as pd

from models.results import Mile, Segment
from .common import (
    COL_TIMESTAMP,
    COL_HR,
    COL_POWER,
    COL_CADENCE,
    safe_mean,
    safe_ratio,
    safe_difference,
    pct_change,
    format_mmss,
    elapsed_seconds,
)


def _column_mean(df: pd.DataFrame, column: str) -> Optional[float]:
    if column not in df.columns:
        return None
    return safe_mean(df[column])


def calculate_efficiency(power_avg: Optional[float], hr_avg: Optional[float]) -> Optional[float]:
    """Efficiency Factor EF = Power / HR [W/bpm], None if HR is zero or missing."""
    return safe_ratio(power_avg, hr_avg)


def build_segments(
    df: pd.DataFrame,
    start: int,
    segment_samples: int,
    segment_count: int,
    segment_minutes: int,
    file_start: datetime,
) -> List[Segment]:
    """
    Split the accepted window into consecutive fixed-length segments.

    Segment k covers rows [start + k * segment_samples, start + (k + 1) * segment_samples),
    so the segments tile the window with no gaps or overlaps.
    """
    segments = []
    for k in range(segment_count):
        lo = start + k * segment_samples
        hi = lo + segment_samples
        block = df.iloc[lo:hi]
        start_ts = block[COL_TIMESTAMP].iloc[0]
        end_ts = block[COL_TIMESTAMP].iloc[-1]
        start_ts = start_ts.to_pydatetime() if isinstance(start_ts, pd.Timestamp) else start_ts
        end_ts = end_ts.to_pydatetime() if isinstance(end_ts, pd.Timestamp) else end_ts
        start_sec = elapsed_seconds(start_ts, file_start)
        end_sec = elapsed_seconds(end_ts, file_start)

        hr_avg = _column_mean(block, COL_HR)
        power_avg = _column_mean(block, COL_POWER)
        segments.append(Segment(
            segment_index=k + 1,
            label=f"min_{k * segment_minutes}_{(k + 1) * segment_minutes}",
            start_index=lo,
            end_index=hi,
            start_ts=start_ts,
            end_ts=end_ts,
            elapsed_start_sec=start_sec,
            elapsed_end_sec=end_sec,
            elapsed_start_mmss=format_mmss(start_sec),
            elapsed_end_mmss=format_mmss(end_sec),
            hr_avg=hr_avg,
            power_avg=power_avg,
            cadence_avg=_column_mean(block, COL_CADENCE),
            efficiency=calculate_efficiency(power_avg, hr_avg),
        ))
    return segments


@dataclass(frozen=True)
class BikeMetrics:
    eff_change_pct: Optional[float]
    hr_avg: Optional[float]
    power_avg: Optional[float]
    cadence_avg: Optional[float]


def calculate_bike_metrics(window: pd.DataFrame, segments: Sequence[Segment]) -> BikeMetrics:
    """Window averages plus efficiency change of the last segment vs the first."""
    eff_change = None
    if segments:
        eff_change = pct_change(segments[-1].efficiency, segments[0].efficiency)
    return BikeMetrics(
        eff_change_pct=eff_change,
        hr_avg=_column_mean(window, COL_HR),
        power_avg=_column_mean(window, COL_POWER),
        cadence_avg=_column_mean(window, COL_CADENCE),
    )


@dataclass(frozen=True)
class RunMetrics:
    split_range_sec: float
    split_range_mmss: str
    hr_drift: Optional[float]
    hr_avg: Optional[float]
    cadence_avg: Optional[float]


def calculate_run_metrics(miles: Sequence[Mile]) -> RunMetrics:
    """HR drift last mile vs first, split range, and per-mile averages of HR / cadence."""
    splits = [m.split_time_sec for m in miles]
    split_range = max(splits) - min(splits) if splits else 0.0
    hr_drift = safe_difference(miles[-1].hr_avg, miles[0].hr_avg) if miles else None
    return RunMetrics(
        split_range_sec=split_range,
        split_range_mmss=format_mmss(split_range),
        hr_drift=hr_drift,
        hr_avg=safe_mean([m.hr_avg for m in miles if m.hr_avg is not None]),
        cadence_avg=safe_mean([m.cadence_avg for m in miles if m.cadence_avg is not None]),
    )
