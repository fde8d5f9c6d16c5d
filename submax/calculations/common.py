"""
Shared helpers for the calculations package.

Every aggregator is total over missing readings: it returns None
("undefined") instead of NaN / inf or raising.
"""
from datetime import datetime
from typing import Iterable, Optional, Union
import math

import numpy as np
import pandas as pd

# Column names of the record frame (see signals.preprocessing.records_to_frame)
COL_TIMESTAMP = "timestamp"
COL_TIME = "time"
COL_HR = "heartrate"
COL_POWER = "watts"
COL_CADENCE = "cadence"
COL_DISTANCE = "distance"
COL_SPEED = "speed"

Number = Union[int, float]


def as_optional(value) -> Optional[float]:
    """Convert a numeric (numpy/pandas scalar too) to float, NaN/inf/None -> None."""
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def safe_mean(values: Union[pd.Series, np.ndarray, Iterable]) -> Optional[float]:
    """Mean over the present readings, None when there are none."""
    series = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=float)
    present = series.dropna()
    if present.empty:
        return None
    return as_optional(present.mean())


def safe_ratio(numerator: Optional[Number], denominator: Optional[Number]) -> Optional[float]:
    numerator = as_optional(numerator)
    denominator = as_optional(denominator)
    if numerator is None or denominator is None or denominator == 0:
        return None
    return as_optional(numerator / denominator)


def safe_difference(later: Optional[Number], earlier: Optional[Number]) -> Optional[float]:
    later = as_optional(later)
    earlier = as_optional(earlier)
    if later is None or earlier is None:
        return None
    return later - earlier


def pct_change(later: Optional[Number], earlier: Optional[Number]) -> Optional[float]:
    """(later - earlier) / earlier * 100, None if undefined."""
    ratio = safe_ratio(safe_difference(later, earlier), earlier)
    return ratio * 100 if ratio is not None else None


def format_mmss(seconds: Optional[Number]) -> str:
    """Format a duration to mm:ss (floored, negative clamps to 00:00).

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., "07:00")
    """
    seconds = as_optional(seconds)
    if seconds is None or seconds <= 0:
        return "00:00"
    whole = int(math.floor(seconds))
    return f"{whole // 60:02d}:{whole % 60:02d}"


def elapsed_seconds(ts: datetime, file_start: datetime) -> float:
    return (ts - file_start).total_seconds()


def run_lengths(mask: np.ndarray) -> np.ndarray:
    """Length of the run of True values ending at each index (0 where False)."""
    mask = np.asarray(mask, dtype=bool)
    if mask.size == 0:
        return np.zeros(0, dtype=int)
    idx = np.arange(mask.size)
    last_false = np.maximum.accumulate(np.where(mask, -1, idx))
    return np.where(mask, idx - last_false, 0)
