"""
Signal Preprocessing Module

Adapts an already-decoded activity (FIT decoder output) to the analyzer:
- Decoded payload -> Sample / LapMarker tuples
- Sample tuple -> pandas DataFrame used by the calculations

Missing readings stay missing (NaN in the frame); nothing is interpolated.
NO STREAMLIT OR UI DEPENDENCIES ALLOWED.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from models.records import Sample, LapMarker
from submax.calculations.common import (
    COL_TIMESTAMP,
    COL_TIME,
    COL_HR,
    COL_POWER,
    COL_CADENCE,
    COL_DISTANCE,
    COL_SPEED,
)

logger = logging.getLogger("SubmaxLab.Preprocessing")

FRAME_COLUMNS = [COL_TIMESTAMP, COL_TIME, COL_HR, COL_POWER, COL_CADENCE, COL_DISTANCE, COL_SPEED]


def to_datetime(value: Any) -> datetime:
    """
    Coerce a decoded timestamp to a UTC-aware datetime.

    Accepts datetime, pandas Timestamp, ISO-8601 strings and epoch seconds.
    Values without an offset are taken as UTC, so records and laps decoded
    in different formats stay comparable.
    """
    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    if not isinstance(value, (datetime, str)):
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    ts = pd.Timestamp(value)
    ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    return ts.to_pydatetime()


def _reading(row: Mapping[str, Any], key: str) -> Optional[float]:
    value = row.get(key)
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return None if np.isnan(value) else value


def parse_records(rows: Iterable[Mapping[str, Any]]) -> Tuple[Sample, ...]:
    """Decoded record dicts -> Samples. Rows without a timestamp are skipped."""
    samples: List[Sample] = []
    skipped = 0
    for row in rows:
        if row.get("timestamp") is None:
            skipped += 1
            continue
        samples.append(Sample(
            timestamp=to_datetime(row["timestamp"]),
            heart_rate=_reading(row, "heart_rate"),
            power=_reading(row, "power"),
            cadence=_reading(row, "cadence"),
            distance=_reading(row, "distance"),
            speed=_reading(row, "speed"),
        ))
    if skipped:
        logger.warning(f"Skipped {skipped} records without timestamp")
    return tuple(samples)


def parse_laps(rows: Iterable[Mapping[str, Any]]) -> Tuple[LapMarker, ...]:
    """
    Decoded lap dicts -> LapMarkers.

    FIT lap messages carry the lap end in 'timestamp'; 'end_time' wins when
    both are present.
    """
    laps: List[LapMarker] = []
    for row in rows:
        end = row.get("end_time", row.get("timestamp"))
        if row.get("start_time") is None or end is None:
            logger.warning("Skipping lap without start/end time")
            continue
        laps.append(LapMarker(
            start_time=to_datetime(row["start_time"]),
            end_time=to_datetime(end),
            total_timer_time=_reading(row, "total_timer_time"),
        ))
    return tuple(laps)


def parse_decoded_activity(payload: Mapping[str, Any]) -> Tuple[Tuple[Sample, ...], Tuple[LapMarker, ...]]:
    """Split a decoded activity mapping into (records, laps)."""
    records = parse_records(payload.get("records") or [])
    laps = parse_laps(payload.get("laps") or [])
    logger.debug(f"Decoded activity: {len(records)} records, {len(laps)} laps")
    return records, laps


def records_to_frame(records: Sequence[Sample]) -> pd.DataFrame:
    """
    Build the analysis DataFrame from a record stream.

    Columns: timestamp, time (elapsed seconds from the first sample),
    heartrate, watts, cadence, distance, speed. Row i is records[i].
    """
    if not records:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    def _column(attr: str) -> np.ndarray:
        return np.array(
            [np.nan if getattr(r, attr) is None else getattr(r, attr) for r in records],
            dtype=float,
        )

    file_start = records[0].timestamp
    df = pd.DataFrame({
        COL_TIMESTAMP: [r.timestamp for r in records],
        COL_TIME: [(r.timestamp - file_start).total_seconds() for r in records],
        COL_HR: _column("heart_rate"),
        COL_POWER: _column("power"),
        COL_CADENCE: _column("cadence"),
        COL_DISTANCE: _column("distance"),
        COL_SPEED: _column("speed"),
    })
    return df
