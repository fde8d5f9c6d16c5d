# Tests configuration for Submax Lab
import pytest
import numpy as np
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.records import Sample, LapMarker
from submax.domain.protocol import BikeProtocolParameters

FILE_START = datetime(2024, 5, 1, 7, 0, 0, tzinfo=timezone.utc)


def _value(arr, i):
    if arr is None:
        return None
    v = arr[i]
    if v is None or (isinstance(v, float) and np.isnan(v)):
        return None
    return float(v)


def build_records(hr, power=None, cadence=None, start=FILE_START, step_s=1):
    """1 Hz samples from parallel arrays (None / NaN = dropout)."""
    return [
        Sample(
            timestamp=start + timedelta(seconds=i * step_s),
            heart_rate=_value(hr, i),
            power=_value(power, i),
            cadence=_value(cadence, i),
        )
        for i in range(len(hr))
    ]


@pytest.fixture
def file_start():
    return FILE_START


@pytest.fixture
def make_records():
    """Factory building a 1 Hz record stream."""
    return build_records


@pytest.fixture
def bike_params():
    """Default protocol around target HR 150 (band 146-154)."""
    return BikeProtocolParameters(target_hr=150)


@pytest.fixture
def steady_bike_records():
    """40 minutes at 152 bpm / 180 W / 90 rpm from second 0."""
    n = 2400
    return build_records(
        hr=np.full(n, 152.0),
        power=np.full(n, 180.0),
        cadence=np.full(n, 90.0),
    )


@pytest.fixture
def make_run():
    """
    Factory for a treadmill run: warm-up laps, then the test laps.

    Args:
        splits: Split time of every lap, in file order [s]
        hr_per_lap: Constant HR of each lap (None = strap dropout)
    """
    def _make(splits, hr_per_lap=None, cadence=170.0):
        hr_per_lap = hr_per_lap or [150.0] * len(splits)
        hr, cad, laps = [], [], []
        t = 0
        for split, lap_hr in zip(splits, hr_per_lap):
            laps.append(LapMarker(
                start_time=FILE_START + timedelta(seconds=t),
                end_time=FILE_START + timedelta(seconds=t + split),
                total_timer_time=float(split),
            ))
            # lap boundaries are inclusive: each lap owns split + 1 samples
            hr.extend([lap_hr] * (split + 1))
            cad.extend([cadence] * (split + 1))
            t += split + 1
        return build_records(hr=hr, cadence=cad), laps
    return _make
