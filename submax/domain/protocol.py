"""
Submax Protocol Domain Module.

Defines the two supported test protocols and their parameters.
Every analysis call receives one immutable parameter object; the defaults
come from Config and are not user-facing settings.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from submax.config import Config


class Sport(str, Enum):
    """Sport / mode selected by the caller. No auto-detection."""
    BIKE = "bike"
    RUN = "run"

    @classmethod
    def parse(cls, value) -> "Sport":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported submax mode: {value!r} (expected 'bike' or 'run')") from None


class TestType(str, Enum):
    """Identifier of the protocol a result was produced by."""
    __test__ = False

    BIKE_HR_SUBMAX = "bike_hr_submax_30min_3x10"
    TREADMILL_RUN_LAPS = "treadmill_run_3mi_lap"


def target_hr_for_age(age: int, sport) -> int:
    """Protocol target heart rate: 170 - age for bike, 180 - age for run."""
    if age <= 0:
        raise ValueError(f"Age must be positive, got {age}")
    sport = Sport.parse(sport)
    base = Config.BIKE_TARGET_HR_BASE if sport is Sport.BIKE else Config.RUN_TARGET_HR_BASE
    return base - age


@dataclass(frozen=True)
class BikeProtocolParameters:
    """
    Parameters of the HR-first steady bike effort.

    Window search:
    - target_hr ± band_bpm (inclusive) with power >= min_power_w for
      stable_seconds consecutive samples anchors a candidate window
    - the window is test_minutes * 60 samples long and is rejected when
      power stays below stop_power_w for stop_grace_s samples in a row, or
      when less than min_in_band_pct of its samples have HR in band

    Compliance:
    - warn_in_band_pct / warn_stop_s are the stricter WARNING pair
    - min/warn_channel_coverage_pct bound HR and power sensor coverage
    """
    target_hr: float
    band_bpm: float = Config.BAND_BPM
    stable_seconds: int = Config.STABLE_SECONDS
    test_minutes: int = Config.TEST_MINUTES
    segment_minutes: int = Config.SEGMENT_MINUTES
    min_power_w: float = Config.MIN_POWER_W
    stop_power_w: float = Config.STOP_POWER_W
    stop_grace_s: int = Config.STOP_GRACE_S
    min_in_band_pct: float = Config.MIN_IN_BAND_PCT
    warn_in_band_pct: float = Config.WARN_IN_BAND_PCT
    warn_stop_s: int = Config.WARN_STOP_S
    min_channel_coverage_pct: float = Config.MIN_CHANNEL_COVERAGE_PCT
    warn_channel_coverage_pct: float = Config.WARN_CHANNEL_COVERAGE_PCT

    def __post_init__(self):
        if self.target_hr <= 0:
            raise ValueError(f"target_hr must be positive, got {self.target_hr}")
        if self.band_bpm < 0:
            raise ValueError(f"band_bpm must not be negative, got {self.band_bpm}")
        for name in ("stable_seconds", "test_minutes", "segment_minutes", "stop_grace_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.test_minutes % self.segment_minutes != 0:
            raise ValueError(
                f"segment_minutes ({self.segment_minutes}) must divide "
                f"test_minutes ({self.test_minutes})"
            )
        if self.stable_seconds > self.window_samples:
            raise ValueError("stable_seconds cannot exceed the test window")

    @classmethod
    def from_config(cls, target_hr: float) -> "BikeProtocolParameters":
        return cls(target_hr=float(target_hr))

    @property
    def hr_low(self) -> float:
        return self.target_hr - self.band_bpm

    @property
    def hr_high(self) -> float:
        return self.target_hr + self.band_bpm

    @property
    def window_samples(self) -> int:
        return self.test_minutes * 60

    @property
    def segment_samples(self) -> int:
        return self.segment_minutes * 60

    @property
    def segment_count(self) -> int:
        return self.test_minutes // self.segment_minutes


@dataclass(frozen=True)
class RunProtocolParameters:
    """Parameters of the treadmill lap-split run (the last N laps are the test)."""
    test_laps: int = Config.RUN_TEST_LAPS
    target_hr: Optional[float] = None
    min_channel_coverage_pct: float = Config.MIN_CHANNEL_COVERAGE_PCT
    warn_channel_coverage_pct: float = Config.WARN_CHANNEL_COVERAGE_PCT
    warn_split_range_s: float = Config.WARN_SPLIT_RANGE_S

    def __post_init__(self):
        if self.test_laps < 2:
            raise ValueError(f"test_laps must be at least 2, got {self.test_laps}")

    @classmethod
    def from_config(cls, target_hr: Optional[float] = None) -> "RunProtocolParameters":
        return cls(target_hr=float(target_hr) if target_hr is not None else None)
