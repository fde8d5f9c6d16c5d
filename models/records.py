"""
Decoded record stream types.

Produced by an external FIT decoder and borrowed read-only by the analyzers.
Every sensor reading is optional: dropouts are legal.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Sample:
    """One reading at a point in time (1 Hz in practice)."""
    timestamp: datetime
    heart_rate: Optional[float] = None
    power: Optional[float] = None
    cadence: Optional[float] = None
    distance: Optional[float] = None
    speed: Optional[float] = None


@dataclass(frozen=True)
class LapMarker:
    """A lap press recorded by the device."""
    start_time: datetime
    end_time: datetime
    total_timer_time: Optional[float] = None

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Lap end_time ({self.end_time.isoformat()}) must be after "
                f"start_time ({self.start_time.isoformat()})"
            )

    @property
    def duration_sec(self) -> float:
        return (self.end_time - self.start_time).total_seconds()
