"""
Steady-State Window Search (bike protocol).

Finds the earliest anchor where HR has been inside target_hr ± band_bpm
(inclusive) with power >= min_power_w for stable_seconds consecutive
samples, and whose following test window is a legitimate effort:
- no run of stop_grace_s samples with power < stop_power_w
- at least min_in_band_pct of the samples with HR in band

The search is an explicit state machine driven by a single forward index:

    SEARCHING -> CANDIDATE_STABLE -> VALIDATING_WINDOW -> ACCEPTED
                                                      \\-> REJECTED(resume_at) -> SEARCHING

A rejected anchor resumes the search at anchor + 1 without moving the scan
index back: the samples after the rejected anchor already qualified, so the
stable-run counter is carried over. Window checks are O(1) lookups into
prefix sums, which keeps the whole search linear in the stream length.

Samples are assumed to be 1 Hz: durations are counted in samples.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
import logging

import numpy as np
import pandas as pd

from submax.domain.errors import NoValidWindowFound
from submax.domain.protocol import BikeProtocolParameters
from .common import COL_HR, COL_POWER, run_lengths

logger = logging.getLogger("SubmaxLab.WindowSearch")


class SearchState(str, Enum):
    SEARCHING = "searching"
    CANDIDATE_STABLE = "candidate_stable"
    VALIDATING_WINDOW = "validating_window"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXHAUSTED = "exhausted"


class RejectionReason(str, Enum):
    STOPPED_TOO_LONG = "stopped_too_long"
    LOW_IN_BAND_PCT = "low_in_band_pct"


@dataclass(frozen=True)
class RejectedWindow:
    """A candidate anchor whose window failed validation."""
    anchor: int
    reason: RejectionReason
    in_band_pct: float
    resume_at: int


@dataclass(frozen=True)
class WindowSearchResult:
    """Accepted test window: samples [start, end) of the record stream."""
    start: int
    end: int
    in_band_pct: float
    longest_stop_s: int
    rejected: Tuple[RejectedWindow, ...] = ()

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class _WindowCheck:
    in_band_pct: float
    stopped_too_long: bool

    def reason(self, min_in_band_pct: float) -> Optional[RejectionReason]:
        if self.stopped_too_long:
            return RejectionReason.STOPPED_TOO_LONG
        if self.in_band_pct < min_in_band_pct:
            return RejectionReason.LOW_IN_BAND_PCT
        return None


def in_band_mask(hr: np.ndarray, params: BikeProtocolParameters) -> np.ndarray:
    """HR inside the band, bounds inclusive. Missing HR is not in band."""
    hr = np.asarray(hr, dtype=float)
    with np.errstate(invalid='ignore'):
        return (hr >= params.hr_low) & (hr <= params.hr_high)


def pedaling_mask(power: np.ndarray, params: BikeProtocolParameters) -> np.ndarray:
    power = np.asarray(power, dtype=float)
    with np.errstate(invalid='ignore'):
        return power >= params.min_power_w


def stopped_mask(power: np.ndarray, params: BikeProtocolParameters) -> np.ndarray:
    """Power below stop_power_w. A power dropout counts as stopped."""
    power = np.nan_to_num(np.asarray(power, dtype=float), nan=0.0)
    return power < params.stop_power_w


class _WindowValidator:
    """O(1) window checks backed by prefix sums over the whole stream."""

    def __init__(self, hr: np.ndarray, power: np.ndarray, params: BikeProtocolParameters):
        self.params = params
        self.window = params.window_samples
        in_band = in_band_mask(hr, params)
        stop_runs = run_lengths(stopped_mask(power, params))
        self._stop_runs = stop_runs
        self._in_band_prefix = np.concatenate(([0], np.cumsum(in_band, dtype=np.int64)))
        # index j closes a stop sub-run of grace samples iff stop_runs[j] >= grace
        violation = stop_runs >= params.stop_grace_s
        self._violation_prefix = np.concatenate(([0], np.cumsum(violation, dtype=np.int64)))

    def fits(self, anchor: int) -> bool:
        return anchor + self.window <= len(self._stop_runs)

    def check(self, anchor: int) -> _WindowCheck:
        end = anchor + self.window
        in_band = int(self._in_band_prefix[end] - self._in_band_prefix[anchor])
        # a sub-run fully inside [anchor, end) can only close at anchor + grace - 1 or later
        first_close = min(anchor + self.params.stop_grace_s - 1, end)
        violations = int(self._violation_prefix[end] - self._violation_prefix[first_close])
        return _WindowCheck(
            in_band_pct=in_band * 100.0 / self.window,
            stopped_too_long=violations > 0,
        )

    def longest_stop(self, start: int, end: int) -> int:
        """Longest stop run counted inside [start, end) only."""
        runs = self._stop_runs[start:end]
        if runs.size == 0:
            return 0
        clipped = np.minimum(runs, np.arange(1, runs.size + 1))
        return int(clipped.max())


def find_test_window(df: pd.DataFrame, params: BikeProtocolParameters) -> WindowSearchResult:
    """
    Locate the accepted test window in a record frame.

    Args:
        df: Record frame with 'heartrate' and 'watts' columns (1 Hz rows)
        params: Bike protocol parameters

    Returns:
        WindowSearchResult with sample bounds and window statistics

    Raises:
        NoValidWindowFound: no anchor produced a window that validates
    """
    hr = df[COL_HR].to_numpy(dtype=float) if COL_HR in df.columns else np.full(len(df), np.nan)
    power = df[COL_POWER].to_numpy(dtype=float) if COL_POWER in df.columns else np.full(len(df), np.nan)

    qualifies = in_band_mask(hr, params) & pedaling_mask(power, params)
    validator = _WindowValidator(hr, power, params)
    stable = params.stable_seconds
    n = len(qualifies)

    state = SearchState.SEARCHING
    i = 0
    run = 0
    anchor = -1
    check: Optional[_WindowCheck] = None
    rejected: List[RejectedWindow] = []

    while state not in (SearchState.ACCEPTED, SearchState.EXHAUSTED):
        if state is SearchState.SEARCHING:
            if i >= n:
                state = SearchState.EXHAUSTED
                continue
            run = run + 1 if qualifies[i] else 0
            if run >= stable:
                anchor = i - stable + 1
                state = SearchState.CANDIDATE_STABLE
            i += 1

        elif state is SearchState.CANDIDATE_STABLE:
            # later anchors cannot fit either
            state = SearchState.VALIDATING_WINDOW if validator.fits(anchor) else SearchState.EXHAUSTED

        elif state is SearchState.VALIDATING_WINDOW:
            check = validator.check(anchor)
            if check.reason(params.min_in_band_pct) is None:
                state = SearchState.ACCEPTED
            else:
                state = SearchState.REJECTED

        elif state is SearchState.REJECTED:
            rejection = RejectedWindow(
                anchor=anchor,
                reason=check.reason(params.min_in_band_pct),
                in_band_pct=round(check.in_band_pct, 2),
                resume_at=anchor + 1,
            )
            rejected.append(rejection)
            logger.debug(
                f"Window at {anchor} rejected ({rejection.reason.value}, "
                f"in band {check.in_band_pct:.1f}%), resuming at {rejection.resume_at}"
            )
            # samples resume_at .. i-1 already qualified
            run = stable - 1
            state = SearchState.SEARCHING

    if state is SearchState.EXHAUSTED:
        logger.warning(f"No valid window after {len(rejected)} rejected candidates ({n} samples)")
        raise NoValidWindowFound(params.test_minutes, rejected)

    end = anchor + params.window_samples
    logger.info(
        f"Accepted window [{anchor}, {end}) in band {check.in_band_pct:.1f}% "
        f"after {len(rejected)} rejected candidates"
    )
    return WindowSearchResult(
        start=anchor,
        end=end,
        in_band_pct=check.in_band_pct,
        longest_stop_s=validator.longest_stop(anchor, end),
        rejected=tuple(rejected),
    )
