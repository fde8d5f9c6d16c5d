"""Tests for the steady-state window search (bike protocol)."""
import pytest
import numpy as np

from signals.preprocessing import records_to_frame
from submax.calculations.window_search import (
    find_test_window,
    RejectionReason,
    WindowSearchResult,
)
from submax.domain.errors import NoValidWindowFound
from submax.domain.protocol import BikeProtocolParameters


def _frame(make_records, hr, power):
    return records_to_frame(make_records(hr=hr, power=power))


class TestAnchorSearch:

    def test_steady_recording_anchors_at_zero(self, steady_bike_records, bike_params):
        """40 min at 152 bpm / 180 W: window = seconds 0-1799."""
        result = find_test_window(records_to_frame(steady_bike_records), bike_params)

        assert isinstance(result, WindowSearchResult)
        assert result.start == 0
        assert result.end == 1800
        assert result.length == 1800
        assert result.in_band_pct == 100.0
        assert result.rejected == ()

    def test_anchor_after_warmup(self, make_records, bike_params):
        hr = np.concatenate([np.full(300, 120.0), np.full(2100, 150.0)])
        power = np.full(2400, 150.0)

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 300

    def test_band_bounds_are_inclusive(self, make_records, bike_params):
        """146 and 154 bpm both count as in band for target 150 ± 4."""
        hr = np.tile([146.0, 154.0], 1000)
        power = np.full(2000, 150.0)

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 0
        assert result.in_band_pct == 100.0

    def test_just_outside_band_never_anchors(self, make_records, bike_params):
        hr = np.full(2400, 154.5)
        power = np.full(2400, 150.0)

        with pytest.raises(NoValidWindowFound) as exc:
            find_test_window(_frame(make_records, hr, power), bike_params)
        assert exc.value.rejected == ()

    def test_low_power_does_not_anchor(self, make_records, bike_params):
        """In band but below min_power_w (soft-pedalling) is not stable."""
        hr = np.full(2400, 150.0)
        power = np.concatenate([np.full(200, 25.0), np.full(2200, 150.0)])

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 200

    def test_missing_hr_breaks_stable_run(self, make_records, bike_params):
        hr = [150.0] * 2400
        hr[10] = None
        power = np.full(2400, 150.0)

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 11

    def test_missing_power_breaks_stable_run(self, make_records, bike_params):
        power = [150.0] * 2400
        power[30] = None
        hr = np.full(2400, 150.0)

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 31


class TestWindowValidation:

    def test_window_fits_exactly(self, make_records, bike_params):
        result = find_test_window(
            _frame(make_records, np.full(1800, 150.0), np.full(1800, 150.0)), bike_params
        )
        assert (result.start, result.end) == (0, 1800)

    def test_stream_too_short(self, make_records, bike_params):
        with pytest.raises(NoValidWindowFound) as exc:
            find_test_window(
                _frame(make_records, np.full(1000, 150.0), np.full(1000, 150.0)), bike_params
            )
        assert exc.value.rejected == ()
        assert "30-min" in str(exc.value)

    def test_stop_too_long_rejects_and_fails(self, make_records, bike_params):
        """30 s stopped at minute 12 (grace 25 s) with only 40 min recorded."""
        hr = np.full(2400, 152.0)
        power = np.full(2400, 180.0)
        power[720:750] = 5.0

        with pytest.raises(NoValidWindowFound) as exc:
            find_test_window(_frame(make_records, hr, power), bike_params)

        rejected = exc.value.rejected
        # only anchors 0..600 fit a 30-min window, and each of them contains the stop
        assert len(rejected) == 601
        assert rejected[-1].anchor == 600
        assert all(r.reason == RejectionReason.STOPPED_TOO_LONG for r in rejected)

    def test_stop_too_long_search_continues(self, make_records, bike_params):
        hr = np.full(3000, 152.0)
        power = np.full(3000, 180.0)
        power[720:750] = 5.0

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 750
        # anchors 0..660 contain the stop; none in 661..749 has 60 s of pedaling
        assert len(result.rejected) == 661

    def test_missing_power_counts_as_stopped(self, make_records, bike_params):
        hr = np.full(2400, 152.0)
        power = [180.0] * 2400
        for i in range(720, 750):
            power[i] = None

        with pytest.raises(NoValidWindowFound):
            find_test_window(_frame(make_records, hr, power), bike_params)

    def test_short_stop_is_tolerated(self, make_records, bike_params):
        hr = np.full(2400, 152.0)
        power = np.full(2400, 180.0)
        power[720:740] = 0.0

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 0
        assert result.longest_stop_s == 20

    def test_low_in_band_rejects(self, make_records, bike_params):
        hr = np.concatenate([np.full(600, 150.0), np.full(600, 170.0), np.full(2400, 150.0)])
        power = np.full(3600, 180.0)

        result = find_test_window(_frame(make_records, hr, power), bike_params)

        assert result.start == 1200
        assert len(result.rejected) == 541
        assert all(r.reason == RejectionReason.LOW_IN_BAND_PCT for r in result.rejected)
        assert result.rejected[0].in_band_pct == pytest.approx(66.67, abs=0.01)

    def test_in_band_minimum_is_inclusive(self, make_records, bike_params):
        """Exactly 90% in band validates."""
        hr = np.full(2000, 150.0)
        hr[100:280] = 170.0

        result = find_test_window(_frame(make_records, hr, np.full(2000, 180.0)), bike_params)

        assert result.start == 0
        assert result.in_band_pct == pytest.approx(90.0)


class TestResumeState:

    def test_resume_just_past_rejected_anchor(self, make_records, bike_params):
        hr = np.concatenate([np.full(600, 150.0), np.full(600, 170.0), np.full(2400, 150.0)])
        power = np.full(3600, 180.0)

        rejected = find_test_window(_frame(make_records, hr, power), bike_params).rejected

        assert [r.anchor for r in rejected[:3]] == [0, 1, 2]
        assert all(r.resume_at == r.anchor + 1 for r in rejected)

    def test_earliest_validating_anchor_wins(self, make_records, bike_params):
        """190 s out of band inside every window from anchors 0..40."""
        hr = np.full(2400, 150.0)
        hr[100:290] = 170.0

        result = find_test_window(_frame(make_records, hr, np.full(2400, 180.0)), bike_params)

        assert len(result.rejected) == 41
        assert result.start == 290

    def test_deterministic(self, steady_bike_records, bike_params):
        df = records_to_frame(steady_bike_records)
        assert find_test_window(df, bike_params) == find_test_window(df, bike_params)

    def test_custom_stable_seconds(self, make_records):
        params = BikeProtocolParameters(target_hr=150, stable_seconds=10, test_minutes=3, segment_minutes=1)
        hr = np.concatenate([np.full(5, 150.0), [None], np.full(300, 150.0)])

        result = find_test_window(_frame(make_records, hr, np.full(306, 150.0)), params)

        assert result.start == 6
        assert result.end == 186
