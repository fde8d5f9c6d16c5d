"""Tests for protocol parameters and target HR."""
import dataclasses

import pytest

from submax.config import Config
from submax.domain.protocol import (
    BikeProtocolParameters,
    RunProtocolParameters,
    Sport,
    target_hr_for_age,
)


class TestTargetHR:

    def test_bike(self):
        assert target_hr_for_age(40, "bike") == 130

    def test_run(self):
        assert target_hr_for_age(40, Sport.RUN) == 140

    def test_invalid_age(self):
        with pytest.raises(ValueError):
            target_hr_for_age(0, "bike")


class TestBikeProtocolParameters:

    def test_defaults_from_config(self):
        params = BikeProtocolParameters.from_config(150)

        assert params.band_bpm == Config.BAND_BPM
        assert params.window_samples == Config.TEST_MINUTES * 60
        assert params.segment_count == Config.TEST_MINUTES // Config.SEGMENT_MINUTES

    def test_band(self):
        params = BikeProtocolParameters(target_hr=150, band_bpm=4)
        assert (params.hr_low, params.hr_high) == (146, 154)

    def test_immutable(self):
        params = BikeProtocolParameters(target_hr=150)
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.target_hr = 160

    def test_segment_must_divide_test(self):
        with pytest.raises(ValueError):
            BikeProtocolParameters(target_hr=150, test_minutes=30, segment_minutes=7)

    def test_positive_durations(self):
        with pytest.raises(ValueError):
            BikeProtocolParameters(target_hr=150, stable_seconds=0)

    def test_target_hr_required_positive(self):
        with pytest.raises(ValueError):
            BikeProtocolParameters(target_hr=0)


class TestRunProtocolParameters:

    def test_default_three_laps(self):
        assert RunProtocolParameters.from_config().test_laps == 3

    def test_target_hr_optional(self):
        assert RunProtocolParameters.from_config(142).target_hr == 142.0


class TestSport:

    def test_parse(self):
        assert Sport.parse(" Bike ") is Sport.BIKE

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            Sport.parse("swim")
