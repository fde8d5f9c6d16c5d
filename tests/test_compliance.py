"""Tests for the COMPLIANT / WARNING / NON_COMPLIANT classifier."""
from datetime import timedelta

import numpy as np
import pytest

from models.results import ComplianceLevel, Mile
from signals.preprocessing import records_to_frame
from signals.validation import Severity, ValidationWarning
from submax.calculations.compliance import classify_bike_compliance, classify_run_compliance
from submax.calculations.metrics import build_segments
from submax.domain.protocol import RunProtocolParameters


def _mile(index, hr, file_start, samples=400):
    start = file_start + timedelta(seconds=index * 500)
    return Mile(
        mile_index=index,
        start_ts=start,
        end_ts=start + timedelta(seconds=420),
        elapsed_start_sec=0.0,
        elapsed_end_sec=0.0,
        elapsed_start_mmss="",
        elapsed_end_mmss="",
        split_time_sec=420.0,
        split_time_mmss="07:00",
        hr_avg=hr,
        cadence_avg=170.0,
        sample_count=samples,
    )


class TestBikeCompliance:

    @pytest.fixture
    def window(self, make_records):
        return records_to_frame(make_records(hr=np.full(1800, 150.0), power=np.full(1800, 200.0)))

    @pytest.fixture
    def segments(self, window, file_start):
        return build_segments(window, 0, 600, 3, 10, file_start)

    def test_clean_window(self, window, segments, bike_params):
        result = classify_bike_compliance(window, segments, 100.0, 0, bike_params)
        assert result.level == ComplianceLevel.COMPLIANT
        assert result.reasons == ()

    def test_in_band_close_to_minimum(self, window, segments, bike_params):
        result = classify_bike_compliance(window, segments, 92.0, 0, bike_params)
        assert result.level == ComplianceLevel.WARNING
        assert "92.0%" in result.reasons[0]

    def test_in_band_below_minimum(self, window, segments, bike_params):
        result = classify_bike_compliance(window, segments, 85.0, 0, bike_params)
        assert result.level == ComplianceLevel.NON_COMPLIANT

    def test_stop_close_to_grace(self, window, segments, bike_params):
        result = classify_bike_compliance(window, segments, 100.0, 20, bike_params)
        assert result.level == ComplianceLevel.WARNING

    def test_stop_over_grace(self, window, segments, bike_params):
        result = classify_bike_compliance(window, segments, 100.0, 25, bike_params)
        assert result.level == ComplianceLevel.NON_COMPLIANT

    def test_hr_absent_for_majority(self, make_records, file_start, bike_params):
        hr = [150.0] * 600 + [None] * 1200
        window = records_to_frame(make_records(hr=hr, power=np.full(1800, 200.0)))
        segments = build_segments(window, 0, 600, 3, 10, file_start)

        result = classify_bike_compliance(window, segments, 100.0, 0, bike_params)

        assert result.level == ComplianceLevel.NON_COMPLIANT
        assert any("Heart rate" in r for r in result.reasons)

    def test_patchy_power_warns(self, make_records, file_start, bike_params):
        power = [200.0] * 1800
        for i in range(0, 1800, 8):
            power[i] = None
        window = records_to_frame(make_records(hr=np.full(1800, 150.0), power=power))
        segments = build_segments(window, 0, 600, 3, 10, file_start)

        result = classify_bike_compliance(window, segments, 100.0, 0, bike_params)

        assert result.level == ComplianceLevel.WARNING
        assert any("Power" in r for r in result.reasons)

    def test_worst_level_wins(self, window, segments, bike_params):
        result = classify_bike_compliance(window, segments, 92.0, 30, bike_params)
        assert result.level == ComplianceLevel.NON_COMPLIANT
        assert len(result.reasons) == 2


class TestRunCompliance:

    @pytest.fixture
    def params(self):
        return RunProtocolParameters()

    def test_clean_run(self, file_start, params):
        miles = [_mile(i, 150.0, file_start) for i in (1, 2, 3)]
        assert classify_run_compliance(miles, 15.0, params).level == ComplianceLevel.COMPLIANT

    def test_uneven_pacing_warns(self, file_start, params):
        miles = [_mile(i, 150.0, file_start) for i in (1, 2, 3)]
        result = classify_run_compliance(miles, 45.0, params)
        assert result.level == ComplianceLevel.WARNING
        assert "pacing" in result.reasons[0]

    def test_one_mile_without_hr_warns(self, file_start, params):
        miles = [_mile(1, None, file_start), _mile(2, 150.0, file_start), _mile(3, 152.0, file_start)]
        assert classify_run_compliance(miles, 5.0, params).level == ComplianceLevel.WARNING

    def test_majority_without_hr(self, file_start, params):
        miles = [_mile(1, None, file_start), _mile(2, None, file_start), _mile(3, 152.0, file_start)]
        assert classify_run_compliance(miles, 5.0, params).level == ComplianceLevel.NON_COMPLIANT

    def test_lap_warnings_are_carried(self, file_start, params):
        miles = [_mile(i, 150.0, file_start) for i in (1, 2, 3)]
        warning = ValidationWarning(code="LAPS_OVERLAP", message="laps overlap", severity=Severity.WARNING)

        result = classify_run_compliance(miles, 5.0, params, [warning])

        assert result.level == ComplianceLevel.WARNING
        assert result.reasons == ("laps overlap",)

    def test_empty_mile_warns(self, file_start, params):
        miles = [_mile(1, 150.0, file_start), _mile(2, 150.0, file_start), _mile(3, 150.0, file_start, samples=0)]
        assert classify_run_compliance(miles, 5.0, params).level == ComplianceLevel.WARNING

    def test_sparse_hr_samples_are_non_compliant(self, file_start, params, make_records):
        miles = [_mile(i, 150.0, file_start) for i in (1, 2, 3)]
        hr = [150.0 if i % 10 == 0 else None for i in range(1200)]
        samples = records_to_frame(make_records(hr=hr))

        result = classify_run_compliance(miles, 5.0, params, test_samples=samples)

        assert result.level == ComplianceLevel.NON_COMPLIANT
        assert any("Heart rate" in r for r in result.reasons)

    def test_patchy_hr_samples_warn(self, file_start, params, make_records):
        miles = [_mile(i, 150.0, file_start) for i in (1, 2, 3)]
        hr = [None if i % 5 == 0 else 150.0 for i in range(1200)]
        samples = records_to_frame(make_records(hr=hr))

        result = classify_run_compliance(miles, 5.0, params, test_samples=samples)

        assert result.level == ComplianceLevel.WARNING
        assert result.reasons == ("Heart rate: 20.0% of samples missing",)
