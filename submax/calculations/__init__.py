"""
Calculations for the submax protocols, grouped by responsibility:
- common.py: optional-safe aggregators, mm:ss formatting, run lengths
- window_search.py: steady-state window search (bike)
- lap_segmenter.py: test lap selection and per-lap aggregates (run)
- metrics.py: segment averages, efficiency and drift figures
- compliance.py: COMPLIANT / WARNING / NON_COMPLIANT classification

Import: from submax.calculations import find_test_window
"""

from .common import (
    safe_mean,
    safe_ratio,
    safe_difference,
    pct_change,
    format_mmss,
    run_lengths,
)

from .window_search import (
    SearchState,
    RejectionReason,
    RejectedWindow,
    WindowSearchResult,
    find_test_window,
)

from .lap_segmenter import (
    select_test_laps,
    samples_in_laps,
    segment_laps,
)

from .metrics import (
    BikeMetrics,
    RunMetrics,
    calculate_efficiency,
    build_segments,
    calculate_bike_metrics,
    calculate_run_metrics,
)

from .compliance import (
    classify_bike_compliance,
    classify_run_compliance,
)
