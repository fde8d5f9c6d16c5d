"""
Services - analysis entry points and result assembly.
"""

from services.submax_analysis import (
    analyze_bike_submax,
    analyze_treadmill_run,
    analyze_submax,
    analyze_decoded_activity,
)
from services.result_assembler import (
    assemble_bike_result,
    assemble_run_result,
    export_result_json,
)
