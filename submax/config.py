import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


class Config:
    # --- Bike Protocol (HR-first 30 min, 3x10) ---
    BAND_BPM = float(os.getenv("SUBMAX_BAND_BPM", "4.0"))
    STABLE_SECONDS = int(os.getenv("SUBMAX_STABLE_SECONDS", "60"))
    TEST_MINUTES = int(os.getenv("SUBMAX_TEST_MINUTES", "30"))
    SEGMENT_MINUTES = int(os.getenv("SUBMAX_SEGMENT_MINUTES", "10"))
    MIN_POWER_W = float(os.getenv("SUBMAX_MIN_POWER_W", "30.0"))
    STOP_POWER_W = float(os.getenv("SUBMAX_STOP_POWER_W", "20.0"))
    STOP_GRACE_S = int(os.getenv("SUBMAX_STOP_GRACE_S", "25"))
    MIN_IN_BAND_PCT = float(os.getenv("SUBMAX_MIN_IN_BAND_PCT", "90.0"))

    # --- Run Protocol (treadmill 3 mile lap splits) ---
    RUN_TEST_LAPS = int(os.getenv("SUBMAX_RUN_TEST_LAPS", "3"))

    # --- Target HR (protocol base minus age) ---
    BIKE_TARGET_HR_BASE = int(os.getenv("SUBMAX_BIKE_TARGET_HR_BASE", "170"))
    RUN_TARGET_HR_BASE = int(os.getenv("SUBMAX_RUN_TARGET_HR_BASE", "180"))

    # --- Compliance ---
    WARN_IN_BAND_PCT = float(os.getenv("SUBMAX_WARN_IN_BAND_PCT", "95.0"))
    WARN_STOP_S = int(os.getenv("SUBMAX_WARN_STOP_S", "15"))
    MIN_CHANNEL_COVERAGE_PCT = float(os.getenv("SUBMAX_MIN_CHANNEL_COVERAGE_PCT", "50.0"))
    WARN_CHANNEL_COVERAGE_PCT = float(os.getenv("SUBMAX_WARN_CHANNEL_COVERAGE_PCT", "90.0"))
    WARN_SPLIT_RANGE_S = float(os.getenv("SUBMAX_WARN_SPLIT_RANGE_S", "30"))
