"""
Validation errors raised by the submax analyzers.

All of them mean the recording does not satisfy the test protocol. They are
recoverable by the caller: the athlete re-records and re-submits the test.
"""
from typing import Sequence, Tuple, Any


class SubmaxValidationError(ValueError):
    """Base class for protocol validation failures."""


class EmptyRecordStream(SubmaxValidationError):
    def __init__(self, message: str = "No record data found in the activity file."):
        super().__init__(message)


class UnsortedRecordStream(SubmaxValidationError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(
            f"Record timestamps go backwards at sample {index}; "
            "the activity file is corrupt or was merged out of order."
        )


class InsufficientLapMarkers(SubmaxValidationError):
    def __init__(self, found: int, required: int = 3):
        self.found = found
        self.required = required
        super().__init__(
            f"Not enough lap markers found ({found}). "
            f"Need lap presses for the {required} test miles."
        )


class NoValidWindowFound(SubmaxValidationError):
    """Bike search exhausted the stream without a window that validates."""

    def __init__(self, test_minutes: int, rejected: Sequence[Any] = ()):
        self.test_minutes = test_minutes
        self.rejected: Tuple[Any, ...] = tuple(rejected)
        super().__init__(
            f"No valid HR-first {test_minutes}-min window found "
            f"({len(self.rejected)} candidate windows rejected). "
            "Hold the target heart rate for the full test without stopping."
        )
