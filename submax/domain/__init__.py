"""
Domain layer: protocol definitions and the validation error taxonomy.
NO I/O ALLOWED.
"""
from .errors import (
    SubmaxValidationError,
    EmptyRecordStream,
    UnsortedRecordStream,
    InsufficientLapMarkers,
    NoValidWindowFound,
)
from .protocol import (
    Sport,
    TestType,
    BikeProtocolParameters,
    RunProtocolParameters,
    target_hr_for_age,
)

__all__ = [
    "SubmaxValidationError",
    "EmptyRecordStream",
    "UnsortedRecordStream",
    "InsufficientLapMarkers",
    "NoValidWindowFound",
    "Sport",
    "TestType",
    "BikeProtocolParameters",
    "RunProtocolParameters",
    "target_hr_for_age",
]
