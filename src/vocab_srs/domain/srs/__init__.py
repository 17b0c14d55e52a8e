# Domain SRS Package
from .errors import AlgorithmError, RecordFormatError, SrsError
from .models import (
    DAYS,
    MINUTES,
    CardContext,
    LearningInsight,
    OptimalReviewTime,
    PreferredTime,
    ReviewEntry,
    ReviewRecord,
    ScheduleMetadata,
    UserStats,
    is_pass,
)
from .ports import Clock, FixedClock, SystemClock
from .result import Err, Ok, ScheduleResult

__all__ = [
    "DAYS",
    "MINUTES",
    "AlgorithmError",
    "CardContext",
    "Clock",
    "Err",
    "FixedClock",
    "LearningInsight",
    "Ok",
    "OptimalReviewTime",
    "PreferredTime",
    "RecordFormatError",
    "ReviewEntry",
    "ReviewRecord",
    "ScheduleMetadata",
    "ScheduleResult",
    "SrsError",
    "SystemClock",
    "UserStats",
    "is_pass",
]
