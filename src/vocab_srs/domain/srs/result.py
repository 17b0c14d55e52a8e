"""
Explicit algorithm outcomes.

Algorithms return `Ok` or `Err` instead of raising, so the dispatch wrapper
can branch on failure and substitute the basic algorithm.
"""

from dataclasses import dataclass

from .errors import AlgorithmError
from .models import ReviewRecord, ScheduleMetadata


@dataclass(frozen=True)
class Ok:
    record: ReviewRecord
    metadata: ScheduleMetadata | None = None


@dataclass(frozen=True)
class Err:
    error: AlgorithmError


ScheduleResult = Ok | Err
