"""
Due-date helpers and human-readable intervals.

Pure functions over ReviewRecords; the caller supplies `now`.
"""

from collections.abc import Iterable
from datetime import datetime
from math import ceil

from vocab_srs.application.utils.numeric import round_half_up
from vocab_srs.application.utils.timestamps import minutes_between
from vocab_srs.domain.constants import (
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    MINUTES_PER_MONTH,
    MINUTES_PER_WEEK,
    READY_NOW,
)
from vocab_srs.domain.srs.models import ReviewRecord


def _one_decimal(value: float) -> str:
    rounded = round_half_up(value * 10) / 10
    return str(int(rounded)) if rounded.is_integer() else str(rounded)


def format_interval(minutes: int) -> str:
    """
    Format an interval in minutes for display.

    Examples: "45 minutes", "2.5 hours", "3 days", "1.4 weeks", "2 months".
    A month is counted as 30 days.
    """
    if minutes < MINUTES_PER_HOUR:
        return f"{minutes} minutes"
    if minutes < MINUTES_PER_DAY:
        return f"{_one_decimal(minutes / MINUTES_PER_HOUR)} hours"
    if minutes < MINUTES_PER_WEEK:
        return f"{_one_decimal(minutes / MINUTES_PER_DAY)} days"
    if minutes < MINUTES_PER_MONTH:
        return f"{_one_decimal(minutes / MINUTES_PER_WEEK)} weeks"
    return f"{_one_decimal(minutes / MINUTES_PER_MONTH)} months"


def is_due(record: ReviewRecord | None, now: datetime) -> bool:
    """A card is due once `next_review` is at or before `now`. Unscheduled cards are due."""
    if record is None or record.next_review is None:
        return True
    return now >= record.next_review


def time_until_next_review(record: ReviewRecord | None, now: datetime) -> str:
    if is_due(record, now):
        return READY_NOW
    minutes = ceil(minutes_between(now, record.next_review))
    return format_interval(minutes)


def due_records(
    records: Iterable[tuple[str, ReviewRecord | None]],
    now: datetime,
) -> list[tuple[str, ReviewRecord | None]]:
    """
    Select the due cards and order them earliest-due first.

    Cards that were never scheduled sort ahead of everything else.
    Ties keep their input order.
    """
    due = [(card_id, record) for card_id, record in records if is_due(record, now)]

    def sort_key(item: tuple[str, ReviewRecord | None]) -> tuple[int, float]:
        record = item[1]
        if record is None or record.next_review is None:
            return (0, 0.0)
        return (1, record.next_review.timestamp())

    return sorted(due, key=sort_key)
