"""
Basic scheduler: the SM-2 family algorithm at day granularity.

This is a pure computation module with no I/O.
"""

import logging
from datetime import datetime, timedelta

from vocab_srs.application.utils.numeric import round_half_up
from vocab_srs.application.utils.timestamps import minutes_between, start_of_day
from vocab_srs.domain.constants import HISTORY_LIMIT, MIN_EASE_FACTOR, MINUTES_PER_DAY
from vocab_srs.domain.srs.errors import AlgorithmError
from vocab_srs.domain.srs.models import DAYS, ReviewEntry, ReviewRecord, is_pass
from vocab_srs.domain.srs.result import Err, Ok, ScheduleResult

logger = logging.getLogger(__name__)

ALGORITHM = "basic"


def sm2_ease_delta(quality: float) -> float:
    """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))."""
    miss = 5 - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


def interval_in_days(record: ReviewRecord) -> int:
    if record.interval_unit == DAYS:
        return record.interval
    return max(1, round_half_up(record.interval / MINUTES_PER_DAY))


def basic_update(
    record: ReviewRecord,
    quality: int,
    now: datetime,
    history_limit: int = HISTORY_LIMIT,
) -> ReviewRecord:
    """
    Apply one review to `record` using SM-2.

    - Fail (quality < 3): repetitions reset to 0 and the interval to 1 day.
      The ease factor is left unchanged.
    - Pass: the interval goes 1 day, then 6 days, then
      round(interval * ease_factor). The ease factor moves by the SM-2 delta
      with a floor of 1.3 and no ceiling.

    The card becomes due `interval` days after the start of today; the time of
    day is not adjusted.
    """
    interval = interval_in_days(record)
    repetitions = record.repetitions
    ease_factor = record.ease_factor

    if is_pass(quality):
        if repetitions == 0:
            interval = 1
        elif repetitions == 1:
            interval = 6
        else:
            interval = round_half_up(interval * ease_factor)
        repetitions += 1
        ease_factor = max(MIN_EASE_FACTOR, ease_factor + sm2_ease_delta(quality))
    else:
        repetitions = 0
        interval = 1

    since_last = (
        minutes_between(record.last_reviewed_at, now) if record.last_reviewed_at else 0.0
    )
    entry = ReviewEntry(
        quality=quality,
        response_time_ms=None,
        interval_before=interval_in_days(record),
        interval_after=interval,
        ease_factor=ease_factor,
        time_since_last_review=since_last,
        reviewed_at=now,
        interval_unit=DAYS,
    )

    return ReviewRecord(
        repetitions=repetitions,
        interval=interval,
        ease_factor=ease_factor,
        next_review=start_of_day(now) + timedelta(days=interval),
        last_reviewed_at=now,
        total_reviews=record.total_reviews + 1,
        review_history=(*record.review_history, entry)[-history_limit:],
        interval_unit=DAYS,
    )


def schedule_basic(
    record: ReviewRecord,
    quality: int,
    now: datetime,
    history_limit: int = HISTORY_LIMIT,
) -> ScheduleResult:
    """Run `basic_update`, reporting failure as an `Err` instead of raising."""
    try:
        return Ok(basic_update(record, quality, now, history_limit))
    except Exception as e:
        logger.debug(f"Basic scheduler failed: {e}", exc_info=True)
        return Err(AlgorithmError(ALGORITHM, str(e)))
