"""
Adaptive scheduler: minute-precision SM-2 variant that reads user stats.

On top of SM-2 this models:
1. Per-user skill through an adaptive multiplier (accuracy and streak)
2. Overdue reviews through an exponential forgetting-curve penalty
3. Confidence through response latency
4. Fine-grained early intervals (minutes and hours, not days)

This is a pure computation module with no I/O.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any

from vocab_srs.application.config import SchedulerSettings
from vocab_srs.application.srs.timing import format_interval
from vocab_srs.application.utils.timestamps import add_minutes, minutes_between
from vocab_srs.domain.constants import (
    CONSISTENCY_WINDOW,
    DEFAULT_DIFFICULTY,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MINUTES_PER_DAY,
    QUALITY_BONUS,
    SNAP_THRESHOLD_MINUTES,
)
from vocab_srs.domain.srs.errors import AlgorithmError
from vocab_srs.domain.srs.models import (
    MINUTES,
    CardContext,
    OptimalReviewTime,
    PreferredTime,
    ReviewEntry,
    ReviewRecord,
    ScheduleMetadata,
    UserStats,
    is_pass,
)
from vocab_srs.domain.srs.result import Err, Ok, ScheduleResult

logger = logging.getLogger(__name__)

ALGORITHM = "adaptive"


def calculate_adaptive_factor(
    user_stats: UserStats,
    category: str | None,
    settings: SchedulerSettings,
) -> float:
    """
    Interval multiplier derived from the learner's accuracy and streak.

    Category accuracy is used when known, otherwise overall accuracy.
    Strong performers (> 0.9) get longer intervals plus a streak bonus,
    struggling ones (< 0.7) get shorter intervals.
    """
    overall = (
        user_stats.accuracy if user_stats.accuracy is not None else settings.default_accuracy
    )
    category_accuracy = overall
    if category is not None and user_stats.category_accuracy.get(category) is not None:
        category_accuracy = user_stats.category_accuracy[category]

    streak_bonus = min(settings.streak_bonus_cap, user_stats.streak * settings.streak_step)

    if category_accuracy > settings.high_accuracy_threshold:
        return settings.strong_factor + streak_bonus
    if category_accuracy < settings.low_accuracy_threshold:
        return settings.weak_factor
    return 1.0


def calculate_forgetting_curve(
    time_since_last_review: float,
    scheduled_interval: float,
    ease_factor: float,
) -> float:
    """
    Penalty for overdue reviews.

    1.0 when reviewed on time or early, otherwise exp(-(1/EF) * (ratio - 1))
    where ratio = elapsed / scheduled. Low ease cards decay faster.
    """
    if time_since_last_review <= 0 or scheduled_interval <= 0:
        return 1.0

    overdue_ratio = time_since_last_review / scheduled_interval
    if overdue_ratio <= 1.0:
        return 1.0

    forgetting_rate = 1 / ease_factor
    return math.exp(-forgetting_rate * (overdue_ratio - 1))


def analyze_response_time(
    response_time_ms: float,
    difficulty: str | None,
    expected_times: Mapping[str, int],
) -> float:
    expected = expected_times.get(difficulty or DEFAULT_DIFFICULTY)
    if not expected:
        expected = expected_times[DEFAULT_DIFFICULTY]
    ratio = response_time_ms / expected

    if ratio < 0.5:
        return 1.1  # Very fast
    if ratio < 1.0:
        return 1.05
    if ratio < 2.0:
        return 1.0
    return 0.95  # Slow


def calculate_quality_bonus(quality: int) -> float:
    return QUALITY_BONUS.get(quality, 0.0)


def calculate_consistency_bonus(review_history: Sequence[ReviewEntry]) -> float:
    """Reward a steady run of good answers over the last five reviews."""
    if len(review_history) < CONSISTENCY_WINDOW:
        return 0.0

    recent = review_history[-CONSISTENCY_WINDOW:]
    avg_quality = sum(r.quality for r in recent) / len(recent)

    if avg_quality >= 4.0:
        return 0.05
    if avg_quality >= 3.5:
        return 0.02
    return 0.0


def calculate_optimal_review_time(
    preferred_times: Sequence[PreferredTime],
    default: OptimalReviewTime = OptimalReviewTime(),
) -> OptimalReviewTime:
    """The learner's most accurate time of day; the first one wins ties."""
    if not preferred_times:
        return default
    best = max(preferred_times, key=lambda t: t.accuracy)
    return OptimalReviewTime(hour=best.hour, minute=best.minute)


def interval_in_minutes(record: ReviewRecord) -> int:
    if record.interval_unit == MINUTES:
        return record.interval
    return record.interval * MINUTES_PER_DAY


def _snap_to_review_time(
    next_review: datetime,
    now: datetime,
    review_time: OptimalReviewTime,
) -> datetime:
    snapped = next_review.replace(
        hour=review_time.hour, minute=review_time.minute, second=0, microsecond=0
    )
    if snapped <= now:
        snapped += timedelta(days=1)
    return snapped


def adaptive_update(
    record: ReviewRecord,
    quality: int,
    now: datetime,
    settings: SchedulerSettings,
    response_time_ms: float | None = None,
    user_stats: UserStats | Mapping[str, Any] | None = None,
    context: CardContext | None = None,
) -> tuple[ReviewRecord, ScheduleMetadata]:
    """
    Apply one review to `record` at minute precision.

    Returns the replacement record (interval in minutes) and the diagnostic
    metadata for the computation.

    Raises:
        TypeError: If `user_stats` has an unexpected shape.
    """
    stats = UserStats.from_mapping(user_stats)
    context = context or CardContext()

    time_since_last_review = (
        minutes_between(record.last_reviewed_at, now) if record.last_reviewed_at else 0.0
    )
    previous_interval = interval_in_minutes(record)
    interval = previous_interval
    ease_factor = record.ease_factor
    repetitions = record.repetitions

    adaptive_factor = calculate_adaptive_factor(stats, context.category, settings)
    forgetting_curve_adjustment = calculate_forgetting_curve(
        time_since_last_review, previous_interval, ease_factor
    )
    response_time_bonus = (
        analyze_response_time(response_time_ms, context.difficulty, settings.expected_response_ms)
        if response_time_ms
        else 1.0
    )

    if not is_pass(quality):
        repetitions = 0
        if quality <= 1:
            interval = settings.minimum_interval
        else:
            interval = max(30, math.floor(interval * forgetting_curve_adjustment * 0.3))
        ease_factor = max(MIN_EASE_FACTOR, ease_factor - 0.2)
    else:
        repetitions += 1
        if repetitions == 1:
            # 1-4 hours
            bonus = 4 if quality == 5 else 2 if quality == 4 else 1
            interval = math.ceil(60 * adaptive_factor * bonus)
        elif repetitions == 2:
            # 6-12 hours
            interval = math.ceil(360 * adaptive_factor * (2 if quality == 5 else 1))
        elif repetitions == 3:
            # 1-3 days
            interval = math.ceil(1440 * adaptive_factor * quality / 3)
        else:
            history = (
                context.review_history
                if context.review_history is not None
                else record.review_history
            )
            ease_factor = ease_factor + calculate_quality_bonus(quality)
            ease_factor += calculate_consistency_bonus(history)
            ease_factor = max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, ease_factor))
            interval = math.ceil(interval * ease_factor * adaptive_factor * response_time_bonus)

    interval = max(settings.minimum_interval, interval)
    interval = min(interval, settings.maximum_interval)
    ease_factor = round(ease_factor, 2)

    next_review = add_minutes(now, interval)
    if interval >= SNAP_THRESHOLD_MINUTES:
        review_time = calculate_optimal_review_time(
            stats.preferred_times,
            OptimalReviewTime(settings.default_review_hour, settings.default_review_minute),
        )
        next_review = _snap_to_review_time(next_review, now, review_time)

    entry = ReviewEntry(
        quality=quality,
        response_time_ms=response_time_ms,
        interval_before=previous_interval,
        interval_after=interval,
        ease_factor=ease_factor,
        time_since_last_review=time_since_last_review,
        reviewed_at=now,
        interval_unit=MINUTES,
    )
    updated = ReviewRecord(
        repetitions=repetitions,
        interval=interval,
        ease_factor=ease_factor,
        next_review=next_review,
        last_reviewed_at=now,
        total_reviews=record.total_reviews + 1,
        review_history=(*record.review_history, entry)[-settings.history_limit :],
        interval_unit=MINUTES,
    )
    metadata = ScheduleMetadata(
        adaptive_factor=adaptive_factor,
        forgetting_curve_adjustment=forgetting_curve_adjustment,
        response_time_bonus=response_time_bonus,
        interval_minutes=interval,
        interval_hours=round(interval / 60, 2),
        interval_days=round(interval / MINUTES_PER_DAY, 2),
        next_review_human=format_interval(interval),
    )
    return updated, metadata


def schedule_adaptive(
    record: ReviewRecord,
    quality: int,
    now: datetime,
    settings: SchedulerSettings,
    response_time_ms: float | None = None,
    user_stats: UserStats | Mapping[str, Any] | None = None,
    context: CardContext | None = None,
) -> ScheduleResult:
    """Run `adaptive_update`, reporting failure as an `Err` instead of raising."""
    try:
        updated, metadata = adaptive_update(
            record, quality, now, settings, response_time_ms, user_stats, context
        )
    except Exception as e:
        logger.debug(f"Adaptive scheduler failed: {e}", exc_info=True)
        return Err(AlgorithmError(ALGORITHM, str(e)))
    return Ok(updated, metadata)
