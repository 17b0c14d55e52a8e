"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from vocab_srs.domain.constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_REVIEW_HOUR,
    DEFAULT_REVIEW_MINUTE,
    PASS_THRESHOLD,
)

IntervalUnit = Literal["days", "minutes"]
DAYS: IntervalUnit = "days"
MINUTES: IntervalUnit = "minutes"

Difficulty = Literal["easy", "medium", "hard"]


def is_pass(quality: float) -> bool:
    """Quality >= 3 is a successful recall; anything lower is a lapse."""
    return quality >= PASS_THRESHOLD


@dataclass(frozen=True)
class ReviewEntry:
    """
    One historical data point in a card's review history.

    Attributes:
        quality: Rating supplied for this review (0-5).
        response_time_ms: How long the learner took to answer, if measured.
        interval_before: Interval the card had when it was reviewed.
        interval_after: Interval assigned by this review.
        ease_factor: Ease factor resulting from this review.
        time_since_last_review: Minutes elapsed since the previous review.
        reviewed_at: Instant of the review.
        interval_unit: Unit of both interval fields.
    """

    quality: int
    response_time_ms: float | None
    interval_before: int
    interval_after: int
    ease_factor: float
    time_since_last_review: float
    reviewed_at: datetime
    interval_unit: IntervalUnit = DAYS


@dataclass(frozen=True)
class ReviewRecord:
    """
    Scheduling state attached to a single card.

    A record is never mutated; every review produces a complete replacement.
    `interval` is measured in `interval_unit` (days for the basic algorithm,
    minutes for the adaptive one).
    """

    repetitions: int
    interval: int
    ease_factor: float
    next_review: datetime
    last_reviewed_at: datetime | None = None
    total_reviews: int = 0
    review_history: tuple[ReviewEntry, ...] = ()
    interval_unit: IntervalUnit = DAYS

    @classmethod
    def new(cls, now: datetime, interval_unit: IntervalUnit = DAYS) -> "ReviewRecord":
        """Create the record for a freshly added card: due immediately."""
        return cls(
            repetitions=0,
            interval=1,
            ease_factor=DEFAULT_EASE_FACTOR,
            next_review=now,
            interval_unit=interval_unit,
        )

    @property
    def is_new(self) -> bool:
        return self.last_reviewed_at is None


@dataclass(frozen=True)
class PreferredTime:
    """A time of day together with the learner's accuracy at that time."""

    hour: int
    minute: int
    accuracy: float


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class UserStats:
    """
    Aggregate performance statistics for one learner.

    Supplied by an external collaborator; only the adaptive algorithm and the
    session helpers read it.
    """

    accuracy: float | None = None
    category_accuracy: Mapping[str, float] = field(default_factory=dict)
    streak: int = 0
    preferred_times: tuple[PreferredTime, ...] = ()
    morning_accuracy: float | None = None
    evening_accuracy: float | None = None

    @classmethod
    def from_mapping(cls, data: "Mapping[str, Any] | UserStats | None") -> "UserStats":
        """
        Build UserStats from a raw mapping (snake_case or camelCase keys).

        Raises:
            TypeError: If a field has the wrong shape, e.g. `categoryAccuracy`
                is not a mapping.
        """
        if data is None:
            return cls()
        if isinstance(data, UserStats):
            return data
        if not isinstance(data, Mapping):
            raise TypeError(f"user stats must be a mapping, got {type(data).__name__}")

        category_accuracy = _pick(data, "category_accuracy", "categoryAccuracy", default={})
        if category_accuracy is None:
            category_accuracy = {}
        if not isinstance(category_accuracy, Mapping):
            raise TypeError(
                "category_accuracy must be a mapping of category to accuracy, "
                f"got {type(category_accuracy).__name__}"
            )

        raw_times = _pick(data, "preferred_times", "preferredTimes", default=()) or ()
        if isinstance(raw_times, (str, bytes, Mapping)):
            raise TypeError("preferred_times must be a sequence of {hour, minute, accuracy}")
        preferred_times = tuple(
            t
            if isinstance(t, PreferredTime)
            else PreferredTime(
                hour=int(t["hour"]),
                minute=int(t.get("minute", 0)),
                accuracy=float(t.get("accuracy", 0.0)),
            )
            for t in raw_times
        )

        accuracy = _pick(data, "accuracy")
        morning = _pick(data, "morning_accuracy", "morningAccuracy")
        evening = _pick(data, "evening_accuracy", "eveningAccuracy")

        return cls(
            accuracy=float(accuracy) if accuracy is not None else None,
            category_accuracy={
                str(k): float(v) for k, v in category_accuracy.items() if v is not None
            },
            streak=int(_pick(data, "streak", default=0) or 0),
            preferred_times=preferred_times,
            morning_accuracy=float(morning) if morning is not None else None,
            evening_accuracy=float(evening) if evening is not None else None,
        )


@dataclass(frozen=True)
class CardContext:
    """
    Per-card information the adaptive algorithm needs beyond the record.

    `review_history`, when provided, replaces the record's own history for
    the consistency bonus.
    """

    category: str | None = None
    difficulty: str = "medium"
    review_history: tuple[ReviewEntry, ...] | None = None


@dataclass(frozen=True)
class OptimalReviewTime:
    hour: int = DEFAULT_REVIEW_HOUR
    minute: int = DEFAULT_REVIEW_MINUTE


@dataclass(frozen=True)
class ScheduleMetadata:
    """Diagnostics produced by the adaptive algorithm for one review."""

    adaptive_factor: float
    forgetting_curve_adjustment: float
    response_time_bonus: float
    interval_minutes: int
    interval_hours: float
    interval_days: float
    next_review_human: str


@dataclass(frozen=True)
class LearningInsight:
    """An advisory message derived from a learner's stats."""

    type: Literal["timing", "difficulty", "motivation"]
    message: str
    priority: Literal["high", "medium", "low"]
