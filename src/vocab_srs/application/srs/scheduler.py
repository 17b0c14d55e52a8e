"""
Scheduler: dispatch and normalization wrapper around the two algorithms.

This is the boundary the rest of the system depends on: `review()` and
`update_card()` never raise. The adaptive algorithm's failure is an explicit
`Err` branch that substitutes the basic algorithm.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from vocab_srs.application.config import SchedulerSettings
from vocab_srs.application.utils.numeric import as_finite
from vocab_srs.domain.srs.errors import AlgorithmError
from vocab_srs.domain.srs.models import (
    DAYS,
    MINUTES,
    CardContext,
    IntervalUnit,
    ReviewEntry,
    ReviewRecord,
    ScheduleMetadata,
    UserStats,
)
from vocab_srs.domain.srs.ports import Clock, SystemClock
from vocab_srs.domain.srs.result import Ok

from . import adaptive, basic
from .normalizer import coerce_history, coerce_quality, normalize_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOptions:
    """
    Per-call options supplied by the collaborator grading a card.

    Attributes:
        use_advanced: Select the adaptive algorithm. None defers to settings.
        category: Card category, keys into the learner's category accuracy.
        difficulty: "easy" | "medium" | "hard"; sets the expected response time.
        response_time_ms: Time the learner took to answer.
        user_stats: Aggregate learner stats (UserStats or a raw mapping).
        review_history: External history used for the consistency bonus.
    """

    use_advanced: bool | None = None
    category: str | None = None
    difficulty: str | None = None
    response_time_ms: float | None = None
    user_stats: UserStats | Mapping[str, Any] | None = None
    review_history: Sequence[ReviewEntry | Mapping[str, Any]] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ReviewOptions":
        """Read options from a raw mapping with snake_case or camelCase keys."""
        if not data:
            return cls()

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data:
                    return data[key]
            return None

        use_advanced = pick("use_advanced", "useAdvanced")
        response_time = pick("response_time_ms", "responseTimeMs", "responseTime")
        return cls(
            use_advanced=use_advanced is True if use_advanced is not None else None,
            category=pick("category"),
            difficulty=pick("difficulty"),
            response_time_ms=(
                None if isinstance(response_time, str) else as_finite(response_time)
            ),
            user_stats=pick("user_stats", "userStats"),
            review_history=pick("review_history", "reviewHistory"),
        )


@dataclass(frozen=True)
class ReviewOutcome:
    """
    Result of one scheduling call.

    Attributes:
        record: The normalized replacement record.
        algorithm: "adaptive" or "basic"; "none" if both failed and the
            input was returned normalized.
        fell_back: True when the requested algorithm was not the one used.
        metadata: Adaptive diagnostics (None for basic).
        error: The failure that caused the fallback, if any.
    """

    record: ReviewRecord
    algorithm: str
    fell_back: bool = False
    metadata: ScheduleMetadata | None = None
    error: AlgorithmError | None = None


class Scheduler:
    """
    Computes the next scheduling state for a card.

    Stateless between calls: safe to share across threads for different
    cards. Callers must serialize updates to the same card themselves.
    """

    def __init__(
        self,
        settings: SchedulerSettings | None = None,
        clock: Clock | None = None,
    ):
        """
        Args:
            settings: Scheduler configuration; defaults are loaded if omitted.
            clock: Time source; the system clock in the configured timezone
                if omitted.
        """
        self.settings = settings or SchedulerSettings()
        self._clock = clock or SystemClock(self.settings.tzinfo)

    def now(self) -> datetime:
        moment = self._clock.now()
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.settings.tzinfo)
        return moment

    def _unit(self, use_advanced: bool) -> IntervalUnit:
        return MINUTES if use_advanced else DAYS

    def new_record(self, use_advanced: bool | None = None) -> ReviewRecord:
        """Default scheduling state for a card that was just added."""
        advanced = self.settings.use_advanced if use_advanced is None else use_advanced
        return ReviewRecord.new(self.now(), self._unit(advanced))

    def review(
        self,
        record: ReviewRecord | Mapping[str, Any] | None,
        quality: Any,
        options: ReviewOptions | Mapping[str, Any] | None = None,
    ) -> ReviewOutcome:
        """
        Apply a graded review and return the full outcome.

        Never raises: malformed input is coerced, adaptive failures fall back
        to the basic algorithm.
        """
        now = self.now()
        opts = self._coerce_options(options)
        advanced = self.settings.use_advanced if opts.use_advanced is None else opts.use_advanced
        limit = self.settings.history_limit

        grade = coerce_quality(quality)
        current = normalize_record(record, now, self._unit(advanced), limit)

        error: AlgorithmError | None = None
        if advanced:
            context = CardContext(
                category=opts.category,
                difficulty=opts.difficulty or "medium",
                review_history=(
                    coerce_history(opts.review_history, now, MINUTES, limit)
                    if opts.review_history is not None
                    else None
                ),
            )
            result = adaptive.schedule_adaptive(
                current,
                grade,
                now,
                self.settings,
                response_time_ms=opts.response_time_ms,
                user_stats=opts.user_stats,
                context=context,
            )
            if isinstance(result, Ok):
                return self._finish(result, adaptive.ALGORITHM, now)
            error = result.error
            logger.warning(f"Adaptive scheduling failed, falling back to basic: {error}")

        result = basic.schedule_basic(current, grade, now, limit)
        if isinstance(result, Ok):
            return self._finish(result, basic.ALGORITHM, now, fell_back=advanced, error=error)

        logger.error(f"Basic scheduling failed, returning record unchanged: {result.error}")
        return ReviewOutcome(
            record=current,
            algorithm="none",
            fell_back=True,
            error=result.error,
        )

    def update_card(
        self,
        record: ReviewRecord | Mapping[str, Any] | None,
        quality: Any,
        options: ReviewOptions | Mapping[str, Any] | None = None,
    ) -> ReviewRecord:
        """Apply a graded review and return only the normalized record."""
        return self.review(record, quality, options).record

    def _finish(
        self,
        result: Ok,
        algorithm: str,
        now: datetime,
        fell_back: bool = False,
        error: AlgorithmError | None = None,
    ) -> ReviewOutcome:
        record = normalize_record(
            result.record, now, result.record.interval_unit, self.settings.history_limit
        )
        return ReviewOutcome(
            record=record,
            algorithm=algorithm,
            fell_back=fell_back,
            metadata=result.metadata,
            error=error,
        )

    def _coerce_options(self, options: Any) -> ReviewOptions:
        if isinstance(options, ReviewOptions):
            return options
        if isinstance(options, Mapping):
            return ReviewOptions.from_mapping(options)
        if options is not None:
            logger.warning(f"Ignoring review options of type {type(options).__name__}")
        return ReviewOptions()
