"""
Normalization of scheduling state.

Records arrive from storage with missing fields, NaNs, strings where numbers
belong, epoch milliseconds or ISO strings for timestamps, and snake_case or
camelCase keys. Everything here coerces to safe defaults instead of raising.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from vocab_srs.application.utils.numeric import as_finite, clamp
from vocab_srs.application.utils.timestamps import to_datetime
from vocab_srs.domain.constants import (
    DEFAULT_EASE_FACTOR,
    HISTORY_LIMIT,
    MAX_EASE_FACTOR,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
)
from vocab_srs.domain.srs.models import DAYS, MINUTES, IntervalUnit, ReviewEntry, ReviewRecord

logger = logging.getLogger(__name__)

# Field name -> accepted keys in raw mappings, canonical snake_case first
RECORD_KEYS: dict[str, tuple[str, ...]] = {
    "repetitions": ("repetitions",),
    "interval": ("interval",),
    "ease_factor": ("ease_factor", "easeFactor", "easiness"),
    "next_review": ("next_review", "nextReview"),
    "last_reviewed_at": ("last_reviewed_at", "lastReviewedAt"),
    "total_reviews": ("total_reviews", "totalReviews"),
    "review_history": ("review_history", "reviewHistory"),
    "interval_unit": ("interval_unit", "intervalUnit"),
}

ENTRY_KEYS: dict[str, tuple[str, ...]] = {
    "quality": ("quality",),
    "response_time_ms": ("response_time_ms", "responseTimeMs", "responseTime"),
    "interval_before": ("interval_before", "intervalBefore", "interval"),
    "interval_after": ("interval_after", "intervalAfter", "newInterval"),
    "ease_factor": ("ease_factor", "easeFactor"),
    "time_since_last_review": ("time_since_last_review", "timeSinceLastReview"),
    "reviewed_at": ("reviewed_at", "reviewedAt", "date"),
    "interval_unit": ("interval_unit", "intervalUnit"),
}


def _read(raw: Any, field: str, keys: Mapping[str, tuple[str, ...]]) -> Any:
    if isinstance(raw, Mapping):
        for key in keys[field]:
            if key in raw:
                return raw[key]
        return None
    return getattr(raw, field, None)


def _as_int(value: Any, default: int, minimum: int) -> int:
    number = as_finite(value)
    if number is None:
        return default
    return max(minimum, math.floor(number))


def _as_timestamp(value: Any, now: datetime) -> datetime | None:
    try:
        return to_datetime(value, now.tzinfo)
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Discarding unreadable timestamp {value!r}: {e}")
        return None


def _as_unit(value: Any, default: IntervalUnit) -> IntervalUnit:
    if value in (DAYS, MINUTES):
        return value
    return default


def coerce_quality(value: Any) -> int:
    """
    Coerce a quality rating to an integer in 0..5.

    Out-of-range numbers are clamped, which keeps their pass/fail
    classification. Anything non-numeric counts as a total blackout (0).
    """
    number = as_finite(value)
    if number is None:
        logger.warning(f"Non-numeric quality {value!r}, treating as 0")
        return MIN_QUALITY
    quality = int(clamp(math.floor(number), MIN_QUALITY, MAX_QUALITY))
    if quality != number:
        logger.debug(f"Quality {value!r} coerced to {quality}")
    return quality


def coerce_entry(raw: Any, now: datetime, default_unit: IntervalUnit = DAYS) -> ReviewEntry | None:
    """Leniently read one history entry. Returns None when it has no usable quality."""
    if isinstance(raw, ReviewEntry):
        return raw
    if not isinstance(raw, Mapping):
        return None

    quality = as_finite(_read(raw, "quality", ENTRY_KEYS))
    if quality is None:
        return None

    reviewed_at = _as_timestamp(_read(raw, "reviewed_at", ENTRY_KEYS), now) or now
    return ReviewEntry(
        quality=coerce_quality(quality),
        response_time_ms=as_finite(_read(raw, "response_time_ms", ENTRY_KEYS)),
        interval_before=_as_int(_read(raw, "interval_before", ENTRY_KEYS), 1, 0),
        interval_after=_as_int(_read(raw, "interval_after", ENTRY_KEYS), 1, 0),
        ease_factor=as_finite(_read(raw, "ease_factor", ENTRY_KEYS)) or DEFAULT_EASE_FACTOR,
        time_since_last_review=as_finite(_read(raw, "time_since_last_review", ENTRY_KEYS))
        or 0.0,
        reviewed_at=reviewed_at,
        interval_unit=_as_unit(_read(raw, "interval_unit", ENTRY_KEYS), default_unit),
    )


def coerce_history(
    raw: Any,
    now: datetime,
    default_unit: IntervalUnit = DAYS,
    limit: int = HISTORY_LIMIT,
) -> tuple[ReviewEntry, ...]:
    """Read a history sequence, dropping unusable entries and keeping the newest `limit`."""
    if raw is None or isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        return ()

    entries = []
    for item in raw:
        entry = coerce_entry(item, now, default_unit)
        if entry is None:
            logger.debug(f"Dropping malformed review history entry: {item!r}")
            continue
        entries.append(entry)
    return tuple(entries[-limit:])


def normalize_record(
    raw: Any,
    now: datetime,
    default_unit: IntervalUnit = DAYS,
    history_limit: int = HISTORY_LIMIT,
) -> ReviewRecord:
    """
    Produce a well-formed ReviewRecord from `raw`.

    `raw` may be a ReviewRecord, a mapping, or anything else (treated as an
    empty record). Applied before an algorithm runs and again to its output:

    - repetitions: integer >= 0 (default 0)
    - interval: integer >= 1 (default 1)
    - ease_factor: clamped to [1.3, 2.5] (default 2.5)
    - next_review: aware datetime (default `now`, i.e. due)
    - last_reviewed_at: aware datetime or None
    - total_reviews: integer >= 0
    - review_history: tuple of at most `history_limit` entries
    """
    if not isinstance(raw, (ReviewRecord, Mapping)):
        if raw is not None:
            logger.warning(f"Unreadable review record of type {type(raw).__name__}, using defaults")
        raw = {}

    ease = as_finite(_read(raw, "ease_factor", RECORD_KEYS))
    unit = _as_unit(_read(raw, "interval_unit", RECORD_KEYS), default_unit)

    return ReviewRecord(
        repetitions=_as_int(_read(raw, "repetitions", RECORD_KEYS), 0, 0),
        interval=_as_int(_read(raw, "interval", RECORD_KEYS), 1, 1),
        ease_factor=clamp(
            ease if ease is not None else DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR, MAX_EASE_FACTOR
        ),
        next_review=_as_timestamp(_read(raw, "next_review", RECORD_KEYS), now) or now,
        last_reviewed_at=_as_timestamp(_read(raw, "last_reviewed_at", RECORD_KEYS), now),
        total_reviews=_as_int(_read(raw, "total_reviews", RECORD_KEYS), 0, 0),
        review_history=coerce_history(
            _read(raw, "review_history", RECORD_KEYS), now, unit, history_limit
        ),
        interval_unit=unit,
    )
