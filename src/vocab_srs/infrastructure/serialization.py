"""
ReviewRecord serialization for storage adapters.

Records are written as camelCase dicts. Timestamps are either ISO-8601 strings
or epoch milliseconds, never mixed within one document. Reading is strict:
unlike the scheduler's normalization, malformed documents raise
RecordFormatError so storage corruption is noticed.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal

from vocab_srs.application.utils.numeric import as_finite
from vocab_srs.application.utils.timestamps import to_datetime, to_epoch_ms
from vocab_srs.domain.srs.errors import RecordFormatError
from vocab_srs.domain.srs.models import DAYS, MINUTES, ReviewEntry, ReviewRecord

TimestampFormat = Literal["iso", "epoch_ms"]


def _dump_ts(value: datetime | None, fmt: TimestampFormat) -> str | int | None:
    if value is None:
        return None
    if fmt == "epoch_ms":
        return to_epoch_ms(value)
    return value.isoformat()


def entry_to_dict(entry: ReviewEntry, timestamps: TimestampFormat = "iso") -> dict[str, Any]:
    return {
        "quality": entry.quality,
        "responseTimeMs": entry.response_time_ms,
        "intervalBefore": entry.interval_before,
        "intervalAfter": entry.interval_after,
        "easeFactor": entry.ease_factor,
        "timeSinceLastReview": entry.time_since_last_review,
        "reviewedAt": _dump_ts(entry.reviewed_at, timestamps),
        "intervalUnit": entry.interval_unit,
    }


def record_to_dict(record: ReviewRecord, timestamps: TimestampFormat = "iso") -> dict[str, Any]:
    """Serialize every field of `record` to JSON-compatible values."""
    return {
        "repetitions": record.repetitions,
        "interval": record.interval,
        "easeFactor": record.ease_factor,
        "nextReview": _dump_ts(record.next_review, timestamps),
        "lastReviewedAt": _dump_ts(record.last_reviewed_at, timestamps),
        "totalReviews": record.total_reviews,
        "reviewHistory": [entry_to_dict(e, timestamps) for e in record.review_history],
        "intervalUnit": record.interval_unit,
    }


def _require(data: Mapping[str, Any], key: str) -> Any:
    if key not in data:
        raise RecordFormatError(f"Missing field '{key}'")
    return data[key]


def _number(data: Mapping[str, Any], key: str, optional: bool = False) -> float | None:
    value = data.get(key) if optional else _require(data, key)
    if value is None and optional:
        return None
    number = as_finite(value) if not isinstance(value, str) else None
    if number is None:
        raise RecordFormatError(f"Field '{key}' must be a finite number, got {value!r}")
    return number


def _integer(data: Mapping[str, Any], key: str) -> int:
    number = _number(data, key)
    if number != int(number):
        raise RecordFormatError(f"Field '{key}' must be an integer, got {number!r}")
    return int(number)


def _timestamp(data: Mapping[str, Any], key: str, optional: bool = False) -> datetime | None:
    value = data.get(key) if optional else _require(data, key)
    if value is None and optional:
        return None
    try:
        parsed = to_datetime(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise RecordFormatError(f"Field '{key}' is not a timestamp: {value!r}") from e
    if parsed is None:
        raise RecordFormatError(f"Field '{key}' is empty")
    return parsed


def _unit(data: Mapping[str, Any]) -> Any:
    unit = data.get("intervalUnit", DAYS)
    if unit not in (DAYS, MINUTES):
        raise RecordFormatError(f"Field 'intervalUnit' must be 'days' or 'minutes', got {unit!r}")
    return unit


def entry_from_dict(data: Mapping[str, Any]) -> ReviewEntry:
    if not isinstance(data, Mapping):
        raise RecordFormatError(f"Review entry must be an object, got {type(data).__name__}")
    return ReviewEntry(
        quality=_integer(data, "quality"),
        response_time_ms=_number(data, "responseTimeMs", optional=True),
        interval_before=_integer(data, "intervalBefore"),
        interval_after=_integer(data, "intervalAfter"),
        ease_factor=_number(data, "easeFactor"),
        time_since_last_review=_number(data, "timeSinceLastReview"),
        reviewed_at=_timestamp(data, "reviewedAt"),
        interval_unit=_unit(data),
    )


def record_from_dict(data: Mapping[str, Any]) -> ReviewRecord:
    """
    Deserialize a record written by `record_to_dict`.

    Raises:
        RecordFormatError: If a field is missing or has an invalid value.
    """
    if not isinstance(data, Mapping):
        raise RecordFormatError(f"Review record must be an object, got {type(data).__name__}")

    history = data.get("reviewHistory", [])
    if not isinstance(history, list):
        raise RecordFormatError("Field 'reviewHistory' must be a list")

    return ReviewRecord(
        repetitions=_integer(data, "repetitions"),
        interval=_integer(data, "interval"),
        ease_factor=_number(data, "easeFactor"),
        next_review=_timestamp(data, "nextReview"),
        last_reviewed_at=_timestamp(data, "lastReviewedAt", optional=True),
        total_reviews=_integer(data, "totalReviews"),
        review_history=tuple(entry_from_dict(e) for e in history),
        interval_unit=_unit(data),
    )
