"""
Timestamp coercion.

Records reach the core from storage in several shapes: epoch milliseconds,
ISO-8601 strings, naive or aware datetimes. Everything is turned into an
aware datetime here.
"""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from .numeric import as_finite

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def resolve_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA timezone name.

    "UTC" maps to the stdlib constant so it works without a tz database.

    Raises:
        ValueError: If the name is unknown.
    """
    if name.strip().upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except Exception as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


def to_datetime(value: Any, tz: tzinfo = timezone.utc) -> datetime | None:
    """
    Convert a stored timestamp into an aware datetime.

    - None or "" -> None
    - int/float (or a numeric string) -> epoch milliseconds
    - ISO-8601 string -> parsed; naive values are taken to be in `tz`
    - datetime -> returned as is, naive values get `tz`

    Raises:
        ValueError: For strings that are neither numeric nor ISO-8601, and
            for non-finite numbers.
        TypeError: For any other type.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=tz)
    if isinstance(value, bool):
        raise TypeError("booleans are not timestamps")
    if isinstance(value, (int, float)):
        millis = as_finite(value)
        if millis is None:
            raise ValueError(f"Non-finite timestamp: {value!r}")
        return from_epoch_ms(millis, tz)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        millis = as_finite(text)
        if millis is not None:
            return from_epoch_ms(millis, tz)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=tz)
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")


def from_epoch_ms(millis: float, tz: tzinfo = timezone.utc) -> datetime:
    return (EPOCH + timedelta(milliseconds=millis)).astimezone(tz)


def to_epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


def start_of_day(moment: datetime) -> datetime:
    """Local midnight of the day `moment` falls on, in its own timezone."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def add_minutes(moment: datetime, minutes: float) -> datetime:
    """Add elapsed minutes (absolute time, DST-safe) keeping the timezone."""
    tz = moment.tzinfo
    return (moment.astimezone(timezone.utc) + timedelta(minutes=minutes)).astimezone(tz)


def minutes_between(earlier: datetime, later: datetime) -> float:
    delta = later.astimezone(timezone.utc) - earlier.astimezone(timezone.utc)
    return delta / timedelta(minutes=1)
