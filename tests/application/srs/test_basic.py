from datetime import datetime, timedelta, timezone

import pytest

from vocab_srs.application.srs.basic import (
    basic_update,
    interval_in_days,
    schedule_basic,
    sm2_ease_delta,
)
from vocab_srs.domain.srs.models import DAYS, MINUTES, ReviewEntry, ReviewRecord
from vocab_srs.domain.srs.result import Ok

MIDNIGHT = datetime(2025, 3, 10, tzinfo=timezone.utc)


@pytest.fixture
def fresh(now):
    return ReviewRecord.new(now)


def replay(record, qualities, now):
    trace = []
    for quality in qualities:
        record = basic_update(record, quality, now)
        trace.append(record)
    return trace


# --- Ease factor ---


def test_ease_delta_matches_sm2_table():
    assert sm2_ease_delta(5) == pytest.approx(0.1)
    assert sm2_ease_delta(4) == pytest.approx(0.0)
    assert sm2_ease_delta(3) == pytest.approx(-0.14)
    assert sm2_ease_delta(0) == pytest.approx(-0.8)


def test_perfect_first_review(fresh, now):
    record = basic_update(fresh, 5, now)

    assert record.repetitions == 1
    assert record.interval == 1
    assert record.ease_factor == pytest.approx(2.6)
    assert record.interval_unit == DAYS


def test_ease_factor_floor(now):
    record = ReviewRecord(repetitions=3, interval=10, ease_factor=1.3, next_review=now)
    updated = basic_update(record, 3, now)
    assert updated.ease_factor == pytest.approx(1.3)


def test_failure_leaves_ease_factor_unchanged(now):
    record = ReviewRecord(repetitions=4, interval=20, ease_factor=2.2, next_review=now)
    updated = basic_update(record, 1, now)

    assert updated.repetitions == 0
    assert updated.interval == 1
    assert updated.ease_factor == pytest.approx(2.2)


# --- Interval progression ---


def test_graduation_sequence(fresh, now):
    trace = replay(fresh, [4, 4, 4], now)
    assert [r.interval for r in trace] == [1, 6, 15]
    assert [r.repetitions for r in trace] == [1, 2, 3]


def test_fail_then_recover(fresh, now):
    trace = replay(fresh, [4, 5, 2, 3], now)

    assert [r.repetitions for r in trace] == [1, 2, 0, 1]
    assert [r.interval for r in trace] == [1, 6, 1, 1]
    assert [r.ease_factor for r in trace] == pytest.approx([2.5, 2.6, 2.6, 2.46])


def test_interval_rounds_half_up(now):
    # 5 * 2.5 = 12.5 -> 13
    record = ReviewRecord(repetitions=2, interval=5, ease_factor=2.5, next_review=now)
    assert basic_update(record, 4, now).interval == 13


def test_minute_interval_is_converted_to_days(now):
    record = ReviewRecord(
        repetitions=2, interval=2880, ease_factor=2.0, next_review=now, interval_unit=MINUTES
    )
    assert interval_in_days(record) == 2

    updated = basic_update(record, 4, now)
    assert updated.interval == 4
    assert updated.interval_unit == DAYS


def test_short_minute_interval_counts_as_one_day():
    record = ReviewRecord(
        repetitions=1, interval=30, ease_factor=2.5, next_review=MIDNIGHT, interval_unit=MINUTES
    )
    assert interval_in_days(record) == 1


# --- Bookkeeping ---


def test_next_review_is_midnight_plus_interval(now):
    record = ReviewRecord(repetitions=1, interval=1, ease_factor=2.5, next_review=now)
    updated = basic_update(record, 4, now)
    assert updated.next_review == MIDNIGHT + timedelta(days=6)


def test_review_is_recorded(fresh, now):
    record = basic_update(fresh, 4, now)

    assert record.last_reviewed_at == now
    assert record.total_reviews == 1
    assert len(record.review_history) == 1

    entry = record.review_history[0]
    assert entry.quality == 4
    assert entry.interval_before == 1
    assert entry.interval_after == 1
    assert entry.time_since_last_review == 0.0
    assert entry.reviewed_at == now


def test_time_since_last_review_in_minutes(now):
    record = ReviewRecord(
        repetitions=1,
        interval=1,
        ease_factor=2.5,
        next_review=now,
        last_reviewed_at=now - timedelta(hours=2),
    )
    entry = basic_update(record, 4, now).review_history[-1]
    assert entry.time_since_last_review == pytest.approx(120.0)


def test_history_is_capped(now):
    history = tuple(
        ReviewEntry(
            quality=4,
            response_time_ms=None,
            interval_before=1,
            interval_after=1,
            ease_factor=2.5,
            time_since_last_review=0.0,
            reviewed_at=now - timedelta(days=30 - i),
        )
        for i in range(20)
    )
    record = ReviewRecord(
        repetitions=1, interval=1, ease_factor=2.5, next_review=now, review_history=history
    )

    updated = basic_update(record, 2, now, history_limit=20)

    assert len(updated.review_history) == 20
    assert updated.review_history[0] == history[1]
    assert updated.review_history[-1].quality == 2


def test_schedule_basic_wraps_result(fresh, now):
    result = schedule_basic(fresh, 5, now)
    assert isinstance(result, Ok)
    assert result.metadata is None
    assert result.record.repetitions == 1
