from datetime import datetime, timezone

import pytest

from vocab_srs.domain.srs.errors import AlgorithmError, RecordFormatError, SrsError
from vocab_srs.domain.srs.models import (
    DAYS,
    PreferredTime,
    ReviewRecord,
    UserStats,
    is_pass,
)
from vocab_srs.domain.srs.ports import FixedClock, SystemClock


def test_pass_threshold():
    assert [is_pass(q) for q in range(6)] == [False, False, False, True, True, True]


def test_new_record(now):
    record = ReviewRecord.new(now)

    assert record.repetitions == 0
    assert record.interval == 1
    assert record.ease_factor == 2.5
    assert record.next_review == now
    assert record.interval_unit == DAYS
    assert record.is_new


def test_user_stats_from_camel_case():
    stats = UserStats.from_mapping(
        {
            "accuracy": 0.85,
            "categoryAccuracy": {"verbs": 0.92},
            "streak": 4,
            "preferredTimes": [{"hour": 8, "minute": 15, "accuracy": 0.9}, {"hour": 21}],
            "morningAccuracy": 0.9,
            "eveningAccuracy": 0.75,
        }
    )

    assert stats == UserStats(
        accuracy=0.85,
        category_accuracy={"verbs": 0.92},
        streak=4,
        preferred_times=(PreferredTime(8, 15, 0.9), PreferredTime(21, 0, 0.0)),
        morning_accuracy=0.9,
        evening_accuracy=0.75,
    )


def test_user_stats_from_snake_case():
    stats = UserStats.from_mapping({"category_accuracy": {"nouns": 0.6}, "streak": None})
    assert stats.category_accuracy == {"nouns": 0.6}
    assert stats.streak == 0
    assert stats.accuracy is None


def test_user_stats_passthrough():
    stats = UserStats(accuracy=0.7)
    assert UserStats.from_mapping(stats) is stats
    assert UserStats.from_mapping(None) == UserStats()


@pytest.mark.parametrize(
    "raw",
    [
        {"categoryAccuracy": [0.9]},
        {"categoryAccuracy": "verbs"},
        {"preferredTimes": {"hour": 9}},
        ["accuracy", 0.9],
    ],
)
def test_user_stats_rejects_bad_shapes(raw):
    with pytest.raises(TypeError):
        UserStats.from_mapping(raw)


def test_error_hierarchy():
    error = AlgorithmError("adaptive", "bad stats")

    assert isinstance(error, SrsError)
    assert str(error) == "adaptive: bad stats"
    assert error.algorithm == "adaptive"
    assert issubclass(RecordFormatError, ValueError)


def test_fixed_clock_assumes_utc_for_naive():
    clock = FixedClock(datetime(2025, 1, 1, 12))
    assert clock.now() == datetime(2025, 1, 1, 12, tzinfo=timezone.utc)


def test_system_clock_is_aware():
    assert SystemClock().now().tzinfo is timezone.utc


def test_user_stats_skips_null_category_accuracy():
    stats = UserStats.from_mapping({"categoryAccuracy": {"verbs": None, "nouns": 0.6}})
    assert stats.category_accuracy == {"nouns": 0.6}
