from datetime import timedelta

import pytest

from vocab_srs.application.srs.insights import (
    generate_learning_insights,
    suggest_optimal_batch_size,
)
from vocab_srs.domain.srs.models import ReviewEntry, UserStats

MINUTE_MS = 60 * 1000


def history(qualities, now):
    return [
        ReviewEntry(
            quality=q,
            response_time_ms=None,
            interval_before=1,
            interval_after=1,
            ease_factor=2.5,
            time_since_last_review=0.0,
            reviewed_at=now - timedelta(hours=i),
        )
        for i, q in enumerate(qualities)
    ]


# --- Batch size ---


@pytest.mark.parametrize(
    "stats, minutes, expected",
    [
        ({"accuracy": 0.8}, 10, 16),
        ({"accuracy": 1.0}, 10, 20),
        ({"accuracy": 0.2}, 10, 10),
        ({"accuracy": 0.8}, 1, 5),
        ({"accuracy": 0.8}, 60, 50),
        (None, 10, 16),
        ({}, 10, 16),
    ],
)
def test_suggest_optimal_batch_size(settings, stats, minutes, expected):
    assert suggest_optimal_batch_size(stats, minutes * MINUTE_MS, settings) == expected


def test_batch_size_accepts_user_stats():
    assert suggest_optimal_batch_size(UserStats(accuracy=0.8), 10 * MINUTE_MS) == 16


# --- Learning insights ---


def test_no_insights_for_empty_stats():
    assert generate_learning_insights({}, []) == []


def test_morning_learner(settings):
    found = generate_learning_insights(
        {"morningAccuracy": 0.9, "eveningAccuracy": 0.7}, [], settings
    )

    assert len(found) == 1
    assert found[0].type == "timing"
    assert found[0].priority == "high"


def test_timing_needs_both_accuracies(settings):
    assert generate_learning_insights({"morningAccuracy": 0.9}, [], settings) == []


def test_timing_needs_clear_margin(settings):
    found = generate_learning_insights(
        {"morningAccuracy": 0.75, "eveningAccuracy": 0.7}, [], settings
    )
    assert found == []


def test_frequent_failures(settings, now):
    found = generate_learning_insights({}, history([1, 2, 4, 5], now), settings)

    assert [i.type for i in found] == ["difficulty"]
    assert found[0].priority == "medium"


def test_occasional_failures_are_fine(settings, now):
    assert generate_learning_insights({}, history([1, 4, 4, 5], now), settings) == []


def test_long_streak(settings):
    found = generate_learning_insights({"streak": 8}, [], settings)

    assert [i.type for i in found] == ["motivation"]
    assert found[0].message == "Amazing! You've maintained a 8-day streak. Keep it up!"
    assert found[0].priority == "low"


def test_seven_day_streak_is_not_enough(settings):
    assert generate_learning_insights({"streak": 7}, [], settings) == []


def test_all_insights_in_order(settings, now):
    stats = {"morningAccuracy": 0.95, "eveningAccuracy": 0.6, "streak": 30}
    found = generate_learning_insights(stats, history([0, 0, 5], now), settings)
    assert [i.type for i in found] == ["timing", "difficulty", "motivation"]
