"""
Session sizing and learning insights derived from learner stats.

Advisory only: nothing here affects the computed schedule.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any

from vocab_srs.application.config import SchedulerSettings
from vocab_srs.domain.srs.models import LearningInsight, ReviewEntry, UserStats, is_pass


def suggest_optimal_batch_size(
    user_stats: UserStats | Mapping[str, Any] | None,
    time_available_ms: float,
    settings: SchedulerSettings | None = None,
) -> int:
    """
    Estimate how many cards fit into a session of `time_available_ms`.

    Assumes a fixed time per card scaled by accuracy (weaker learners get
    fewer cards). The result is clamped to [min_batch_size, max_batch_size].
    """
    settings = settings or SchedulerSettings()
    stats = UserStats.from_mapping(user_stats)

    accuracy = stats.accuracy if stats.accuracy is not None else settings.default_accuracy
    accuracy_factor = max(settings.batch_accuracy_floor, accuracy)
    cards_in_time = time_available_ms / (settings.seconds_per_card * 1000)

    suggested = math.floor(cards_in_time * accuracy_factor)
    return min(max(settings.min_batch_size, suggested), settings.max_batch_size)


def generate_learning_insights(
    user_stats: UserStats | Mapping[str, Any] | None,
    review_history: Sequence[ReviewEntry],
    settings: SchedulerSettings | None = None,
) -> list[LearningInsight]:
    """
    Produce advisory messages from the learner's stats and recent reviews.

    - timing: morning accuracy beats evening accuracy by more than the margin
    - difficulty: more than the threshold share of reviews were failures
    - motivation: streak longer than the configured number of days
    """
    settings = settings or SchedulerSettings()
    stats = UserStats.from_mapping(user_stats)
    insights: list[LearningInsight] = []

    if (
        stats.morning_accuracy is not None
        and stats.evening_accuracy is not None
        and stats.morning_accuracy > stats.evening_accuracy + settings.timing_insight_margin
    ):
        insights.append(
            LearningInsight(
                type="timing",
                message=(
                    "You learn better in the morning! "
                    "Consider scheduling more reviews before noon."
                ),
                priority="high",
            )
        )

    if review_history:
        failures = sum(1 for r in review_history if not is_pass(r.quality))
        if failures / len(review_history) > settings.failure_rate_threshold:
            insights.append(
                LearningInsight(
                    type="difficulty",
                    message="Consider reducing daily review count to improve retention.",
                    priority="medium",
                )
            )

    if stats.streak > settings.streak_insight_days:
        insights.append(
            LearningInsight(
                type="motivation",
                message=(
                    f"Amazing! You've maintained a {stats.streak}-day streak. Keep it up!"
                ),
                priority="low",
            )
        )

    return insights
