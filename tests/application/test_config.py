from datetime import timezone

import pytest
from pydantic import ValidationError

from vocab_srs.application.config import SchedulerSettings, resolve_config


def test_defaults():
    settings = SchedulerSettings()

    assert settings.use_advanced is False
    assert settings.timezone == "UTC"
    assert settings.tzinfo is timezone.utc
    assert settings.minimum_interval == 10
    assert settings.maximum_interval == 525_600
    assert settings.history_limit == 20
    assert settings.expected_response_ms == {"easy": 3000, "medium": 5000, "hard": 8000}
    assert len(settings.weights) == 17
    assert settings.request_retention == 0.9


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VOCAB_SRS_USE_ADVANCED", "true")
    monkeypatch.setenv("VOCAB_SRS_HISTORY_LIMIT", "5")

    settings = SchedulerSettings()

    assert settings.use_advanced is True
    assert settings.history_limit == 5


def test_config_file(isolated_config):
    config_dir = isolated_config / ".config" / "vocab-srs"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text(
        'use_advanced = true\nstreak_insight_days = 14\n', encoding="utf-8"
    )

    settings = SchedulerSettings()

    assert settings.use_advanced is True
    assert settings.streak_insight_days == 14


def test_environment_beats_config_file(isolated_config, monkeypatch):
    (isolated_config / ".vocab-srs.toml").write_text("history_limit = 8\n", encoding="utf-8")
    monkeypatch.setenv("VOCAB_SRS_HISTORY_LIMIT", "12")

    assert SchedulerSettings().history_limit == 12


def test_settings_are_frozen():
    settings = SchedulerSettings()
    with pytest.raises(ValidationError):
        settings.use_advanced = True


def test_invalid_timezone():
    with pytest.raises(ValidationError, match="Unknown timezone"):
        SchedulerSettings(timezone="Nowhere/Special")


def test_interval_bounds_validated():
    with pytest.raises(ValidationError):
        SchedulerSettings(minimum_interval=60, maximum_interval=30)


def test_resolve_config_ignores_none():
    settings = resolve_config({"use_advanced": None, "history_limit": 3})

    assert settings.use_advanced is False
    assert settings.history_limit == 3
