import os
from datetime import datetime, timedelta, timezone

import pytest

from vocab_srs.application.config import SchedulerSettings
from vocab_srs.application.srs.scheduler import Scheduler
from vocab_srs.domain.srs.ports import Clock, FixedClock

NOW = datetime(2025, 3, 10, 14, 30, tzinfo=timezone.utc)


class SteppingClock(Clock):
    """Returns `start`, then advances by `step` on every call."""

    def __init__(self, start: datetime = NOW, step: timedelta = timedelta(days=1)):
        self.current = start
        self.step = step

    def now(self) -> datetime:
        moment = self.current
        self.current += self.step
        return moment


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the developer's config file and VOCAB_SRS_* variables out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("VOCAB_SRS_"):
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def settings():
    return SchedulerSettings()


@pytest.fixture
def scheduler(settings, clock):
    return Scheduler(settings=settings, clock=clock)


@pytest.fixture
def stepping_clock():
    """Factory for clocks that advance on every reading."""
    return SteppingClock
