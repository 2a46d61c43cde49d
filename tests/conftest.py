"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from physio_monitor.config import MonitorConfig
from physio_monitor.models import ClassifiedReading, HealthState, Reading
from physio_monitor.notifications.handlers import NotificationDispatcher
from physio_monitor.session import MonitoringSession

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class ReadingFactory:
    """Hands out readings with strictly increasing timestamps."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(seconds=1)) -> None:
        self._next = start
        self._step = step

    def __call__(self, hr: float = 70.0, temp: float = 36.5, sweat: float = 0.0) -> Reading:
        reading = Reading(timestamp=self._next, heart_rate=hr, skin_temp=temp, sweat_level=sweat)
        self._next += self._step
        return reading


@pytest.fixture
def make_reading() -> ReadingFactory:
    return ReadingFactory()


@pytest.fixture
def config() -> MonitorConfig:
    return MonitorConfig()


@pytest.fixture
def session(config: MonitorConfig) -> MonitoringSession:
    return MonitoringSession(config, subject_id="S001")


@pytest.fixture
def learned_session(session: MonitoringSession, make_reading: ReadingFactory) -> MonitoringSession:
    """A session whose baseline was learned from 15 readings of 70 / 36.5 / 0."""
    for _ in range(15):
        session.process(make_reading())
    return session


@pytest.fixture
def classified() -> Callable[..., ClassifiedReading]:
    def _make(
        *,
        seconds: int = 0,
        hr: float = 70.0,
        temp: float = 36.5,
        sweat: float = 0.0,
        state: HealthState = HealthState.NORMAL,
        baseline_hr: float = 70.0,
    ) -> ClassifiedReading:
        return ClassifiedReading(
            timestamp=T0 + timedelta(seconds=seconds),
            heart_rate=hr,
            skin_temp=temp,
            sweat_level=sweat,
            state=state,
            baseline_hr=baseline_hr,
            baseline_temp=36.5,
            baseline_sweat=0.0,
        )

    return _make


@pytest.fixture
def dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher()
