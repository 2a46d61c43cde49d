"""Bounded display buffers fed from session results.

The core keeps no history beyond the previous reading; these helpers hold
what a dashboard shows: a newest-first event log and per-channel trend
series that pair each value with the baseline it was scored against.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Iterable, Iterator, Literal

from pydantic import BaseModel

from physio_monitor.config import Settings
from physio_monitor.models import ClassifiedReading, Event, HealthState, SessionResult

Channel = Literal["hr", "temp", "sweat"]

STATE_LABELS: dict[HealthState, str] = {
    HealthState.NORMAL: "NORMAL",
    HealthState.SHIFT: "PHYSIOLOGICAL SHIFT",
    HealthState.ALERT: "ALERT – Hypoglycemia Risk",
    HealthState.RECOVERY: "RECOVERY",
}


class Stage(BaseModel):
    """One row of the stage legend shown beside the live status."""

    code: int
    state: HealthState
    name: str
    meaning: str


STATE_STAGES: tuple[Stage, ...] = (
    Stage(code=0, state=HealthState.NORMAL, name="NORMAL", meaning="Stable physiology"),
    Stage(code=1, state=HealthState.SHIFT, name="PHYSIOLOGICAL SHIFT", meaning="Early stress response"),
    Stage(
        code=2, state=HealthState.ALERT, name="HYPOGLYCEMIA RISK (ALERT)", meaning="Strong correlated response",
    ),
    Stage(code=3, state=HealthState.RECOVERY, name="RECOVERY", meaning="Return toward baseline"),
)


def stage_for(state: HealthState) -> Stage:
    """Return the legend row for *state*."""
    for stage in STATE_STAGES:
        if stage.state == state:
            return stage
    raise ValueError(f"No stage for {state!r}.")


def sweat_label(level: float) -> str:
    """Coarse label for the raw sweat conductance value."""
    if level < 400:
        return "Low"
    if level < 700:
        return "Medium"
    return "High"


class DataPoint(BaseModel):
    time: datetime
    value: float
    baseline: float


def data_point(reading: ClassifiedReading, channel: Channel) -> DataPoint:
    """Project one channel of *reading* onto a chart point."""
    if channel == "hr":
        return DataPoint(time=reading.timestamp, value=reading.heart_rate, baseline=reading.baseline_hr)
    if channel == "temp":
        return DataPoint(time=reading.timestamp, value=reading.skin_temp, baseline=reading.baseline_temp)
    if channel == "sweat":
        return DataPoint(time=reading.timestamp, value=reading.sweat_level, baseline=reading.baseline_sweat)
    raise ValueError(f"Unknown channel {channel!r}.")


class EventLog:
    """Newest-first log capped at *maxlen* entries."""

    def __init__(self, maxlen: int = 50) -> None:
        self._events: deque[Event] = deque(maxlen=maxlen)

    @classmethod
    def from_settings(cls, settings: Settings) -> EventLog:
        """Build a log sized by ``event_log_size``."""
        return cls(maxlen=settings.event_log_size)

    @property
    def maxlen(self) -> int:
        return self._events.maxlen

    def extend(self, events: Iterable[Event]) -> None:
        # Within one reading, rule order is kept: the first rule ends up
        # deepest, matching a prepend-per-event log.
        for event in events:
            self._events.appendleft(event)

    @property
    def latest(self) -> Event | None:
        return self._events[0] if self._events else None

    def clear(self) -> None:
        self._events.clear()

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)


class TrendSeries:
    """Rolling per-channel chart data (oldest first)."""

    def __init__(self, maxlen: int = 100) -> None:
        self._series: dict[Channel, deque[DataPoint]] = {
            "hr": deque(maxlen=maxlen),
            "temp": deque(maxlen=maxlen),
            "sweat": deque(maxlen=maxlen),
        }
        self._maxlen = maxlen

    @classmethod
    def from_settings(cls, settings: Settings) -> TrendSeries:
        """Build series sized by ``trend_history_size``."""
        return cls(maxlen=settings.trend_history_size)

    @property
    def maxlen(self) -> int:
        return self._maxlen

    def append(self, reading: ClassifiedReading) -> None:
        for channel, points in self._series.items():
            points.append(data_point(reading, channel))

    def add_result(self, result: SessionResult) -> None:
        self.append(result.classified)

    def points(self, channel: Channel) -> list[DataPoint]:
        return list(self._series[channel])

    def clear(self) -> None:
        for points in self._series.values():
            points.clear()
