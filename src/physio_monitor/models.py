"""Shared Pydantic models used across the monitor."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from physio_monitor.exceptions import InvalidReading

# ── Enums ─────────────────────────────────────────────────────


class HealthState(str, Enum):
    """Classified health state.

    Severity order is NORMAL < SHIFT < ALERT; RECOVERY marks the first
    reading back under threshold after an ALERT rather than a severity.
    """

    NORMAL = "NORMAL"
    SHIFT = "SHIFT"
    ALERT = "ALERT"
    RECOVERY = "RECOVERY"


class DeviationStatus(str, Enum):
    HIGHER = "higher"
    LOWER = "lower"
    NORMAL = "normal"


class EventType(str, Enum):
    """Kinds of explainability events derived from consecutive readings."""

    STATE_CHANGE = "state_change"
    SWEAT_SPIKE = "sweat_spike"
    HR_DEVIATION = "hr_deviation"
    ALERT = "alert"
    RECOVERY = "recovery"


class BaselinePhase(str, Enum):
    WAITING = "waiting"
    LEARNING = "learning"
    READY = "ready"


# ── Readings ──────────────────────────────────────────────────


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Reading(BaseModel):
    """A single multi-channel sample from the wearable.

    Numeric timestamps are accepted as Unix epoch seconds.  Naive datetimes
    are taken to be UTC.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    heart_rate: float = Field(ge=0, allow_inf_nan=False)
    skin_temp: float = Field(allow_inf_nan=False)
    sweat_level: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("timestamp")
    @classmethod
    def _normalise_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @classmethod
    def parse(cls, raw: Reading | Mapping[str, Any]) -> Reading:
        """Coerce *raw* into a :class:`Reading`.

        Raises :class:`InvalidReading` when a field is missing, unparseable
        or not finite.
        """
        if isinstance(raw, Reading):
            return raw
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            raise InvalidReading(f"Rejected reading; bad fields: {fields or ['<input>']}") from exc


class Baseline(BaseModel):
    """Personal-normal vector for one subject."""

    model_config = ConfigDict(frozen=True)

    hr: float
    temp: float
    sweat: float

    def blend(self, reading: Reading, alpha: float) -> Baseline:
        """Return a new baseline moved a fraction *alpha* toward *reading*."""
        return Baseline(
            hr=self.hr * (1 - alpha) + reading.heart_rate * alpha,
            temp=self.temp * (1 - alpha) + reading.skin_temp * alpha,
            sweat=self.sweat * (1 - alpha) + reading.sweat_level * alpha,
        )


class BaselineStatus(BaseModel):
    """What the estimator knows after observing a reading."""

    phase: BaselinePhase
    count: int = 0
    window: int
    baseline: Baseline | None = None

    @property
    def provisional(self) -> bool:
        """``True`` while scoring relies on a partial or fallback baseline."""
        return self.phase != BaselinePhase.READY


# ── Deviation ─────────────────────────────────────────────────


class ChannelDeviation(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: DeviationStatus
    magnitude: float


class DeviationResult(BaseModel):
    """Per-channel deviation of one reading from the baseline."""

    model_config = ConfigDict(frozen=True)

    hr: ChannelDeviation
    temp: ChannelDeviation
    sweat: ChannelDeviation

    @property
    def max_magnitude(self) -> float:
        return max(self.hr.magnitude, self.temp.magnitude, self.sweat.magnitude)


# ── Classified output ─────────────────────────────────────────


class ClassifiedReading(BaseModel):
    """A reading with its resolved state and the baseline it was scored against."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    heart_rate: float
    skin_temp: float
    sweat_level: float
    state: HealthState
    baseline_hr: float
    baseline_temp: float
    baseline_sweat: float

    @classmethod
    def from_reading(
        cls,
        reading: Reading,
        state: HealthState,
        baseline: Baseline,
    ) -> ClassifiedReading:
        return cls(
            timestamp=reading.timestamp,
            heart_rate=reading.heart_rate,
            skin_temp=reading.skin_temp,
            sweat_level=reading.sweat_level,
            state=state,
            baseline_hr=baseline.hr,
            baseline_temp=baseline.temp,
            baseline_sweat=baseline.sweat,
        )


_EVENT_ID_PREFIX: dict[EventType, str] = {
    EventType.STATE_CHANGE: "state",
    EventType.SWEAT_SPIKE: "sweat",
    EventType.HR_DEVIATION: "hr",
    EventType.ALERT: "alert",
    EventType.RECOVERY: "recovery",
}


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def event_id(event_type: EventType, timestamp: datetime) -> str:
    """Stable identifier derived from the event type and its timestamp.

    The timestamp is rendered as whole microseconds since the epoch, the
    full precision of :class:`datetime`, so readings accepted less than a
    millisecond apart still get distinct ids.
    """
    micros = (timestamp - _EPOCH) // timedelta(microseconds=1)
    return f"{_EVENT_ID_PREFIX[event_type]}-{micros}"


class Event(BaseModel):
    """An explainability log entry for a notable transition."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    type: EventType
    message: str

    @classmethod
    def create(cls, event_type: EventType, timestamp: datetime, message: str) -> Event:
        return cls(
            id=event_id(event_type, timestamp),
            timestamp=timestamp,
            type=event_type,
            message=message,
        )


class SessionResult(BaseModel):
    """Everything the session produced for one accepted reading."""

    classified: ClassifiedReading
    events: list[Event] = Field(default_factory=list)
    deviation: DeviationResult
    baseline_status: BaselineStatus

    def has_event(self, event_type: EventType) -> bool:
        return any(e.type == event_type for e in self.events)


# ── Notifications ─────────────────────────────────────────────


class AlertNotification(BaseModel):
    """Outbound payload handed to notification channels on an ALERT."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    subject_id: str = ""
    recipient: str = ""
    timestamp: datetime
    state: HealthState
    heart_rate: float
    skin_temp: float
    sweat_level: float
    events: list[str] = Field(default_factory=list)
    disclaimer: str = ""
