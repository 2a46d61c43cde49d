"""Event detector: explainable log entries from consecutive classified readings."""

from __future__ import annotations

from physio_monitor.models import ClassifiedReading, Event, EventType, HealthState

SWEAT_SPIKE_DELTA = 100.0
HR_DEVIATION_BPM = 20.0


def _fmt(value: float) -> str:
    """Render whole numbers without a trailing ``.0``."""
    return f"{value:g}" if float(value).is_integer() else f"{value:.1f}"


def detect_events(
    current: ClassifiedReading,
    previous: ClassifiedReading | None,
    *,
    sweat_spike_delta: float = SWEAT_SPIKE_DELTA,
    hr_deviation_bpm: float = HR_DEVIATION_BPM,
) -> list[Event]:
    """Compare *current* with *previous* and return the events that fire.

    Rules are independent and evaluated in a fixed order (state change,
    sweat spike, heart-rate deviation onset, alert, recovery).  Nothing
    fires for the first reading of a session.
    """
    if previous is None:
        return []

    ts = current.timestamp
    events: list[Event] = []

    if current.state != previous.state:
        events.append(Event.create(
            EventType.STATE_CHANGE, ts, f"Health state changed to {current.state.value}",
        ))

    sweat_increase = current.sweat_level - previous.sweat_level
    if sweat_increase > sweat_spike_delta:
        events.append(Event.create(
            EventType.SWEAT_SPIKE, ts, f"Sweat spike detected (+{_fmt(sweat_increase)})",
        ))

    # Edge-triggered: only on entering the deviation band.
    hr_deviation = abs(current.heart_rate - current.baseline_hr)
    prev_hr_deviation = abs(previous.heart_rate - previous.baseline_hr)
    if hr_deviation > hr_deviation_bpm and prev_hr_deviation <= hr_deviation_bpm:
        events.append(Event.create(
            EventType.HR_DEVIATION,
            ts,
            f"Heart rate deviation detected ({_fmt(hr_deviation)} BPM from baseline)",
        ))

    if current.state == HealthState.ALERT and previous.state != HealthState.ALERT:
        events.append(Event.create(
            EventType.ALERT, ts, "ALERT triggered - Multiple stress indicators detected",
        ))

    if current.state == HealthState.RECOVERY and previous.state != HealthState.RECOVERY:
        events.append(Event.create(
            EventType.RECOVERY, ts, "Recovery started - Vitals returning to baseline",
        ))

    return events
