"""Four-state health classifier with one-step hysteresis out of ALERT."""

from __future__ import annotations

import structlog

from physio_monitor.models import HealthState
from physio_monitor.monitors.deviation import MILD_THRESHOLD

logger = structlog.get_logger(__name__)

STRONG_THRESHOLD = 0.25


def resolve_state(
    max_magnitude: float,
    previous: HealthState | None,
    *,
    mild_threshold: float = MILD_THRESHOLD,
    strong_threshold: float = STRONG_THRESHOLD,
) -> HealthState:
    """Map the worst channel deviation to a state.

    ======================  ==========================================
    max_magnitude           state
    ======================  ==========================================
    ``>= strong``           ALERT
    ``>= mild``             SHIFT
    below ``mild``          NORMAL, or RECOVERY if *previous* was ALERT
    ======================  ==========================================

    RECOVERY is derived fresh on every call and so lasts one reading.
    """
    if max_magnitude >= strong_threshold:
        return HealthState.ALERT
    if max_magnitude >= mild_threshold:
        return HealthState.SHIFT
    if previous == HealthState.ALERT:
        return HealthState.RECOVERY
    return HealthState.NORMAL


class StateClassifier:
    """Stateful wrapper around :func:`resolve_state` for one session.

    Remembers only the previously resolved state; the initial state behaves
    as NORMAL.
    """

    def __init__(
        self,
        mild_threshold: float = MILD_THRESHOLD,
        strong_threshold: float = STRONG_THRESHOLD,
    ) -> None:
        if mild_threshold > strong_threshold:
            raise ValueError(
                f"mild_threshold ({mild_threshold}) must not exceed "
                f"strong_threshold ({strong_threshold})."
            )
        self._mild = mild_threshold
        self._strong = strong_threshold
        self._previous: HealthState | None = None

    @property
    def previous(self) -> HealthState | None:
        return self._previous

    def classify(self, max_magnitude: float) -> HealthState:
        state = resolve_state(
            max_magnitude,
            self._previous,
            mild_threshold=self._mild,
            strong_threshold=self._strong,
        )
        if state != (self._previous or HealthState.NORMAL):
            logger.debug(
                "classifier.transition",
                previous=(self._previous or HealthState.NORMAL).value,
                state=state.value,
                max_magnitude=round(max_magnitude, 4),
            )
        self._previous = state
        return state

    def reset(self) -> None:
        self._previous = None
