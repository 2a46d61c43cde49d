"""Monitoring session: one subject's reading stream through the core pipeline.

Each accepted reading is processed to completion before the next one:

1. Validate and check ordering (rejections mutate nothing)
2. Feed the baseline estimator
3. Score deviation against the baseline in effect
4. Classify with hysteresis
5. Apply the classification to baseline adaptation
6. Detect events against the previous classified reading

A session is single-writer: create one per monitored subject and never
share it across subjects or feed it concurrently.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

import structlog

from physio_monitor.config import MonitorConfig
from physio_monitor.exceptions import OutOfOrderReading, ReadingRejected
from physio_monitor.models import (
    BaselineStatus,
    ClassifiedReading,
    Reading,
    SessionResult,
)
from physio_monitor.monitors.baseline import BaselineEstimator
from physio_monitor.monitors.classifier import StateClassifier
from physio_monitor.monitors.deviation import score_reading
from physio_monitor.monitors.events import detect_events

logger = structlog.get_logger(__name__)


class MonitoringSession:
    """Synchronous "feed one reading, get one result" interface.

    Parameters
    ----------
    config : MonitorConfig
        Shared constant set; defaults to the standard thresholds.
    subject_id : str
        Bound into every log line for this session.
    """

    def __init__(self, config: MonitorConfig | None = None, *, subject_id: str = "") -> None:
        self._config = config or MonitorConfig()
        self._subject_id = subject_id
        self._log = logger.bind(subject=subject_id) if subject_id else logger
        self._estimator = BaselineEstimator(self._config)
        self._classifier = StateClassifier(
            mild_threshold=self._config.mild_threshold,
            strong_threshold=self._config.strong_threshold,
        )
        self._previous: ClassifiedReading | None = None
        self._last_timestamp: datetime | None = None
        self._accepted = 0

    # ── Introspection ─────────────────────────────────────────

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def subject_id(self) -> str:
        return self._subject_id

    @property
    def baseline_status(self) -> BaselineStatus:
        return self._estimator.status()

    @property
    def previous(self) -> ClassifiedReading | None:
        """The last classified reading, or ``None`` at session start."""
        return self._previous

    @property
    def accepted(self) -> int:
        return self._accepted

    # ── Processing ────────────────────────────────────────────

    def process(self, raw: Reading | Mapping[str, Any]) -> SessionResult:
        """Classify one reading and return it with any events it triggers.

        Raises :class:`InvalidReading` for malformed channels and
        :class:`OutOfOrderReading` when the timestamp does not advance.
        Neither leaves any trace in the session.
        """
        reading = Reading.parse(raw)
        if self._last_timestamp is not None and reading.timestamp <= self._last_timestamp:
            raise OutOfOrderReading(reading.timestamp, self._last_timestamp)

        baseline_status = self._estimator.observe(reading)
        baseline = self._estimator.current()

        deviation = score_reading(reading, baseline, self._config.mild_threshold)
        state = self._classifier.classify(deviation.max_magnitude)
        self._estimator.adapt(state, reading)

        classified = ClassifiedReading.from_reading(reading, state, baseline)
        events = detect_events(
            classified,
            self._previous,
            sweat_spike_delta=self._config.sweat_spike_delta,
            hr_deviation_bpm=self._config.hr_deviation_bpm,
        )

        self._previous = classified
        self._last_timestamp = reading.timestamp
        self._accepted += 1

        for event in events:
            self._log.info(
                "session.event",
                type=event.type.value,
                event_id=event.id,
                message=event.message,
            )

        return SessionResult(
            classified=classified,
            events=events,
            deviation=deviation,
            baseline_status=baseline_status,
        )

    def process_batch(self, readings: Iterable[Reading | Mapping[str, Any]]) -> list[SessionResult]:
        """Process readings in order, logging and skipping rejected ones."""
        results: list[SessionResult] = []
        for raw in readings:
            try:
                results.append(self.process(raw))
            except ReadingRejected as exc:
                self._log.warning(
                    "session.reading_rejected",
                    reason=type(exc).__name__,
                    error=str(exc),
                )
        return results

    def reset(self) -> None:
        """Drop the baseline and all history; the next reading starts afresh."""
        self._estimator.reset()
        self._classifier.reset()
        self._previous = None
        self._last_timestamp = None
        self._accepted = 0
        self._log.info("session.reset")
