"""Baseline estimator: learns and slowly adapts a subject's personal normal."""

from __future__ import annotations

import math

import structlog

from physio_monitor.config import MonitorConfig
from physio_monitor.models import Baseline, BaselinePhase, BaselineStatus, HealthState, Reading

logger = structlog.get_logger(__name__)


def _is_complete(reading: Reading) -> bool:
    """Guard for readings built without validation (``Reading.model_construct``).

    Validated readings are always complete; the session never reaches the
    skip branch in :meth:`BaselineEstimator.observe`.
    """
    return all(
        v is not None and math.isfinite(v)
        for v in (reading.heart_rate, reading.skin_temp, reading.sweat_level)
    )


class BaselineEstimator:
    """Own the personal-normal vector for one monitoring session.

    Lifecycle
    ---------
    1. **Waiting**: no valid reading seen yet; scoring uses the fallback
       baseline from :class:`MonitorConfig`.
    2. **Learning**: valid readings accumulate in a fixed-size window;
       scoring uses the running mean of the partial window.
    3. **Ready**: the window filled once and its mean became the baseline.
       From here the baseline blends toward each NORMAL reading once
       ``adapt_start`` consecutive NORMAL readings have been seen.

    Parameters
    ----------
    config : MonitorConfig
        Window size, smoothing factor, adaptation gate and fallback values.
    """

    def __init__(self, config: MonitorConfig | None = None) -> None:
        self._config = config or MonitorConfig()
        self._fallback = Baseline(
            hr=self._config.fallback_hr,
            temp=self._config.fallback_temp,
            sweat=self._config.fallback_sweat,
        )
        self._buffer: list[tuple[float, float, float]] = []
        self._baseline: Baseline | None = None
        self._normal_run = 0
        self._last_used_for_learning = False

    # ── Observation ───────────────────────────────────────────

    def observe(self, reading: Reading) -> BaselineStatus:
        """Feed *reading* into the learning window if one is still open."""
        self._last_used_for_learning = False
        if self._baseline is not None:
            return self.status()

        if not _is_complete(reading):
            logger.debug("baseline.reading_skipped", timestamp=reading.timestamp.isoformat())
            return self.status()

        self._buffer.append((reading.heart_rate, reading.skin_temp, reading.sweat_level))
        self._last_used_for_learning = True

        if len(self._buffer) >= self._config.baseline_window:
            self._baseline = self._mean_of_buffer()
            self._buffer.clear()
            logger.info(
                "baseline.established",
                hr=round(self._baseline.hr, 2),
                temp=round(self._baseline.temp, 2),
                sweat=round(self._baseline.sweat, 2),
                window=self._config.baseline_window,
            )
        return self.status()

    def current(self) -> Baseline:
        """Return the baseline scoring should use right now."""
        if self._baseline is not None:
            return self._baseline
        if self._buffer:
            return self._mean_of_buffer()
        return self._fallback

    def status(self) -> BaselineStatus:
        window = self._config.baseline_window
        if self._baseline is not None:
            return BaselineStatus(
                phase=BaselinePhase.READY, count=window, window=window, baseline=self._baseline,
            )
        if self._buffer:
            return BaselineStatus(
                phase=BaselinePhase.LEARNING, count=len(self._buffer), window=window,
            )
        return BaselineStatus(phase=BaselinePhase.WAITING, count=0, window=window)

    @property
    def established(self) -> bool:
        return self._baseline is not None

    @property
    def normal_run(self) -> int:
        """Consecutive NORMAL readings counted since the last deviation."""
        return self._normal_run

    # ── Adaptation ────────────────────────────────────────────

    def adapt(self, state: HealthState, reading: Reading) -> Baseline | None:
        """Apply the classification of *reading* to the adaptation gate.

        Readings consumed by the learning window never count toward the
        consecutive-NORMAL run.  Returns the new baseline when a blend was
        applied, else ``None``.
        """
        if self._baseline is None or self._last_used_for_learning:
            return None

        if state != HealthState.NORMAL:
            if self._normal_run:
                logger.debug("baseline.adaptation_paused", state=state.value, run=self._normal_run)
            self._normal_run = 0
            return None

        self._normal_run += 1
        if self._normal_run < self._config.adapt_start:
            return None

        self._baseline = self._baseline.blend(reading, self._config.adapt_alpha)
        logger.debug(
            "baseline.adapted",
            hr=round(self._baseline.hr, 3),
            temp=round(self._baseline.temp, 3),
            sweat=round(self._baseline.sweat, 3),
            run=self._normal_run,
        )
        return self._baseline

    def reset(self) -> None:
        """Discard everything and return to the waiting phase."""
        self._buffer.clear()
        self._baseline = None
        self._normal_run = 0
        self._last_used_for_learning = False

    # ── Internals ─────────────────────────────────────────────

    def _mean_of_buffer(self) -> Baseline:
        n = len(self._buffer)
        return Baseline(
            hr=sum(v[0] for v in self._buffer) / n,
            temp=sum(v[1] for v in self._buffer) / n,
            sweat=sum(v[2] for v in self._buffer) / n,
        )
