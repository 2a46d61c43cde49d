"""Synthetic reading generator for demos and replay testing.

Cycles through four 30-step physiology phases (stable, drifting, sustained
response, return toward start) so that a session sees its baseline learned
and then every state exercised.  Only raw readings are produced; no state
labels.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from physio_monitor.models import Reading

PHASE_LENGTH = 30
CYCLE_LENGTH = 4 * PHASE_LENGTH

REST_HR = 72.0
REST_TEMP = 34.5
REST_SWEAT = 820.0


class ReadingSimulator:
    """Deterministic (given *seed*) source of plausible wearable readings."""

    def __init__(
        self,
        *,
        seed: int | None = None,
        start: datetime | None = None,
        interval: timedelta = timedelta(seconds=1),
    ) -> None:
        self._rng = random.Random(seed)
        self._start = start or datetime.now(timezone.utc)
        self._interval = interval
        self._step = 0

    def _jitter(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def next_reading(self) -> Reading:
        self._step += 1
        t = (self._step - 1) % CYCLE_LENGTH

        if t < PHASE_LENGTH:
            hr = REST_HR + self._jitter(-2, 2)
            temp = REST_TEMP + self._jitter(-0.1, 0.1)
            sweat = REST_SWEAT + self._jitter(-20, 20)
        elif t < 2 * PHASE_LENGTH:
            k = t - PHASE_LENGTH
            hr = REST_HR + k * 0.8 + self._jitter(0, 4)
            temp = REST_TEMP - k * 0.08 + self._jitter(0, 0.2)
            sweat = REST_SWEAT - k * 13 + self._jitter(0, 40)
        elif t < 3 * PHASE_LENGTH:
            hr = 96 + self._jitter(0, 6)
            temp = 32.1 + self._jitter(0, 0.3)
            sweat = 420 + self._jitter(0, 50)
        else:
            k = t - 3 * PHASE_LENGTH
            hr = 96 - k * 0.8 + self._jitter(0, 4)
            temp = 32.1 + k * 0.08 + self._jitter(0, 0.2)
            sweat = 420 + k * 13 + self._jitter(0, 40)

        return Reading(
            timestamp=self._start + self._interval * self._step,
            heart_rate=round(hr),
            skin_temp=round(temp, 1),
            sweat_level=round(sweat),
        )

    def generate(self, count: int) -> list[Reading]:
        return [self.next_reading() for _ in range(count)]
