"""Deviation scoring: relative distance of each channel from the baseline."""

from __future__ import annotations

from physio_monitor.models import (
    Baseline,
    ChannelDeviation,
    DeviationResult,
    DeviationStatus,
    Reading,
)

MILD_THRESHOLD = 0.10


def score(
    value: float,
    baseline_value: float,
    mild_threshold: float = MILD_THRESHOLD,
) -> ChannelDeviation:
    """Score one channel value against its baseline.

    The magnitude is ``|value - baseline| / baseline``, dividing by 1 when
    the baseline is zero.
    """
    divisor = baseline_value if baseline_value != 0 else 1
    magnitude = abs(value - baseline_value) / divisor

    if magnitude < mild_threshold:
        status = DeviationStatus.NORMAL
    elif value > baseline_value:
        status = DeviationStatus.HIGHER
    else:
        status = DeviationStatus.LOWER
    return ChannelDeviation(status=status, magnitude=magnitude)


def score_reading(
    reading: Reading,
    baseline: Baseline,
    mild_threshold: float = MILD_THRESHOLD,
) -> DeviationResult:
    """Score all three channels independently."""
    return DeviationResult(
        hr=score(reading.heart_rate, baseline.hr, mild_threshold),
        temp=score(reading.skin_temp, baseline.temp, mild_threshold),
        sweat=score(reading.sweat_level, baseline.sweat, mild_threshold),
    )
