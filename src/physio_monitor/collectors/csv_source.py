"""Reading ingress adapters: device CSV lines and stored table rows.

Both adapters reject anything that would not form a complete
:class:`Reading` rather than zero-filling missing channels.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Mapping

import structlog

from physio_monitor.exceptions import InvalidReading
from physio_monitor.models import Reading

logger = structlog.get_logger(__name__)

# time,heart_rate,skin_temp,sweat_level[,baseline_hr,baseline_temp,baseline_sweat,state]
_SHORT_FIELDS = 4
_DEVICE_FIELDS = 8


def _number(text: str, field: str) -> float:
    try:
        return float(text.strip())
    except ValueError as exc:
        raise InvalidReading(f"Unparseable {field}: {text!r}") from exc


def _timestamp(text: str) -> datetime | float:
    text = text.strip()
    try:
        return float(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidReading(f"Unparseable timestamp: {text!r}") from exc


def parse_csv_line(line: str) -> Reading:
    """Parse one line emitted by the wearable.

    The device's eight-field form carries its own baseline and state labels;
    those are ignored because the session learns its own baseline.
    """
    parts = line.strip().split(",")
    if len(parts) not in (_SHORT_FIELDS, _DEVICE_FIELDS):
        raise InvalidReading(
            f"Expected {_SHORT_FIELDS} or {_DEVICE_FIELDS} fields, got {len(parts)}."
        )
    return Reading.parse({
        "timestamp": _timestamp(parts[0]),
        "heart_rate": _number(parts[1], "heart_rate"),
        "skin_temp": _number(parts[2], "skin_temp"),
        "sweat_level": _number(parts[3], "sweat_level"),
    })


def iter_csv_readings(path: str | Path) -> Iterator[Reading]:
    """Yield readings from a CSV file, skipping blank, comment and bad lines.

    A header line (first field not numeric or ISO-8601) is skipped as a bad
    line like any other.
    """
    source = Path(path)
    skipped = 0
    with source.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            try:
                yield parse_csv_line(line)
            except InvalidReading as exc:
                skipped += 1
                logger.warning("csv_source.line_skipped", path=str(source), line=lineno, error=str(exc))
    if skipped:
        logger.info("csv_source.done", path=str(source), skipped=skipped)


def reading_from_row(row: Mapping[str, Any]) -> Reading:
    """Map a stored ``health_data`` row onto a :class:`Reading`.

    Rows carry ``heart_rate``, ``skin_temp``, ``sweat_level`` (sometimes
    stored as text) and ``created_at``.
    """
    missing = [
        k for k in ("heart_rate", "skin_temp", "sweat_level", "created_at")
        if row.get(k) is None or row.get(k) == ""
    ]
    if missing:
        raise InvalidReading(f"Row is missing {missing}.")

    sweat = row["sweat_level"]
    if isinstance(sweat, str):
        sweat = _number(sweat, "sweat_level")

    return Reading.parse({
        "timestamp": row["created_at"],
        "heart_rate": row["heart_rate"],
        "skin_temp": row["skin_temp"],
        "sweat_level": sweat,
    })
