"""Analysis helpers: pandas-based utilities for reviewing a classified session."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import pandas as pd
import structlog

from physio_monitor.models import HealthState, SessionResult

logger = structlog.get_logger(__name__)

_COLUMNS = [
    "timestamp", "heart_rate", "skin_temp", "sweat_level",
    "baseline_hr", "baseline_temp", "baseline_sweat", "state",
    "max_magnitude", "events",
]


def results_to_dataframe(results: Sequence[SessionResult]) -> pd.DataFrame:
    """Load session results into a :class:`pandas.DataFrame`.

    The ``timestamp`` column is set as the index; ``events`` holds the
    event types fired by each reading, separated by ``;``.
    """
    records = [
        {
            **r.classified.model_dump(),
            "state": r.classified.state.value,
            "max_magnitude": r.deviation.max_magnitude,
            "events": ";".join(e.type.value for e in r.events),
        }
        for r in results
    ]
    df = pd.DataFrame(records, columns=_COLUMNS)
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"])
        df = df.set_index("timestamp").sort_index()
    return df


def state_summary(df: pd.DataFrame) -> dict[str, Any]:
    """Return per-state counts, shares and the number of state transitions.

    Expects a ``state`` column as produced by :func:`results_to_dataframe`.
    """
    if df.empty or "state" not in df.columns:
        return {"count": 0}

    counts = df["state"].value_counts()
    total = int(counts.sum())
    transitions = int((df["state"] != df["state"].shift()).sum()) - 1

    return {
        "count": total,
        "states": {s.value: int(counts.get(s.value, 0)) for s in HealthState},
        "share": {s.value: round(float(counts.get(s.value, 0)) / total, 4) for s in HealthState},
        "transitions": max(transitions, 0),
        "hr_mean": round(float(df["heart_rate"].mean()), 2),
        "max_magnitude": round(float(df["max_magnitude"].max()), 4),
    }


def export_results_csv(results: Sequence[SessionResult], output_path: str | Path) -> Path:
    """Write session results to CSV and return the resolved path."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    df = results_to_dataframe(results)
    df.to_csv(output)
    logger.info("export.csv_written", path=str(output), rows=len(df))
    return output
