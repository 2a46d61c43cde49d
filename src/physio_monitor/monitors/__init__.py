"""Baseline estimation, deviation scoring, state classification and event detection."""

from physio_monitor.monitors.baseline import BaselineEstimator
from physio_monitor.monitors.classifier import StateClassifier, resolve_state
from physio_monitor.monitors.deviation import score, score_reading
from physio_monitor.monitors.events import detect_events

__all__ = [
    "BaselineEstimator",
    "StateClassifier",
    "detect_events",
    "resolve_state",
    "score",
    "score_reading",
]
