"""Centralised settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_DISCLAIMER = (
    "This alert is generated by a research monitor and is not a medical diagnosis."
)


class MonitorConfig(BaseModel):
    """Immutable constant set handed to every core component.

    One instance is shared by the estimator, scorer, classifier and event
    detector of a session so that fallback values and thresholds are never
    re-derived at call sites.
    """

    model_config = ConfigDict(frozen=True)

    baseline_window: int = Field(15, ge=1)
    adapt_alpha: float = Field(0.1, gt=0.0, le=1.0)
    adapt_start: int = Field(10, ge=1)
    mild_threshold: float = Field(0.10, ge=0.0)
    strong_threshold: float = Field(0.25, ge=0.0)

    fallback_hr: float = 70.0
    fallback_temp: float = 36.5
    fallback_sweat: float = 0.0

    sweat_spike_delta: float = 100.0
    hr_deviation_bpm: float = 20.0


class Settings(BaseSettings):
    """All runtime configuration for the monitor.

    Every variable lives in the flat ``PHYSIO_MONITOR_`` namespace, e.g.
    ``PHYSIO_MONITOR_BASELINE_WINDOW=20``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PHYSIO_MONITOR_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Baseline ──────────────────────────────────────────────
    baseline_window: int = 15
    adapt_alpha: float = 0.1
    adapt_start: int = 10  # consecutive NORMAL readings before blending

    # ── Classification ────────────────────────────────────────
    mild_threshold: float = 0.10
    strong_threshold: float = 0.25

    # ── Fallback baseline (used before any reading is seen) ───
    fallback_hr: float = 70.0
    fallback_temp: float = 36.5
    fallback_sweat: float = 0.0

    # ── Event detection ───────────────────────────────────────
    sweat_spike_delta: float = 100.0
    hr_deviation_bpm: float = 20.0

    # ── Presentation buffers ──────────────────────────────────
    event_log_size: int = 50
    trend_history_size: int = 100

    # ── Notifications ─────────────────────────────────────────
    webhook_url: str = ""
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    notification_email_from: str = ""
    notification_email_to: str = ""
    alert_disclaimer: str = DEFAULT_DISCLAIMER

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def monitor_config(self) -> MonitorConfig:
        """Build the core constant set from these settings."""
        return MonitorConfig(
            baseline_window=self.baseline_window,
            adapt_alpha=self.adapt_alpha,
            adapt_start=self.adapt_start,
            mild_threshold=self.mild_threshold,
            strong_threshold=self.strong_threshold,
            fallback_hr=self.fallback_hr,
            fallback_temp=self.fallback_temp,
            fallback_sweat=self.fallback_sweat,
            sweat_spike_delta=self.sweat_spike_delta,
            hr_deviation_bpm=self.hr_deviation_bpm,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
