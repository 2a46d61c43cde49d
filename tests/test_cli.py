"""Tests for configuration and the command-line entrypoint."""

import json

import pytest
from structlog.testing import capture_logs

from physio_monitor.config import MonitorConfig, Settings, get_settings
from physio_monitor.main import main


class TestSettings:
    def test_defaults_match_monitor_config(self):
        assert Settings(_env_file=None).monitor_config() == MonitorConfig()

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PHYSIO_MONITOR_BASELINE_WINDOW", "20")
        monkeypatch.setenv("PHYSIO_MONITOR_STRONG_THRESHOLD", "0.3")
        config = Settings(_env_file=None).monitor_config()
        assert config.baseline_window == 20
        assert config.strong_threshold == 0.3


@pytest.fixture(autouse=True)
def _cli_logs(monkeypatch):
    """Keep stdout clean for JSON parsing and expose captured log entries."""
    get_settings.cache_clear()
    monkeypatch.setattr("physio_monitor.main.setup_logging", lambda level: None)
    with capture_logs() as logs:
        yield logs
    get_settings.cache_clear()


class TestCli:
    def test_replay_prints_results(self, tmp_path, capsys, _cli_logs):
        lines = ["%d,70,36.5,0" % i for i in range(1, 16)] + ["16,72,36.5,0", "17,91,36.5,0", "18,71,36.5,0"]
        path = tmp_path / "session.csv"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

        main(["replay", str(path), "--events-only", "--summary"])

        out = capsys.readouterr().out.strip().splitlines()
        first, second, summary = (json.loads(line) for line in out)
        assert first["classified"]["state"] == "ALERT"
        assert [e["type"] for e in second["events"]] == ["state_change", "recovery"]
        assert summary["count"] == 18
        assert any(e["event"] == "session.event" and e["type"] == "alert" for e in _cli_logs)

    def test_summary_event_log_follows_settings(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("PHYSIO_MONITOR_EVENT_LOG_SIZE", "2")
        lines = ["%d,70,36.5,0" % i for i in range(1, 16)] + ["16,72,36.5,0", "17,91,36.5,0", "18,71,36.5,0"]
        path = tmp_path / "session.csv"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

        main(["replay", str(path), "--events-only", "--summary"])

        summary = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert summary["recent_events"] == [
            "Recovery started - Vitals returning to baseline",
            "Health state changed to RECOVERY",
        ]

    def test_simulate(self, capsys):
        main(["simulate", "--count", "5", "--seed", "1"])
        assert len(capsys.readouterr().out.strip().splitlines()) == 5

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit):
            main([])
