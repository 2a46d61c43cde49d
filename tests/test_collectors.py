"""Tests for reading ingress adapters and the simulator."""

from datetime import datetime, timezone

import pytest

from physio_monitor.collectors.csv_source import iter_csv_readings, parse_csv_line, reading_from_row
from physio_monitor.collectors.simulator import CYCLE_LENGTH, ReadingSimulator
from physio_monitor.exceptions import InvalidReading
from physio_monitor.models import HealthState
from physio_monitor.session import MonitoringSession


class TestCsvLines:
    def test_device_line_ignores_upstream_labels(self):
        reading = parse_csv_line("12,75,34.6,810,72,34.5,820,ALERT\n")
        assert reading.timestamp == datetime(1970, 1, 1, 0, 0, 12, tzinfo=timezone.utc)
        assert reading.heart_rate == 75.0
        assert reading.skin_temp == 34.6
        assert reading.sweat_level == 810.0

    def test_short_line_with_iso_timestamp(self):
        reading = parse_csv_line("2026-03-01T09:00:00+00:00,70,36.5,0")
        assert reading.timestamp == datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "line",
        [
            "1,70,36.5",
            "1,70,36.5,0,70,36.5",
            "1,abc,36.5,0",
            "yesterday,70,36.5,0",
            "1,nan,36.5,0",
            "1,70,36.5,-4",
        ],
    )
    def test_bad_lines_are_rejected(self, line):
        with pytest.raises(InvalidReading):
            parse_csv_line(line)

    def test_file_iteration_skips_bad_lines(self, tmp_path):
        path = tmp_path / "readings.csv"
        path.write_text(
            "time,heart_rate,skin_temp,sweat_level\n"
            "# warm-up\n"
            "1,70,36.5,0\n"
            "\n"
            "2,71,36.5,oops\n"
            "3,72,36.4,10\n",
            encoding="utf-8",
        )
        readings = list(iter_csv_readings(path))
        assert [r.heart_rate for r in readings] == [70.0, 72.0]


class TestStoredRows:
    def test_row_with_text_sweat(self):
        reading = reading_from_row({
            "heart_rate": 88,
            "skin_temp": 35.9,
            "sweat_level": "640",
            "state": "SHIFT",
            "created_at": "2026-03-01T09:00:05Z",
        })
        assert reading.sweat_level == 640.0
        assert reading.timestamp == datetime(2026, 3, 1, 9, 0, 5, tzinfo=timezone.utc)

    @pytest.mark.parametrize("missing", ["heart_rate", "skin_temp", "sweat_level", "created_at"])
    def test_null_channels_are_rejected_not_zero_filled(self, missing):
        row = {
            "heart_rate": 70,
            "skin_temp": 36.5,
            "sweat_level": "0",
            "created_at": "2026-03-01T09:00:05Z",
            missing: None,
        }
        with pytest.raises(InvalidReading, match=missing):
            reading_from_row(row)


class TestSimulator:
    def test_seeded_runs_are_reproducible(self):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        a = ReadingSimulator(seed=7, start=start).generate(20)
        b = ReadingSimulator(seed=7, start=start).generate(20)
        assert a == b

    def test_timestamps_strictly_increase(self):
        readings = ReadingSimulator(seed=1).generate(10)
        assert all(x.timestamp < y.timestamp for x, y in zip(readings, readings[1:]))

    def test_full_cycle_drives_every_state(self):
        session = MonitoringSession()
        results = session.process_batch(ReadingSimulator(seed=3).generate(CYCLE_LENGTH))
        states = {r.classified.state for r in results}
        assert {HealthState.NORMAL, HealthState.SHIFT, HealthState.ALERT} <= states
        assert len(results) == CYCLE_LENGTH
