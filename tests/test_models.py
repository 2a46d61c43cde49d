"""Tests for data models and reading validation."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from physio_monitor.exceptions import InvalidReading, ReadingRejected
from physio_monitor.models import (
    Baseline,
    BaselinePhase,
    BaselineStatus,
    Event,
    EventType,
    Reading,
    event_id,
)


class TestReading:
    def test_numeric_timestamp_is_epoch_seconds(self):
        reading = Reading(timestamp=60, heart_rate=70, skin_temp=36.5, sweat_level=0)
        assert reading.timestamp == datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)

    def test_naive_timestamp_is_taken_as_utc(self):
        reading = Reading(
            timestamp=datetime(2026, 1, 1, 12, 0), heart_rate=70, skin_temp=36.5, sweat_level=0,
        )
        assert reading.timestamp.tzinfo == timezone.utc

    def test_reading_is_immutable(self, make_reading):
        reading = make_reading()
        with pytest.raises(ValidationError):
            reading.heart_rate = 99.0

    @pytest.mark.parametrize(
        "field, value",
        [
            ("heart_rate", float("nan")),
            ("skin_temp", float("inf")),
            ("sweat_level", -1),
            ("heart_rate", "fast"),
            ("heart_rate", None),
        ],
    )
    def test_parse_rejects_bad_channels(self, field, value):
        raw = {"timestamp": 1, "heart_rate": 70, "skin_temp": 36.5, "sweat_level": 0, field: value}
        with pytest.raises(InvalidReading, match=field):
            Reading.parse(raw)

    def test_parse_rejects_missing_channel(self):
        with pytest.raises(InvalidReading, match="skin_temp"):
            Reading.parse({"timestamp": 1, "heart_rate": 70, "sweat_level": 0})

    def test_invalid_reading_is_a_value_error(self):
        assert issubclass(InvalidReading, ReadingRejected)
        assert issubclass(InvalidReading, ValueError)

    def test_parse_passes_readings_through(self, make_reading):
        reading = make_reading()
        assert Reading.parse(reading) is reading


class TestBaseline:
    def test_blend_moves_fraction_toward_reading(self, make_reading):
        baseline = Baseline(hr=70.0, temp=36.5, sweat=0.0)
        blended = baseline.blend(make_reading(hr=80.0, temp=37.5, sweat=100.0), 0.1)
        assert blended.hr == pytest.approx(71.0)
        assert blended.temp == pytest.approx(36.6)
        assert blended.sweat == pytest.approx(10.0)
        assert baseline.hr == 70.0  # input untouched

    def test_status_is_provisional_until_ready(self):
        assert BaselineStatus(phase=BaselinePhase.WAITING, window=15).provisional
        assert BaselineStatus(phase=BaselinePhase.LEARNING, count=3, window=15).provisional
        ready = BaselineStatus(
            phase=BaselinePhase.READY, count=15, window=15, baseline=Baseline(hr=1, temp=1, sweat=1),
        )
        assert not ready.provisional


class TestEvent:
    def test_id_derives_from_type_and_timestamp(self):
        ts = datetime(1970, 1, 1, 0, 0, 2, tzinfo=timezone.utc)
        assert event_id(EventType.STATE_CHANGE, ts) == "state-2000000"
        assert event_id(EventType.HR_DEVIATION, ts) == "hr-2000000"

    def test_create_fills_id(self):
        ts = datetime(1970, 1, 1, 0, 0, 5, tzinfo=timezone.utc)
        event = Event.create(EventType.ALERT, ts, "boom")
        assert event.id == "alert-5000000"
        assert event.timestamp == ts
        assert event.type == EventType.ALERT
