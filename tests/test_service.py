"""Tests for the punch clock service."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo
from pathlib import Path

import pytest
import yaml

from punchclock.clock import InvalidTimestamp, Punch, PunchClockError, PunchType
from punchclock.clock.service import PunchClockService
from punchclock.clock.storage import PunchStorage
from punchclock.config import Settings

UTC = timezone.utc


def _at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    return datetime(2024, 1, day, hour, minute, tzinfo=UTC)


@pytest.fixture
def service(tmp_path: Path) -> PunchClockService:
    settings = Settings(_env_file=None, storage_path=tmp_path / "punches.json")
    service = PunchClockService(storage=PunchStorage(settings.get_storage_path()), settings=settings)
    service.tz = UTC
    return service


class TestClockActions:
    """Tests for clocking in and out."""

    def test_clock_in_records_utc_punch(self, service: PunchClockService) -> None:
        punch = service.clock_in(now=_at(9))

        assert punch == Punch(timestamp="2024-01-01T09:00:00.000Z", type=PunchType.IN)
        assert service.storage.get_clock_flag() is True
        assert service.punches() == [punch]

    def test_clock_in_out_cycle(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(9))
        service.clock_out(now=_at(17))

        status = service.status(now=_at(20))

        assert status.clocked_in is False
        assert status.hours_today == 8.0
        assert status.open_since is None
        assert status.last_punch.type == PunchType.OUT

    def test_naive_now_read_in_configured_zone(self, service: PunchClockService) -> None:
        service.tz = ZoneInfo("America/New_York")

        punch = service.clock_in(now=datetime(2024, 1, 1, 9))

        assert punch.timestamp == "2024-01-01T14:00:00.000Z"

    def test_punch_and_flag_saved_in_one_write(self, service: PunchClockService, monkeypatch) -> None:
        writes = []
        original_write = PunchStorage._write_data

        def counting_write(storage, data):
            writes.append(data.clocked_in)
            original_write(storage, data)

        monkeypatch.setattr(PunchStorage, "_write_data", counting_write)

        service.clock_in(now=_at(9))

        assert writes == [True]
        assert service.storage.get_clock_flag() is True

    def test_double_clock_in_rejected(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(9))

        with pytest.raises(PunchClockError, match="Already clocked in"):
            service.clock_in(now=_at(10))

    def test_clock_out_when_out_rejected(self, service: PunchClockService) -> None:
        with pytest.raises(PunchClockError, match="Not clocked in"):
            service.clock_out(now=_at(10))

    def test_toggle_alternates(self, service: PunchClockService) -> None:
        first = service.toggle(now=_at(9))
        second = service.toggle(now=_at(12))

        assert first.type == PunchType.IN
        assert second.type == PunchType.OUT
        assert service.hours_today(now=_at(13)) == 3.0

    def test_status_while_running(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(10, 30))

        status = service.status(now=_at(12))

        assert status.clocked_in is True
        assert status.open_since == datetime(2024, 1, 1, 10, 30)
        assert status.hours_today == 1.5


class TestEditing:
    """Tests for editing, deleting and resetting."""

    def test_edit_timestamp(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(9))
        service.clock_out(now=_at(17))

        service.edit_punch("2024-01-01T09:00:00.000Z", new_timestamp="2024-01-01T08:00:00.000Z")

        assert service.hours_today(now=_at(20)) == 9.0

    def test_edit_type(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(9))

        updated = service.edit_punch("2024-01-01T09:00:00.000Z", new_type="out")

        assert updated.type == PunchType.OUT
        assert updated.timestamp == "2024-01-01T09:00:00.000Z"

    def test_edit_rejects_bad_timestamp(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(9))

        with pytest.raises(InvalidTimestamp):
            service.edit_punch("2024-01-01T09:00:00.000Z", new_timestamp="yesterday-ish")

    def test_edit_missing_punch(self, service: PunchClockService) -> None:
        with pytest.raises(PunchClockError, match="No punch"):
            service.edit_punch("2024-01-01T09:00:00.000Z", new_type="out")

    def test_delete(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(9))

        service.delete_punch("2024-01-01T09:00:00.000Z")

        assert service.punches() == []
        with pytest.raises(PunchClockError):
            service.delete_punch("2024-01-01T09:00:00.000Z")

    def test_reset(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(9))

        service.reset()

        assert service.punches() == []
        assert service.status(now=_at(10)).clocked_in is False


class TestImport:
    """Tests for importing punches from a file."""

    def test_import_yaml(self, service: PunchClockService, tmp_path: Path) -> None:
        source = tmp_path / "punches.yaml"
        source.write_text(yaml.safe_dump({
            "punches": [
                {"timestamp": "2024-01-01T09:00:00.000Z", "type": "in"},
                {"timestamp": "2024-01-01T17:00:00.000Z", "type": "OUT"},
                {"timestamp": "later", "type": "in"},
                {"timestamp": "2024-01-01T18:00:00.000Z", "type": "break"},
            ]
        }))

        result = service.import_punches(source)

        assert result.imported == 2
        assert result.invalid == 2
        assert service.hours_today(now=_at(20)) == 8.0

    def test_import_skips_duplicates(self, service: PunchClockService, tmp_path: Path) -> None:
        service.clock_in(now=_at(9))
        source = tmp_path / "punches.json"
        source.write_text(
            '[{"timestamp": "2024-01-01T09:00:00.000Z", "type": "in"},'
            ' {"timestamp": "2024-01-01T12:00:00.000Z", "type": "out"}]'
        )

        result = service.import_punches(source)

        assert result.imported == 1
        assert result.duplicates == 1
        assert len(service.punches()) == 2

    def test_import_requires_list(self, service: PunchClockService, tmp_path: Path) -> None:
        source = tmp_path / "punches.yaml"
        source.write_text("hello: world\n")

        with pytest.raises(PunchClockError):
            service.import_punches(source)

    def test_import_malformed_yaml(self, service: PunchClockService, tmp_path: Path) -> None:
        source = tmp_path / "bad.yaml"
        source.write_text("punches: [unclosed\n")

        with pytest.raises(PunchClockError, match="Cannot parse"):
            service.import_punches(source)
        assert service.punches() == []


class TestQueries:
    """Tests for totals and reports through the service."""

    def test_totals_and_report(self, service: PunchClockService) -> None:
        service.clock_in(now=_at(22))
        service.clock_out(now=_at(2, day=2))
        now = _at(9, day=2)

        days = service.daily_totals(now=now)
        weeks = service.weekly_totals(now=now)
        report = service.report(now=now)

        assert [(d.day, d.hours) for d in days] == [(date(2024, 1, 2), 2.0), (date(2024, 1, 1), 2.0)]
        assert [w.hours for w in weeks] == [4.0]
        assert "Tue, Jan 2, 2024: 2 hours" in report
        assert "Mon, Jan 1, 2024: 2 hours" in report
        assert [s.title for s in service.summary_sections(now=now)] == ["Weekly Totals", "Daily Totals"]
        assert [day.header for day in service.history()] == ["Mon, Jan 1, 2024", "Tue, Jan 2, 2024"]
