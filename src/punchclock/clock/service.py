"""Clock actions and queries on top of the punch store.

Every query reloads punches from storage and recomputes totals from scratch;
nothing is cached between calls.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from punchclock.clock.errors import InvalidTimestamp, PunchClockError
from punchclock.clock.report import (
    HistoryDay,
    SummarySection,
    build_punch_history,
    build_summary_sections,
    generate_report,
)
from punchclock.clock.sessions import hours_worked_today, pair_sessions
from punchclock.clock.storage import PunchStorage
from punchclock.clock.timeutil import format_utc_timestamp, parse_timestamp, to_local
from punchclock.clock.totals import daily_totals, weekly_totals
from punchclock.clock.types import DayBucket, Punch, PunchType, WeekBucket
from punchclock.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class ClockStatus:
    """Snapshot of the clock.

    Attributes:
        clocked_in: Stored clocked-in flag.
        hours_today: Hours worked today, including a running session.
        last_punch: Most recent punch, if any.
        open_since: Local start of the running session derived from punches.
    """

    clocked_in: bool
    hours_today: float
    last_punch: Punch | None = None
    open_since: datetime | None = None


@dataclass
class ImportResult:
    imported: int = 0
    duplicates: int = 0
    invalid: int = 0


class PunchClockService:
    """Punch in and out, edit history and compute totals.

    Example:
        service = PunchClockService()
        service.clock_in()
        print(service.status().hours_today)
    """

    def __init__(
        self,
        storage: PunchStorage | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            storage: Punch store (defaults to the configured storage path).
            settings: Settings to use (defaults to the global settings).
        """
        self.settings = settings or default_settings
        self.storage = storage or PunchStorage(self.settings.get_storage_path())
        self.tz = self.settings.get_tzinfo()

    # -- clock actions --------------------------------------------------

    def _punch(self, punch_type: PunchType, now: datetime | None) -> Punch:
        punch = Punch(timestamp=format_utc_timestamp(now, self.tz), type=punch_type)
        self.storage.append(punch, clocked_in=punch_type == PunchType.IN)
        return punch

    def clock_in(self, now: datetime | None = None) -> Punch:
        """Record an IN punch.

        Raises:
            PunchClockError: If already clocked in.
            StoreWriteError: If the punch cannot be saved.
        """
        if self.storage.get_clock_flag():
            raise PunchClockError("Already clocked in")
        return self._punch(PunchType.IN, now)

    def clock_out(self, now: datetime | None = None) -> Punch:
        """Record an OUT punch.

        Raises:
            PunchClockError: If not clocked in.
            StoreWriteError: If the punch cannot be saved.
        """
        if not self.storage.get_clock_flag():
            raise PunchClockError("Not clocked in")
        return self._punch(PunchType.OUT, now)

    def toggle(self, now: datetime | None = None) -> Punch:
        """Clock out when clocked in, otherwise clock in."""
        punch_type = PunchType.OUT if self.storage.get_clock_flag() else PunchType.IN
        return self._punch(punch_type, now)

    # -- editing --------------------------------------------------------

    def edit_punch(
        self,
        old_timestamp: str,
        new_timestamp: str | None = None,
        new_type: PunchType | str | None = None,
    ) -> Punch:
        """Change the timestamp and/or type of a stored punch.

        Args:
            old_timestamp: Timestamp identifying the punch.
            new_timestamp: Replacement timestamp (must be valid ISO-8601).
            new_type: Replacement punch type.

        Returns:
            The updated punch.

        Raises:
            InvalidTimestamp: If ``new_timestamp`` cannot be parsed.
            PunchClockError: If no punch has ``old_timestamp``.
        """
        existing = self._find(old_timestamp)
        if new_timestamp is not None:
            parse_timestamp(new_timestamp, self.tz)

        updated = Punch(
            timestamp=new_timestamp if new_timestamp is not None else existing.timestamp,
            type=new_type if new_type is not None else existing.type,
        )
        if not self.storage.update_by_timestamp(old_timestamp, updated):
            raise PunchClockError(f"No punch at {old_timestamp}")
        return updated

    def delete_punch(self, timestamp: str) -> None:
        """Delete a stored punch.

        Raises:
            PunchClockError: If no punch has ``timestamp``.
        """
        if not self.storage.delete_by_timestamp(timestamp):
            raise PunchClockError(f"No punch at {timestamp}")

    def reset(self) -> None:
        """Delete all punches and clock out."""
        self.storage.reset_all()

    def import_punches(self, path: str | Path) -> ImportResult:
        """Import punches from a YAML or JSON file.

        The file holds a list of ``{timestamp, type}`` records, either at the
        top level or under a ``punches`` key. Records that already exist or
        do not validate are skipped.

        Args:
            path: File to import.

        Returns:
            Counts of imported and skipped records.

        Raises:
            PunchClockError: If the file cannot be parsed or holds no punch list.
        """
        with open(Path(path).expanduser(), encoding="utf-8") as f:
            try:
                data: Any = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise PunchClockError(f"Cannot parse {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("punches")
        if not isinstance(data, list):
            raise PunchClockError(f"No punch list found in {path}")

        existing = {p.timestamp for p in self.storage.list_all()}
        result = ImportResult()
        for record in data:
            try:
                punch = Punch.model_validate(record)
                parse_timestamp(punch.timestamp, self.tz)
            except (ValidationError, InvalidTimestamp) as e:
                logger.warning(f"Skipping invalid punch record {record!r}: {e}")
                result.invalid += 1
                continue

            if punch.timestamp in existing:
                result.duplicates += 1
                continue

            self.storage.append(punch)
            existing.add(punch.timestamp)
            result.imported += 1

        logger.info(
            f"Imported {result.imported} punches from {path} "
            f"({result.duplicates} duplicates, {result.invalid} invalid)"
        )
        return result

    def _find(self, timestamp: str) -> Punch:
        for punch in self.storage.list_all():
            if punch.timestamp == timestamp:
                return punch
        raise PunchClockError(f"No punch at {timestamp}")

    # -- queries --------------------------------------------------------

    def punches(self) -> list[Punch]:
        """All stored punches, newest first."""
        return self.storage.list_all()

    def status(self, now: datetime | None = None) -> ClockStatus:
        punches = self.storage.list_all()
        open_session = pair_sessions(punches, tz=self.tz).open_session
        return ClockStatus(
            clocked_in=self.storage.get_clock_flag(),
            hours_today=hours_worked_today(punches, now=now, tz=self.tz),
            last_punch=punches[0] if punches else None,
            open_since=to_local(open_session.start, self.tz) if open_session else None,
        )

    def hours_today(self, now: datetime | None = None) -> float:
        return hours_worked_today(self.storage.list_all(), now=now, tz=self.tz)

    def daily_totals(self, now: datetime | None = None) -> list[DayBucket]:
        return daily_totals(self.storage.list_all(), now=now, tz=self.tz)

    def weekly_totals(self, now: datetime | None = None) -> list[WeekBucket]:
        return weekly_totals(
            self.storage.list_all(),
            now=now,
            tz=self.tz,
            split_at_week_boundary=self.settings.split_weeks,
        )

    def summary_sections(self, now: datetime | None = None) -> list[SummarySection]:
        return build_summary_sections(
            self.storage.list_all(), now=now, tz=self.tz, split_weeks=self.settings.split_weeks
        )

    def history(self) -> list[HistoryDay]:
        return build_punch_history(self.storage.list_all(), tz=self.tz)

    def report(self, now: datetime | None = None) -> str:
        """Generate the plain-text report for all stored punches."""
        return generate_report(
            self.storage.list_all(), now=now, tz=self.tz, split_weeks=self.settings.split_weeks
        )
