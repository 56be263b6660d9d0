"""Tests for daily and weekly totals."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from punchclock.clock import DayBucket, Punch, PunchType, WeekBucket
from punchclock.clock.totals import daily_totals, weekly_totals

UTC = timezone.utc
NEW_YORK = ZoneInfo("America/New_York")


def _in(timestamp: str) -> Punch:
    return Punch(timestamp=timestamp, type=PunchType.IN)


def _out(timestamp: str) -> Punch:
    return Punch(timestamp=timestamp, type=PunchType.OUT)


def _as_dict(buckets: list[DayBucket]) -> dict[date, float]:
    return {b.day: b.hours for b in buckets}


class TestDailyTotals:
    """Tests for per-day totals with midnight splitting."""

    def test_single_day_shift(self) -> None:
        """A 9-to-5 shift gives one 8-hour day."""
        punches = [_in("2024-01-01T09:00:00.000Z"), _out("2024-01-01T17:00:00.000Z")]

        result = daily_totals(punches, now=datetime(2024, 1, 1, 20, tzinfo=UTC), tz=UTC)

        assert result == [DayBucket(day=date(2024, 1, 1), hours=8.0)]

    def test_overnight_shift_split_at_midnight(self) -> None:
        """A 22:00 to 02:00 shift puts two hours on each day."""
        punches = [_in("2024-01-01T22:00:00.000Z"), _out("2024-01-02T02:00:00.000Z")]

        result = daily_totals(punches, now=datetime(2024, 1, 2, 9, tzinfo=UTC), tz=UTC)

        assert result == [
            DayBucket(day=date(2024, 1, 2), hours=2.0),
            DayBucket(day=date(2024, 1, 1), hours=2.0),
        ]

    def test_multi_day_session(self) -> None:
        """A session spanning several days is split across each of them."""
        punches = [_in("2024-01-01T12:00:00.000Z"), _out("2024-01-03T06:00:00.000Z")]

        result = daily_totals(punches, now=datetime(2024, 1, 3, 9, tzinfo=UTC), tz=UTC)

        assert _as_dict(result) == {
            date(2024, 1, 1): 12.0,
            date(2024, 1, 2): 24.0,
            date(2024, 1, 3): 6.0,
        }

    def test_gap_days_filled_with_zero(self) -> None:
        """Days between worked days appear with zero hours."""
        punches = [
            _in("2024-01-01T09:00:00.000Z"),
            _out("2024-01-01T17:00:00.000Z"),
            _in("2024-01-04T09:00:00.000Z"),
            _out("2024-01-04T12:00:00.000Z"),
        ]

        result = daily_totals(punches, now=datetime(2024, 1, 4, 20, tzinfo=UTC), tz=UTC)

        assert [b.day for b in result] == [
            date(2024, 1, 4),
            date(2024, 1, 3),
            date(2024, 1, 2),
            date(2024, 1, 1),
        ]
        assert [b.hours for b in result] == [3.0, 0.0, 0.0, 8.0]

    def test_open_session_extends_to_today(self) -> None:
        """A running session fills every day up to now."""
        punches = [_in("2024-01-01T09:00:00.000Z")]

        result = daily_totals(punches, now=datetime(2024, 1, 3, 10, tzinfo=UTC), tz=UTC)

        assert _as_dict(result) == {
            date(2024, 1, 1): 15.0,
            date(2024, 1, 2): 24.0,
            date(2024, 1, 3): 10.0,
        }

    def test_open_session_started_yesterday(self) -> None:
        """An open session 90 minutes old that began yesterday splits across two days."""
        now = datetime(2024, 1, 2, 0, 30, tzinfo=UTC)
        punches = [_in((now - timedelta(minutes=90)).isoformat())]

        result = daily_totals(punches, now=now, tz=UTC)

        assert _as_dict(result) == {date(2024, 1, 2): 0.5, date(2024, 1, 1): 1.0}

    def test_session_ending_at_midnight(self) -> None:
        """An OUT exactly at midnight leaves the next day at zero."""
        punches = [_in("2024-01-01T20:00:00.000Z"), _out("2024-01-02T00:00:00.000Z")]

        result = daily_totals(punches, now=datetime(2024, 1, 2, 9, tzinfo=UTC), tz=UTC)

        assert result == [
            DayBucket(day=date(2024, 1, 2), hours=0.0),
            DayBucket(day=date(2024, 1, 1), hours=4.0),
        ]

    def test_local_zone_decides_the_day(self) -> None:
        """The same instants land on different days in different zones."""
        punches = [_in("2024-01-02T03:00:00.000Z"), _out("2024-01-02T07:00:00.000Z")]
        now = datetime(2024, 1, 2, 12, tzinfo=UTC)
        eastern = timezone(timedelta(hours=-5))

        assert _as_dict(daily_totals(punches, now=now, tz=UTC)) == {date(2024, 1, 2): 4.0}
        assert _as_dict(daily_totals(punches, now=now, tz=eastern)) == {
            date(2024, 1, 1): 2.0,
            date(2024, 1, 2): 2.0,
        }

    def test_naive_timestamps_are_local(self) -> None:
        """Timestamps without an offset are taken as local wall-clock time."""
        punches = [_in("2024-01-01T22:00:00"), _out("2024-01-02T02:00:00")]
        eastern = timezone(timedelta(hours=-5))

        result = daily_totals(punches, now=datetime(2024, 1, 2, 9), tz=eastern)

        assert _as_dict(result) == {date(2024, 1, 1): 2.0, date(2024, 1, 2): 2.0}

    def test_fall_back_day_has_25_hours(self) -> None:
        """Midnight to midnight on the day DST ends is 25 elapsed hours."""
        punches = [_in("2024-11-03T04:00:00.000Z"), _out("2024-11-04T05:00:00.000Z")]

        result = daily_totals(punches, now=datetime(2024, 11, 4, 9, tzinfo=NEW_YORK), tz=NEW_YORK)

        assert result == [
            DayBucket(day=date(2024, 11, 4), hours=0.0),
            DayBucket(day=date(2024, 11, 3), hours=25.0),
        ]

    def test_empty_and_unpaired(self) -> None:
        """No sessions means no buckets."""
        now = datetime(2024, 1, 1, 12, tzinfo=UTC)

        assert daily_totals([], now=now, tz=UTC) == []
        assert daily_totals([_out("2024-01-01T09:00:00.000Z")], now=now, tz=UTC) == []

    def test_invalid_punches_excluded(self) -> None:
        punches = [
            _in("garbage"),
            _in("2024-01-01T09:00:00.000Z"),
            _out("2024-01-01T10:00:00.000Z"),
        ]

        result = daily_totals(punches, now=datetime(2024, 1, 1, 12, tzinfo=UTC), tz=UTC)

        assert result == [DayBucket(day=date(2024, 1, 1), hours=1.0)]

    def test_idempotent(self) -> None:
        punches = [_in("2024-01-01T22:00:00.000Z"), _out("2024-01-02T02:00:00.000Z"), _in("2024-01-03T08:00:00.000Z")]
        now = datetime(2024, 1, 3, 9, 15, tzinfo=UTC)

        assert daily_totals(punches, now=now, tz=UTC) == daily_totals(punches, now=now, tz=UTC)


class TestWeeklyTotals:
    """Tests for per-week totals."""

    def test_groups_by_sunday_week(self) -> None:
        """Weeks start on Sunday and are sorted newest first."""
        punches = [
            _in("2024-01-01T09:00:00.000Z"),
            _out("2024-01-01T17:00:00.000Z"),
            _in("2024-01-08T09:00:00.000Z"),
            _out("2024-01-08T12:00:00.000Z"),
        ]

        result = weekly_totals(punches, now=datetime(2024, 1, 9, tzinfo=UTC), tz=UTC)

        assert result == [
            WeekBucket(week_start=datetime(2024, 1, 7), hours=3.0),
            WeekBucket(week_start=datetime(2023, 12, 31), hours=8.0),
        ]
        assert result[1].week_end == date(2024, 1, 6)

    def test_sunday_belongs_to_its_own_week(self) -> None:
        punches = [_in("2024-01-07T00:00:00.000Z"), _out("2024-01-07T01:00:00.000Z")]

        result = weekly_totals(punches, now=datetime(2024, 1, 8, tzinfo=UTC), tz=UTC)

        assert result == [WeekBucket(week_start=datetime(2024, 1, 7), hours=1.0)]

    def test_weeks_not_gap_filled(self) -> None:
        punches = [
            _in("2024-01-01T09:00:00.000Z"),
            _out("2024-01-01T10:00:00.000Z"),
            _in("2024-01-22T09:00:00.000Z"),
            _out("2024-01-22T10:00:00.000Z"),
        ]

        result = weekly_totals(punches, now=datetime(2024, 1, 23, tzinfo=UTC), tz=UTC)

        assert [w.week_start for w in result] == [datetime(2024, 1, 21), datetime(2023, 12, 31)]

    def test_open_session_counts_until_now(self) -> None:
        punches = [_in("2024-01-01T09:00:00.000Z")]

        result = weekly_totals(punches, now=datetime(2024, 1, 1, 12, tzinfo=UTC), tz=UTC)

        assert result == [WeekBucket(week_start=datetime(2023, 12, 31), hours=3.0)]

    def test_cross_week_session_paired_within_each_week(self) -> None:
        """A Saturday-night IN runs until now in its own week; the lone Sunday OUT adds nothing."""
        punches = [_in("2024-01-06T22:00:00.000Z"), _out("2024-01-07T02:00:00.000Z")]
        now = datetime(2024, 1, 8, tzinfo=UTC)

        result = weekly_totals(punches, now=now, tz=UTC)

        assert result == [
            WeekBucket(week_start=datetime(2024, 1, 7), hours=0.0),
            WeekBucket(week_start=datetime(2023, 12, 31), hours=26.0),
        ]

    def test_cross_week_session_split_when_enabled(self) -> None:
        """With splitting enabled the shift is divided at Sunday midnight."""
        punches = [_in("2024-01-06T22:00:00.000Z"), _out("2024-01-07T02:00:00.000Z")]
        now = datetime(2024, 1, 8, tzinfo=UTC)

        result = weekly_totals(punches, now=now, tz=UTC, split_at_week_boundary=True)

        assert result == [
            WeekBucket(week_start=datetime(2024, 1, 7), hours=2.0),
            WeekBucket(week_start=datetime(2023, 12, 31), hours=2.0),
        ]
        daily_sum = sum(b.hours for b in daily_totals(punches, now=now, tz=UTC))
        assert sum(w.hours for w in result) == daily_sum

    def test_matches_daily_sum_without_cross_week_sessions(self) -> None:
        """Weekly and daily totals agree when no session crosses a week boundary."""
        punches = [
            _in("2024-01-01T09:00:00.000Z"),
            _out("2024-01-01T17:00:00.000Z"),
            _in("2024-01-02T22:00:00.000Z"),
            _out("2024-01-03T02:00:00.000Z"),
            _in("2024-01-08T09:00:00.000Z"),
            _out("2024-01-08T12:00:00.000Z"),
        ]
        now = datetime(2024, 1, 9, tzinfo=UTC)

        weekly_sum = sum(w.hours for w in weekly_totals(punches, now=now, tz=UTC))
        daily_sum = sum(d.hours for d in daily_totals(punches, now=now, tz=UTC))

        assert weekly_sum == daily_sum == 15.0

    def test_empty(self) -> None:
        assert weekly_totals([], now=datetime(2024, 1, 1, tzinfo=UTC), tz=UTC) == []
