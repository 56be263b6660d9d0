"""Daily and weekly hour totals.

Daily totals split every session at local midnight so overnight shifts land
on the right calendar days. Weekly totals group punches by their Sunday-start
week and pair within each group, so a trailing IN in a week runs until now
even when its OUT falls in the next week. With ``split_at_week_boundary``
sessions are paired globally and split at Sunday midnight instead.
"""

from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable
from datetime import date, datetime, tzinfo

from punchclock.clock.sessions import pair_sorted, sort_punches
from punchclock.clock.timeutil import (
    hours_between,
    iter_days,
    local_date,
    resolve_now,
    start_of_next_day,
    start_of_next_week,
    start_of_week,
)
from punchclock.clock.types import DayBucket, Punch, WeekBucket


def _split_session(
    start: datetime,
    end: datetime,
    next_boundary: Callable[[datetime], datetime],
    key: Callable[[datetime], Hashable],
    buckets: dict,
) -> None:
    """Walk ``[start, end)`` segment by segment, adding hours per bucket.

    The cursor jumps to the next boundary on every iteration, so the walk
    always terminates; empty segments add nothing.
    """
    cursor = start
    while cursor < end:
        boundary = next_boundary(cursor)
        segment_end = min(end, boundary)
        if segment_end > cursor:
            buckets[key(cursor)] += hours_between(cursor, segment_end)
        cursor = boundary


def daily_totals(
    punches: Iterable[Punch],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[DayBucket]:
    """Hours per local calendar day, newest day first.

    The result covers every day from the first punch to the last punch (or
    to today while a session is open); days without work are reported with
    zero hours.

    Args:
        punches: Punches in any order.
        now: Evaluation instant for an open session.
        tz: Zone defining local time.

    Returns:
        Day buckets sorted by date descending, empty if no session touched
        any day.
    """
    now = resolve_now(now, tz)
    ordered, invalid = sort_punches(punches, tz=tz)
    if not ordered:
        return []

    pairing = pair_sorted(ordered, invalid)
    hours: defaultdict[date, float] = defaultdict(float)
    for session in pairing.all_sessions():
        _split_session(
            session.start,
            session.resolve_end(now),
            lambda cursor: start_of_next_day(cursor, tz),
            lambda cursor: local_date(cursor, tz),
            hours,
        )

    if not hours:
        return []

    first_day = min(local_date(ordered[0][0], tz), min(hours))
    last_moment = now if pairing.open_session else ordered[-1][0]
    last_day = local_date(last_moment, tz)
    last_day = max(last_day, max(hours))

    return [
        DayBucket(day=day, hours=round(hours.get(day, 0.0), 2))
        for day in sorted(iter_days(first_day, last_day), reverse=True)
    ]


def weekly_totals(
    punches: Iterable[Punch],
    now: datetime | None = None,
    tz: tzinfo | None = None,
    split_at_week_boundary: bool = False,
) -> list[WeekBucket]:
    """Hours per Sunday-start week, newest week first.

    Only weeks containing at least one punch are reported.

    Args:
        punches: Punches in any order.
        now: Evaluation instant for an open session.
        tz: Zone defining local time.
        split_at_week_boundary: Pair all punches globally and split sessions
            at Sunday midnight instead of pairing within each week.

    Returns:
        Week buckets sorted by week start descending.
    """
    now = resolve_now(now, tz)
    ordered, invalid = sort_punches(punches, tz=tz)
    if not ordered:
        return []

    groups: defaultdict[datetime, list[tuple[datetime, Punch]]] = defaultdict(list)
    for moment, punch in ordered:
        groups[start_of_week(moment, tz)].append((moment, punch))

    if split_at_week_boundary:
        hours = _split_weekly(ordered, invalid, now, tz)
        for week in groups:
            hours.setdefault(week, 0.0)
    else:
        hours = {week: _grouped_week_hours(group, now) for week, group in groups.items()}

    return [
        WeekBucket(week_start=week, hours=round(total, 2))
        for week, total in sorted(hours.items(), reverse=True)
    ]


def _grouped_week_hours(group: list[tuple[datetime, Punch]], now: datetime) -> float:
    """Hours of the sessions paired within one week's punches."""
    total = 0.0
    for session in pair_sorted(group).all_sessions():
        end = session.resolve_end(now)
        if end > session.start:
            total += hours_between(session.start, end)
    return total


def _split_weekly(
    ordered: list[tuple[datetime, Punch]],
    invalid: list[Punch],
    now: datetime,
    tz: tzinfo | None,
) -> dict[datetime, float]:
    hours: defaultdict[datetime, float] = defaultdict(float)
    for session in pair_sorted(ordered, invalid).all_sessions():
        _split_session(
            session.start,
            session.resolve_end(now),
            lambda cursor: start_of_next_week(cursor, tz),
            lambda cursor: start_of_week(cursor, tz),
            hours,
        )
    return dict(hours)
