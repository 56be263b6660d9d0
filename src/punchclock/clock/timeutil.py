"""Timestamp parsing and local calendar helpers.

Punches are ordered, paired and measured as aware UTC instants. Local
wall-clock time only decides which calendar day or week an instant belongs
to. Timestamps without an offset are taken as local wall-clock time in the
requested zone (the system zone when ``tz`` is None).
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo

from punchclock.clock.errors import InvalidTimestamp

MS_PER_HOUR = 3_600_000


def to_local(moment: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert a datetime to naive local wall-clock time."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


def to_instant(moment: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert a datetime to an aware UTC instant.

    Naive values are read as local wall-clock time in ``tz``.
    """
    if moment.tzinfo is None and tz is not None:
        moment = moment.replace(tzinfo=tz)
    return moment.astimezone(timezone.utc)


def parse_instant(raw: object, tz: tzinfo | None = None) -> datetime:
    """Parse an ISO-8601 punch timestamp into an aware UTC instant.

    Args:
        raw: Timestamp string (``Z`` suffix accepted) or datetime.
        tz: Zone used for timestamps without an offset (None for the system zone).

    Returns:
        Aware datetime in UTC.

    Raises:
        InvalidTimestamp: If the value is not a parseable ISO-8601 instant.
    """
    if isinstance(raw, datetime):
        return to_instant(raw, tz)
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidTimestamp(raw, "expected a non-empty string")

    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidTimestamp(raw, str(e)) from e
    return to_instant(parsed, tz)


def parse_timestamp(raw: object, tz: tzinfo | None = None) -> datetime:
    """Parse an ISO-8601 punch timestamp into naive local wall-clock time."""
    return to_local(parse_instant(raw, tz), tz)


def resolve_now(now: datetime | None = None, tz: tzinfo | None = None) -> datetime:
    """Return the evaluation instant as an aware UTC datetime."""
    if now is None:
        return datetime.now(timezone.utc)
    return to_instant(now, tz)


def local_date(instant: datetime, tz: tzinfo | None = None) -> date:
    return to_local(instant, tz).date()


def local_midnight(day: date, tz: tzinfo | None = None) -> datetime:
    """The instant at which ``day`` starts in local time."""
    return to_instant(datetime.combine(day, time()), tz)


def start_of_day(instant: datetime, tz: tzinfo | None = None) -> datetime:
    return local_midnight(local_date(instant, tz), tz)


def start_of_next_day(instant: datetime, tz: tzinfo | None = None) -> datetime:
    """Local midnight following ``instant``; the exclusive end of its day."""
    return local_midnight(local_date(instant, tz) + timedelta(days=1), tz)


def start_of_week(instant: datetime, tz: tzinfo | None = None) -> datetime:
    """Naive local Sunday 00:00:00 of the week containing ``instant``."""
    day = local_date(instant, tz)
    days_since_sunday = (day.weekday() + 1) % 7
    return datetime.combine(day - timedelta(days=days_since_sunday), time())


def start_of_next_week(instant: datetime, tz: tzinfo | None = None) -> datetime:
    """The instant at which the following Sunday-start week begins."""
    return to_instant(start_of_week(instant, tz) + timedelta(days=7), tz)


def iter_days(first: date, last: date):
    """Yield every calendar day from ``first`` to ``last`` inclusive."""
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def hours_between(start: datetime, end: datetime) -> float:
    """Unrounded hours from ``start`` to ``end`` at millisecond resolution."""
    milliseconds = (end - start) // timedelta(milliseconds=1)
    return milliseconds / MS_PER_HOUR


def format_utc_timestamp(moment: datetime | None = None, tz: tzinfo | None = None) -> str:
    """Format an instant as a UTC ISO-8601 string with millisecond precision.

    Naive values are read as local wall-clock time in ``tz``.
    """
    moment = to_instant(moment, tz) if moment else datetime.now(timezone.utc)
    text = moment.isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")
