"""Session pairing and hours-worked calculations.

Punches are paired into IN to OUT sessions by scanning them in ascending
instant order with a single open-IN slot. Ordering and durations use UTC
instants, so a wall clock that falls back an hour cannot reorder punches:

- An IN punch overwrites the slot. A previous IN that was never closed is
  discarded and contributes nothing.
- An OUT punch closes the slot. If it is at or before the IN it closes, the
  pair is discarded with zero duration.
- An IN left in the slot at the end is the open session; it runs until the
  evaluation instant.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, tzinfo

from punchclock.clock.errors import InvalidTimestamp
from punchclock.clock.timeutil import (
    hours_between,
    parse_instant,
    resolve_now,
    start_of_day,
    start_of_next_day,
)
from punchclock.clock.types import Punch, PunchType, Session, SessionPairing

logger = logging.getLogger(__name__)


def sort_punches(
    punches: Iterable[Punch],
    tz: tzinfo | None = None,
    strict: bool = False,
) -> tuple[list[tuple[datetime, Punch]], list[Punch]]:
    """Parse and sort punches in ascending time order.

    Args:
        punches: Punches in any order.
        tz: Zone defining local time.
        strict: Raise on the first unparseable timestamp instead of skipping it.

    Returns:
        Tuple of (sorted ``(UTC instant, punch)`` pairs, invalid punches).

    Raises:
        InvalidTimestamp: If ``strict`` and a timestamp cannot be parsed.
    """
    parsed: list[tuple[datetime, Punch]] = []
    invalid: list[Punch] = []

    for punch in punches:
        try:
            parsed.append((parse_instant(punch.timestamp, tz), punch))
        except InvalidTimestamp as e:
            if strict:
                raise
            logger.warning(f"Skipping punch with unparseable timestamp: {e}")
            invalid.append(punch)

    parsed.sort(key=lambda item: item[0])
    return parsed, invalid


def pair_sessions(
    punches: Iterable[Punch],
    tz: tzinfo | None = None,
    strict: bool = False,
) -> SessionPairing:
    """Pair punches into closed sessions and at most one open session.

    Args:
        punches: Punches in any order.
        tz: Zone defining local time (None for the system zone).
        strict: Reject the whole batch on an unparseable timestamp.

    Returns:
        The pairing result.

    Raises:
        InvalidTimestamp: If ``strict`` and a timestamp cannot be parsed.
    """
    ordered, invalid = sort_punches(punches, tz=tz, strict=strict)
    return pair_sorted(ordered, invalid)


def pair_sorted(
    ordered: list[tuple[datetime, Punch]],
    invalid: list[Punch] | None = None,
) -> SessionPairing:
    """Pair punches already parsed and sorted by :func:`sort_punches`."""
    pairing = SessionPairing(invalid=list(invalid or []))

    open_in: tuple[datetime, Punch] | None = None
    for moment, punch in ordered:
        if punch.type == PunchType.IN:
            if open_in is not None:
                logger.debug(f"Discarding dangling IN punch at {open_in[1].timestamp}")
                pairing.discarded.append(open_in[1])
            open_in = (moment, punch)
        elif open_in is None:
            logger.debug(f"Ignoring OUT punch at {punch.timestamp} with no open IN")
            pairing.discarded.append(punch)
        else:
            if moment > open_in[0]:
                pairing.sessions.append(Session(start=open_in[0], end=moment))
            else:
                logger.debug(
                    f"Discarding OUT punch at {punch.timestamp}: "
                    f"not after IN at {open_in[1].timestamp}"
                )
                pairing.discarded.append(punch)
            open_in = None

    if open_in is not None:
        pairing.open_session = Session(start=open_in[0])

    return pairing


def hours_worked_today(
    punches: Iterable[Punch],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> float:
    """Total hours worked during the current local day.

    Every session (the open one ending at ``now``) is clipped to today's
    window. Rounding to two decimals happens once, on the total.

    Args:
        punches: Punches in any order.
        now: Evaluation instant (defaults to the current time).
        tz: Zone defining local time.

    Returns:
        Hours worked today, rounded to 2 decimal places.
    """
    now = resolve_now(now, tz)
    today_start = start_of_day(now, tz)
    today_end = start_of_next_day(now, tz)

    total = 0.0
    for session in pair_sessions(punches, tz=tz).all_sessions():
        effective_start = max(session.start, today_start)
        effective_end = min(session.resolve_end(now), today_end)
        if effective_start < effective_end:
            total += hours_between(effective_start, effective_end)

    return round(total, 2)


def total_hours(
    punches: Iterable[Punch],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> float:
    """Total hours across every paired session, the open one running until now."""
    now = resolve_now(now, tz)
    total = 0.0
    for session in pair_sessions(punches, tz=tz).all_sessions():
        end = session.resolve_end(now)
        if end > session.start:
            total += hours_between(session.start, end)
    return round(total, 2)
