"""Report assembly.

Turns aggregated totals into summary sections and the plain-text report
that is shared by e-mail or copied elsewhere.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from punchclock.clock.formatting import (
    format_date,
    format_hours,
    format_punch_time,
    format_week_range,
)
from punchclock.clock.sessions import sort_punches
from punchclock.clock.timeutil import to_local
from punchclock.clock.totals import daily_totals, weekly_totals
from punchclock.clock.types import Punch, PunchType

REPORT_SUBJECT = "Clock In/Out Report"
WEEKLY_TITLE = "Weekly Totals"
DAILY_TITLE = "Daily Totals"
HISTORY_TITLE = "Detailed Punch History"
DAY_RULE = "-" * 24


@dataclass(frozen=True)
class SummaryRow:
    label: str
    hours: float


@dataclass
class SummarySection:
    """A titled list of labelled hour totals."""

    title: str
    rows: list[SummaryRow] = field(default_factory=list)


@dataclass
class HistoryDay:
    """Punches of one calendar day in chronological order.

    Attributes:
        header: Day label, e.g. ``"Mon, Jan 1, 2024"``.
        entries: ``(punch type, formatted time)`` pairs.
    """

    header: str
    entries: list[tuple[PunchType, str]] = field(default_factory=list)


def build_summary_sections(
    punches: Iterable[Punch],
    now: datetime | None = None,
    tz: tzinfo | None = None,
    split_weeks: bool = False,
) -> list[SummarySection]:
    """Build the weekly and daily summary sections, in that order."""
    punches = list(punches)
    weeks = weekly_totals(punches, now=now, tz=tz, split_at_week_boundary=split_weeks)
    days = daily_totals(punches, now=now, tz=tz)

    return [
        SummarySection(
            title=WEEKLY_TITLE,
            rows=[SummaryRow(format_week_range(w.week_start), w.hours) for w in weeks],
        ),
        SummarySection(
            title=DAILY_TITLE,
            rows=[SummaryRow(format_date(d.day, include_year=True), d.hours) for d in days],
        ),
    ]


def build_punch_history(
    punches: Iterable[Punch],
    tz: tzinfo | None = None,
) -> list[HistoryDay]:
    """Group punches chronologically by local calendar day.

    Punches with unparseable timestamps are left out.
    """
    ordered, _ = sort_punches(punches, tz=tz)

    history: list[HistoryDay] = []
    for instant, punch in ordered:
        moment = to_local(instant, tz)
        header = format_date(moment.date(), include_year=True)
        if not history or history[-1].header != header:
            history.append(HistoryDay(header=header))
        history[-1].entries.append((punch.type, format_punch_time(moment)))
    return history


def _underlined(title: str, rule: str = "=") -> list[str]:
    return [title, rule * len(title)]


def render_report(sections: list[SummarySection], history: list[HistoryDay]) -> str:
    """Render summary sections and punch history as plain text."""
    lines = [REPORT_SUBJECT, ""]

    for section in sections:
        lines.extend(_underlined(section.title))
        lines.extend(f"{row.label}: {format_hours(row.hours)}" for row in section.rows)
        lines.append("")

    lines.extend(_underlined(HISTORY_TITLE))
    for index, day in enumerate(history):
        if index:
            lines.append("")
        lines.append(day.header)
        lines.append(DAY_RULE)
        lines.extend(f"{punch_type.value.upper()}: {time_text}" for punch_type, time_text in day.entries)

    return "\n".join(lines) + "\n"


def generate_report(
    punches: Iterable[Punch],
    now: datetime | None = None,
    tz: tzinfo | None = None,
    split_weeks: bool = False,
) -> str:
    """Generate the plain-text report.

    Sections appear in fixed order: weekly totals, daily totals, then the
    detailed punch history grouped by day.

    Args:
        punches: Punches in any order.
        now: Evaluation instant for an open session.
        tz: Zone defining local time.
        split_weeks: Split sessions at week boundaries in the weekly totals.

    Returns:
        Report body text.
    """
    punches = list(punches)
    sections = build_summary_sections(punches, now=now, tz=tz, split_weeks=split_weeks)
    return render_report(sections, build_punch_history(punches, tz=tz))
