"""Punch clock core: session pairing, totals, reports and storage.

Example:
    from punchclock.clock import Punch, daily_totals, generate_report

    punches = [
        Punch(timestamp="2024-01-01T22:00:00.000Z", type="in"),
        Punch(timestamp="2024-01-02T02:00:00.000Z", type="out"),
    ]
    for bucket in daily_totals(punches):
        print(bucket.day, bucket.hours)
"""

from punchclock.clock.errors import (
    InvalidTimestamp,
    PunchClockError,
    StoreError,
    StoreReadError,
    StoreWriteError,
)
from punchclock.clock.formatting import (
    format_date,
    format_hours,
    format_punch_time,
    format_week_range,
)
from punchclock.clock.report import (
    REPORT_SUBJECT,
    HistoryDay,
    SummaryRow,
    SummarySection,
    build_punch_history,
    build_summary_sections,
    generate_report,
)
from punchclock.clock.service import ClockStatus, ImportResult, PunchClockService
from punchclock.clock.sessions import hours_worked_today, pair_sessions, total_hours
from punchclock.clock.storage import PunchStorage
from punchclock.clock.totals import daily_totals, weekly_totals
from punchclock.clock.types import (
    DayBucket,
    Punch,
    PunchType,
    Session,
    SessionPairing,
    WeekBucket,
)

__all__ = [
    # Types
    "Punch",
    "PunchType",
    "Session",
    "SessionPairing",
    "DayBucket",
    "WeekBucket",
    # Errors
    "PunchClockError",
    "InvalidTimestamp",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    # Aggregation
    "pair_sessions",
    "hours_worked_today",
    "total_hours",
    "daily_totals",
    "weekly_totals",
    # Formatting
    "format_hours",
    "format_date",
    "format_week_range",
    "format_punch_time",
    # Report
    "REPORT_SUBJECT",
    "SummaryRow",
    "SummarySection",
    "HistoryDay",
    "build_summary_sections",
    "build_punch_history",
    "generate_report",
    # Storage and service
    "PunchStorage",
    "PunchClockService",
    "ClockStatus",
    "ImportResult",
]
