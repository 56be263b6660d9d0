"""Type definitions for the punch clock.

Punches are the only persisted records. Sessions and day/week buckets are
derived views that are recomputed on every query.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PunchType(str, Enum):
    """Direction of a punch.

    Attributes:
        IN: Start of a work session.
        OUT: End of a work session.
    """

    IN = "in"
    OUT = "out"


class Punch(BaseModel):
    """A single timestamped IN or OUT event.

    The timestamp string is kept exactly as recorded; it is the key used by
    the store to update and delete punches.

    Attributes:
        timestamp: ISO-8601 instant, e.g. ``2024-01-01T09:00:00.000Z``.
        type: Punch direction.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(..., description="ISO-8601 instant of the punch")
    type: PunchType = Field(..., description="Punch direction (in or out)")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


@dataclass(frozen=True)
class Session:
    """A paired IN to OUT interval between UTC instants.

    Attributes:
        start: Instant of the IN punch.
        end: Instant of the OUT punch, or None while the session is open.
    """

    start: datetime
    end: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.end is None

    def resolve_end(self, now: datetime) -> datetime:
        """Return the end boundary, using ``now`` for an open session."""
        return now if self.end is None else self.end


@dataclass
class SessionPairing:
    """Result of pairing a set of punches into sessions.

    Attributes:
        sessions: Closed sessions in ascending order.
        open_session: The trailing unclosed session, if any.
        discarded: Punches that were consumed without contributing hours
            (superseded IN punches, OUT punches at or before their IN,
            OUT punches with no open IN).
        invalid: Punches whose timestamps could not be parsed.
    """

    sessions: list[Session] = field(default_factory=list)
    open_session: Session | None = None
    discarded: list[Punch] = field(default_factory=list)
    invalid: list[Punch] = field(default_factory=list)

    def all_sessions(self) -> list[Session]:
        """Closed sessions followed by the open session, if any."""
        if self.open_session is None:
            return list(self.sessions)
        return [*self.sessions, self.open_session]


@dataclass(frozen=True)
class DayBucket:
    """Hours attributed to one local calendar day."""

    day: date
    hours: float


@dataclass(frozen=True)
class WeekBucket:
    """Hours attributed to one Sunday-start week.

    Attributes:
        week_start: Local Sunday 00:00:00 of the week.
        hours: Hours worked in the week.
    """

    week_start: datetime
    hours: float

    @property
    def week_end(self) -> date:
        """The Saturday closing this week."""
        return (self.week_start + timedelta(days=6)).date()
