"""Exceptions raised by the punch clock."""


class PunchClockError(Exception):
    """Base exception for punch clock errors."""

    pass


class InvalidTimestamp(PunchClockError, ValueError):
    """Raised when a punch timestamp cannot be parsed.

    Attributes:
        timestamp: The offending raw timestamp value.
    """

    def __init__(self, timestamp: object, reason: str | None = None) -> None:
        self.timestamp = timestamp
        message = f"Invalid timestamp: {timestamp!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class StoreError(PunchClockError):
    """Base exception for punch store failures."""

    pass


class StoreReadError(StoreError):
    """Raised when the punch store cannot be read."""

    pass


class StoreWriteError(StoreError):
    """Raised when the punch store cannot be written."""

    pass
