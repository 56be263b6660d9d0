"""Punch Clock - a personal time clock with daily and weekly hour totals."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("punchclock")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from punchclock.clock import Punch, PunchClockService, PunchStorage, PunchType

__all__ = ["Punch", "PunchType", "PunchStorage", "PunchClockService"]
