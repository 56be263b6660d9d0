"""JSON file persistence for punches.

Punches and the clocked-in flag live in a single JSON document guarded by a
file lock. Reads through :meth:`PunchStorage.list_all` fail soft and return
an empty list; writes raise :class:`StoreWriteError`.
"""

import json
import logging
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any

from filelock import FileLock
from pydantic import BaseModel, Field

from punchclock.clock.errors import InvalidTimestamp, StoreError, StoreReadError, StoreWriteError
from punchclock.clock.timeutil import parse_instant, to_instant
from punchclock.clock.types import Punch

logger = logging.getLogger(__name__)

# Storage format version for future migrations
STORAGE_VERSION = 1


class PunchStorageData(BaseModel):
    """Root structure of the punch storage file.

    Attributes:
        version: Storage format version.
        clocked_in: Whether the user is currently clocked in.
        punches: Stored punches, in no particular order.
    """

    version: int = Field(default=STORAGE_VERSION, description="Storage format version")
    clocked_in: bool = Field(default=False, description="Currently clocked in")
    punches: list[Punch] = Field(default_factory=list, description="Stored punches")


_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _newest_first_key(punch: Punch) -> datetime:
    try:
        return parse_instant(punch.timestamp)
    except InvalidTimestamp:
        return _EARLIEST


class PunchStorage:
    """JSON file-based storage for punches.

    Example:
        storage = PunchStorage("~/.punchclock/punches.json")
        storage.append(Punch(timestamp="2024-01-01T09:00:00.000Z", type="in"))
        punches = storage.list_all()
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the punch storage.

        Args:
            path: Path to the JSON storage file.
        """
        self._path = Path(path).expanduser()
        self._lock_path = self._path.with_suffix(".lock")
        self._lock: FileLock | None = None

    @property
    def path(self) -> Path:
        """Get the storage file path."""
        return self._path

    @property
    def lock(self) -> FileLock:
        if self._lock is None:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StoreWriteError(f"Cannot create storage directory {self._path.parent}: {e}") from e
            self._lock = FileLock(str(self._lock_path))
        return self._lock

    def _read_data(self) -> PunchStorageData:
        """Read and parse the storage file.

        Returns:
            Parsed storage data (empty when the file does not exist yet).

        Raises:
            StoreReadError: If the file cannot be read or parsed.
        """
        if not self._path.exists():
            return PunchStorageData()

        try:
            content = self._path.read_text(encoding="utf-8")
            if not content.strip():
                return PunchStorageData()

            data = json.loads(content)
            version = data.get("version", 1)
            if version != STORAGE_VERSION:
                data = self._migrate_data(data, version)

            return PunchStorageData.model_validate(data)
        except (OSError, ValueError, AttributeError) as e:
            # ValueError covers JSONDecodeError and pydantic's ValidationError
            raise StoreReadError(f"Failed to read punch storage {self._path}: {e}") from e

    def _write_data(self, data: PunchStorageData) -> None:
        """Write storage data to file.

        Raises:
            StoreWriteError: If the file cannot be written.
        """
        content = json.dumps(data.model_dump(mode="json"), indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StoreWriteError(f"Failed to write punch storage {self._path}: {e}") from e

    def _migrate_data(self, data: dict[str, Any], from_version: int) -> dict[str, Any]:
        # Currently no migrations needed
        logger.info(f"Migrating punch storage from version {from_version} to {STORAGE_VERSION}")
        data["version"] = STORAGE_VERSION
        return data

    def list_all(self) -> list[Punch]:
        """Load all punches, newest first.

        Read failures are logged and reported as an empty list, so callers
        cannot tell "no data" from "unreadable data".

        Returns:
            List of punches.
        """
        try:
            with self.lock:
                punches = self._read_data().punches
        except (StoreError, OSError) as e:
            logger.error(f"Error loading punches: {e}")
            return []

        logger.debug(f"Loaded {len(punches)} punches from {self._path}")
        return sorted(punches, key=_newest_first_key, reverse=True)

    def list_in_range(
        self,
        start: datetime,
        end: datetime,
        tz: tzinfo | None = None,
    ) -> list[Punch]:
        """Punches within ``[start, end]``, newest first.

        Naive bounds and naive stored timestamps are read as local time in
        ``tz`` (the system zone when None). Unparseable punches are left out;
        read failures give an empty list.
        """
        start, end = to_instant(start, tz), to_instant(end, tz)
        result = []
        for punch in self.list_all():
            try:
                moment = parse_instant(punch.timestamp, tz)
            except InvalidTimestamp:
                continue
            if start <= moment <= end:
                result.append(punch)
        return result

    def append(self, punch: Punch, clocked_in: bool | None = None) -> None:
        """Add a punch.

        Args:
            punch: The punch to store.
            clocked_in: New clocked-in flag, saved in the same write as the
                punch (None leaves the flag unchanged).

        Raises:
            ValueError: If a punch with the same timestamp already exists.
            StoreReadError: If the existing file cannot be parsed.
            StoreWriteError: If the file cannot be written.
        """
        with self.lock:
            data = self._read_data()
            if any(p.timestamp == punch.timestamp for p in data.punches):
                raise ValueError(f"Punch with timestamp '{punch.timestamp}' already exists")

            data.punches.append(punch)
            if clocked_in is not None:
                data.clocked_in = clocked_in
            self._write_data(data)
            logger.info(f"Saved {punch.type.value} punch at {punch.timestamp}")

    def delete_by_timestamp(self, timestamp: str) -> bool:
        """Remove the punch with the given timestamp.

        Returns:
            True if a punch was found and removed.

        Raises:
            StoreWriteError: If the file cannot be written.
        """
        with self.lock:
            data = self._read_data()
            original_count = len(data.punches)
            data.punches = [p for p in data.punches if p.timestamp != timestamp]

            if len(data.punches) < original_count:
                self._write_data(data)
                logger.info(f"Deleted punch at {timestamp}")
                return True

            return False

    def update_by_timestamp(self, old_timestamp: str, punch: Punch) -> bool:
        """Replace the punch identified by ``old_timestamp``.

        Returns:
            True if the punch was found and updated.

        Raises:
            ValueError: If the new timestamp belongs to another punch.
            StoreWriteError: If the file cannot be written.
        """
        with self.lock:
            data = self._read_data()

            if punch.timestamp != old_timestamp and any(
                p.timestamp == punch.timestamp for p in data.punches
            ):
                raise ValueError(f"Punch with timestamp '{punch.timestamp}' already exists")

            for i, existing in enumerate(data.punches):
                if existing.timestamp == old_timestamp:
                    data.punches[i] = punch
                    self._write_data(data)
                    logger.info(f"Updated punch at {old_timestamp} -> {punch.timestamp} ({punch.type.value})")
                    return True

            return False

    def get_clock_flag(self) -> bool:
        """Whether the user is clocked in; False when storage is unreadable."""
        try:
            with self.lock:
                return self._read_data().clocked_in
        except (StoreError, OSError) as e:
            logger.error(f"Error loading clock state: {e}")
            return False

    def set_clock_flag(self, clocked_in: bool) -> None:
        """Persist the clocked-in flag.

        Raises:
            StoreWriteError: If the file cannot be written.
        """
        with self.lock:
            data = self._read_data()
            data.clocked_in = clocked_in
            self._write_data(data)
            logger.debug(f"Clock state set to {'in' if clocked_in else 'out'}")

    def clear_punches(self) -> int:
        """Remove all punches, keeping the clock flag.

        Returns:
            Number of punches removed.
        """
        with self.lock:
            data = self._read_data()
            count = len(data.punches)
            data.punches = []
            self._write_data(data)
            logger.info(f"Cleared {count} punches")
            return count

    def reset_all(self) -> None:
        """Remove all punches and clear the clock flag.

        A corrupt file is replaced rather than reported.
        """
        with self.lock:
            self._write_data(PunchStorageData())
            logger.info(f"Reset punch storage {self._path}")
