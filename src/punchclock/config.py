"""Configuration management for Punch Clock."""

from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Punch Clock config directory
PUNCHCLOCK_DIR = Path.home() / ".punchclock"
PUNCHCLOCK_ENV_FILE = PUNCHCLOCK_DIR / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PUNCHCLOCK_",
        # Later files override earlier ones
        env_file=(str(PUNCHCLOCK_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_path: Path | None = Field(
        default=None,
        description="Path for punch storage (default: ~/.punchclock/punches.json)",
    )
    timezone: str | None = Field(
        default=None,
        description="IANA zone used as local time (e.g., Europe/Berlin); system zone if unset",
    )
    split_weeks: bool = Field(
        default=False,
        description="Split sessions at Sunday midnight when computing weekly totals",
    )

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str | None) -> str | None:
        if value:
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Unknown timezone: {value}") from e
        return value or None

    def get_storage_path(self) -> Path:
        """Get the punch storage path, using default if not set."""
        if self.storage_path:
            return self.storage_path.expanduser()
        return PUNCHCLOCK_DIR / "punches.json"

    def get_tzinfo(self) -> tzinfo | None:
        """Get the configured local zone, or None for the system zone."""
        return ZoneInfo(self.timezone) if self.timezone else None


# Global settings instance
settings = Settings()
