"""Settings loaded from the environment.

All values can be overridden with ``PR_TRACKER_``-prefixed environment
variables or a ``.env`` file, e.g. ``PR_TRACKER_DATA_DIR=~/pr-data``.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default data directory
DATA_DIR = Path.cwd() / "data"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PR_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Field(
        default=DATA_DIR,
        description="Directory holding the internal key-value database",
    )
    db_filename: str = Field(
        default="pr_tracker.db",
        description="File name of the internal key-value database",
    )
    document_dir: Path | None = Field(
        default=None,
        description="App-private directory for sync files and exports (default: <data_dir>/documents)",
    )
    picker_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Seconds before an unanswered file picker counts as cancelled",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI when --verbose is not given",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_db_path(settings: Settings | None = None) -> Path:
    """Get the internal database file path, creating its directory."""
    settings = settings or get_settings()
    data_dir = settings.data_dir.expanduser()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / settings.db_filename


def get_document_dir(settings: Settings | None = None) -> Path:
    """Get the app-private document directory, creating it."""
    settings = settings or get_settings()
    document_dir = settings.document_dir or settings.data_dir / "documents"
    document_dir = document_dir.expanduser()
    document_dir.mkdir(parents=True, exist_ok=True)
    return document_dir
