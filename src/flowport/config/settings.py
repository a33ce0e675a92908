"""Application settings management using Pydantic Settings."""

import logging
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_db_path() -> str:
    """Get default database path in the working directory."""
    return str(Path.cwd() / "data" / "flowport.db")


class Settings(BaseSettings):
    """Application configuration settings.

    All settings can be configured via environment variables with the
    prefix `FLOWPORT_`. For example, `FLOWPORT_DATABASE_PATH`.
    """

    # Database
    database_path: str = Field(
        default_factory=_get_default_db_path,
        description="SQLite database file path",
    )

    # Archive metadata
    app_version: str = Field(
        default="1.0.0",
        description="Application version recorded in exported archives",
    )

    # File access
    allowed_paths: list[str] = Field(
        default_factory=list,
        description="Extra base directories archives may be read from or written to",
    )

    # Export
    per_project_fetch_concurrency: int = Field(
        default=4,
        ge=1,
        le=32,
        description=(
            "Concurrent per-project lookups during export. Only used for stores "
            "that do not require single-reader access"
        ),
    )

    # Import
    singleton_merge_policy: Literal["overwrite", "preserve"] = Field(
        default="overwrite",
        description=(
            "How merge mode treats singleton configs: 'overwrite' always writes "
            "the archived config, 'preserve' only fills a missing one"
        ),
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="FLOWPORT_", env_file=".env", env_file_encoding="utf-8"
    )

    @model_validator(mode="after")
    def validate_log_level(self) -> Self:
        """Normalize and validate the logging level."""
        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        self.log_level = level
        return self

    def allowed_base_paths(self) -> list[Path]:
        """Return configured allowed paths as Path objects."""
        return [Path(p) for p in self.allowed_paths]
