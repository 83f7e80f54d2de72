"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables prefixed with MC_BEARER_
  - Fall back to a .env file
  - Validate types and constraints at startup

Only the ambient knobs live here (logging, file locations, and
whole-pipeline retry). Endpoints, client id, relying parties and the 5 s
session timeout are protocol constants.

env_nested_delimiter="__" maps MC_BEARER_FILES__ACCOUNTS_PATH to
files.accounts_path, MC_BEARER_RETRY__ATTEMPTS to retry.attempts, etc.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class FileSettings(BaseModel):
    """Locations of the batch input and output files."""

    accounts_path: Path = Field(
        default=Path("accounts.txt"),
        description="identity:secret lines, one account per line",
    )
    bearers_path: Path = Field(
        default=Path("bearers.txt"),
        description="Bearer tokens written one per line, in input order",
    )


class RetrySettings(BaseModel):
    """
    Whole-pipeline retry for a single account.

    Applies only to TRANSPORT_FAILURE; attempts=1 means no retry. A retry
    always restarts from the login page on a fresh session.
    """

    attempts: int = Field(default=1, ge=1, le=10)
    wait_seconds: float = Field(default=2.0, ge=0)


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="MC_BEARER_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    files: FileSettings = Field(default_factory=lambda: FileSettings())
    retry: RetrySettings = Field(default_factory=lambda: RetrySettings())

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        """Accept any case; reject names the logging module does not know."""
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level
