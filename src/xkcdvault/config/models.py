"""Configuration domain models.

Each section of the TOML file (``[api]``, ``[index]``, ``[logging]``) maps
to one model here.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from xkcdvault.shared.constants import APIConfig, IndexConfig, SyncConfig


class ApiSettings(BaseModel):
    """xkcd API configuration.

    Controls where comics are fetched from and how persistent the HTTP
    client is about transient failures.
    """

    base_url: str = Field(
        default=APIConfig.BASE_URL,
        description="Base URL of the xkcd JSON API",
    )
    timeout: float = Field(
        default=APIConfig.DEFAULT_TIMEOUT,
        gt=0,
        description="Per-request timeout in seconds",
    )
    retry_attempts: int = Field(
        default=APIConfig.DEFAULT_RETRY_ATTEMPTS,
        ge=0,
        description="Number of retries for 5xx responses and connection errors",
    )
    retry_backoff: float = Field(
        default=APIConfig.DEFAULT_RETRY_BACKOFF,
        ge=0,
        description="Exponential backoff factor between retries",
    )
    user_agent: str = Field(
        default=APIConfig.USER_AGENT,
        description="User-Agent header sent with every request",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")


class IndexSettings(BaseModel):
    """Local index configuration."""

    path: Path = Field(
        default=IndexConfig.DEFAULT_PATH,
        description="Location of the SQLite index file",
    )
    workers: int = Field(
        default=SyncConfig.DEFAULT_WORKERS,
        ge=SyncConfig.MIN_WORKERS,
        le=SyncConfig.MAX_WORKERS,
        description="Concurrent fetches during synchronization",
    )
    update_interval_hours: float = Field(
        default=IndexConfig.UPDATE_INTERVAL_HOURS,
        ge=0,
        description="Age after which the index is considered outdated",
    )

    @field_validator("path")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", description="Root log level")
    file: str | None = Field(default=None, description="Optional JSON log file")
    json_format: bool = Field(
        default=False,
        description="Emit JSON log lines instead of rich console output",
    )

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"invalid log level: {value}"
            raise ValueError(msg)
        return normalized
