"""xkcdvault Settings model.

Main Settings class that consolidates all configuration sections.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from xkcdvault.config.models import ApiSettings, IndexSettings, LoggingSettings


class Settings(BaseSettings):
    """Unified configuration access.

    Environment variables use the ``XKCDVAULT_`` prefix and ``__`` between
    nested keys, e.g. ``XKCDVAULT_INDEX__WORKERS=10``.
    """

    model_config = SettingsConfigDict(
        env_prefix="XKCDVAULT_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    api: ApiSettings = Field(default_factory=ApiSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json", exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
