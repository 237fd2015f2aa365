"""Settings loader.

Builds a fresh Settings instance for each CLI invocation. There is no
process-wide singleton: tests and embedding code pass settings explicitly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import toml
from pydantic import ValidationError

from xkcdvault.config.settings import Settings
from xkcdvault.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from an optional TOML file plus environment variables.

    Args:
        config_path: TOML file to read; missing file is an error when given
        overrides: Nested values applied last (e.g. ``{"index": {"path": p}}``)

    Returns:
        Validated Settings instance

    Raises:
        ApplicationError: If the file cannot be read or values are invalid
    """
    context = ErrorContext(
        file_path=str(config_path) if config_path else None,
        operation="load_settings",
    )
    try:
        if config_path is not None:
            settings = Settings.from_toml_file(config_path)
            logger.debug("Loaded configuration from %s", config_path)
        else:
            settings = Settings()
        if overrides:
            merged = _deep_merge(settings.model_dump(), overrides)
            settings = Settings.model_validate(merged)
    except FileNotFoundError as e:
        raise ApplicationError(
            ErrorCode.CONFIG_ERROR,
            f"Configuration file not found: {config_path}",
            context,
            e,
        ) from e
    except (toml.TomlDecodeError, OSError) as e:
        raise ApplicationError(
            ErrorCode.CONFIG_ERROR,
            f"Failed to read configuration file: {e}",
            context,
            e,
        ) from e
    except ValidationError as e:
        raise ApplicationError(
            ErrorCode.CONFIG_ERROR,
            f"Invalid configuration: {e}",
            context,
            e,
        ) from e

    return settings
