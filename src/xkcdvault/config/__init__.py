"""Configuration package for xkcdvault.

Settings are resolved per invocation: defaults, then an optional TOML file,
then ``XKCDVAULT_*`` environment variables, then explicit CLI overrides.
"""

from xkcdvault.config.loader import load_settings
from xkcdvault.config.models import ApiSettings, IndexSettings, LoggingSettings
from xkcdvault.config.settings import Settings

__all__ = [
    "ApiSettings",
    "IndexSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
]
