"""
xkcdvault Constants Package

Centralized constants grouped by domain. Import from this package rather
than from the submodules.
"""

from .api import APIConfig, ContentTypes, HTTPStatusCodes
from .cli import CLICommands, CLIDefaults, CLIHelp, CLIMessages, OutputTargets
from .index import IndexConfig, IndexSettingsKeys, IndexTables, SyncConfig
from .system import Application

__all__ = [
    "APIConfig",
    "Application",
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CLIMessages",
    "ContentTypes",
    "HTTPStatusCodes",
    "IndexConfig",
    "IndexSettingsKeys",
    "IndexTables",
    "OutputTargets",
    "SyncConfig",
]
