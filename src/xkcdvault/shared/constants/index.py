"""
Index Configuration Constants

Table names, setting keys and defaults for the local comic index.
"""

from pathlib import Path


class IndexConfig:
    """Index file defaults."""

    DEFAULT_FILENAME = ".xkcd.index"
    DEFAULT_PATH = Path.home() / DEFAULT_FILENAME
    UPDATE_INTERVAL_HOURS = 24
    DEFAULT_SEARCH_LIMIT = 20


class IndexTables:
    """Table and index names of the on-disk schema."""

    ITEMS = "items"
    WATERMARK = "sync_watermark"
    SETTINGS = "settings"
    TEXT_INDEX = "items_text_index"


class IndexSettingsKeys:
    """Keys stored in the settings table."""

    OFFLINE = "offline"
    TRUE = "1"
    FALSE = "0"


class SyncConfig:
    """Bulk synchronization defaults."""

    DEFAULT_WORKERS = 5
    MIN_WORKERS = 1
    MAX_WORKERS = 64
