"""Schema manager for the comic index.

Creates the on-disk tables of a fresh index and reads back the settings
fixed at creation time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from xkcdvault.shared.constants import IndexSettingsKeys, IndexTables

if TYPE_CHECKING:
    import sqlite3

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    f"""
    CREATE TABLE {IndexTables.ITEMS} (
        id           INTEGER NOT NULL PRIMARY KEY,
        title        TEXT    NOT NULL,
        content_url  TEXT    NOT NULL,
        permalink    TEXT    NOT NULL,
        published_at TEXT    NOT NULL,
        alt_text     TEXT    NOT NULL,
        transcript   TEXT    NOT NULL,
        news         TEXT    NOT NULL,
        payload      BLOB    NULL,

        CONSTRAINT id_check CHECK (id > 0)
    )
    """,
    f"""
    CREATE INDEX {IndexTables.TEXT_INDEX}
        ON {IndexTables.ITEMS}(title, alt_text, transcript, news)
    """,
    f"""
    CREATE TABLE {IndexTables.WATERMARK} (
        synced_at INTEGER NOT NULL,
        last_id   INTEGER NOT NULL
    )
    """,
    f"""
    CREATE TABLE {IndexTables.SETTINGS} (
        name  TEXT NOT NULL PRIMARY KEY,
        value TEXT NOT NULL
    )
    """,
)


class SchemaManager:
    """Index schema creation and settings access."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def create_tables(self, *, offline: bool) -> None:
        """Create all tables and seed the watermark and settings rows.

        Must run inside a transaction owned by the caller; statements are
        executed one by one since ``executescript`` would commit it.
        """
        for statement in SCHEMA_STATEMENTS:
            self.conn.execute(statement)

        self.conn.execute(
            f"INSERT INTO {IndexTables.WATERMARK} (synced_at, last_id) VALUES (0, 0)"  # noqa: S608
        )
        self.conn.execute(
            f"INSERT INTO {IndexTables.SETTINGS} (name, value) VALUES (?, ?)",  # noqa: S608
            (
                IndexSettingsKeys.OFFLINE,
                IndexSettingsKeys.TRUE if offline else IndexSettingsKeys.FALSE,
            ),
        )
        logger.debug("Created index schema (offline=%s)", offline)

    def read_offline(self) -> bool:
        """Read the offline flag persisted at initialization.

        Raises:
            sqlite3.Error: If the settings table is missing or unreadable
            LookupError: If the offline setting row is missing
        """
        row = self.conn.execute(
            f"SELECT value FROM {IndexTables.SETTINGS} WHERE name = ? LIMIT 1",  # noqa: S608
            (IndexSettingsKeys.OFFLINE,),
        ).fetchone()
        if row is None:
            msg = "offline setting is missing"
            raise LookupError(msg)
        return bool(row[0] == IndexSettingsKeys.TRUE)
