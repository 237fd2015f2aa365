"""Base operation class for index operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import sqlite3
    import threading

logger = logging.getLogger(__name__)


class BaseOperation:
    """Base class for index operations with shared functionality.

    Every statement runs under the write lock shared with the transaction
    manager, so operations may be called from sync worker threads.
    """

    def __init__(self, conn: sqlite3.Connection, write_lock: threading.Lock) -> None:
        """Initialize base operation.

        Args:
            conn: SQLite database connection
            write_lock: Lock serializing statements on the connection
        """
        self.conn = conn
        self.write_lock = write_lock

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        with self.write_lock:
            return self.conn.execute(sql, params).rowcount

    def _fetchone(self, sql: str, params: tuple[Any, ...] = ()) -> tuple[Any, ...] | None:
        with self.write_lock:
            row: tuple[Any, ...] | None = self.conn.execute(sql, params).fetchone()
            return row

    def _fetchall(self, sql: str, params: tuple[Any, ...] = ()) -> list[tuple[Any, ...]]:
        with self.write_lock:
            return list(self.conn.execute(sql, params).fetchall())
