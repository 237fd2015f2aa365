"""Transaction manager for the comic index.

The connection runs in autocommit mode (``isolation_level=None``), so every
multi-statement unit is wrapped explicitly with BEGIN/COMMIT/ROLLBACK.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import sqlite3

logger = logging.getLogger(__name__)


class TransactionManager:
    """Transaction management for index operations.

    Also owns the write lock: the connection is shared between sync worker
    threads, and every statement issued while workers run must hold it.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize transaction manager.

        Args:
            conn: SQLite database connection
        """
        self.conn = conn
        self.write_lock = threading.Lock()

    def begin(self) -> None:
        """Begin a transaction."""
        with self.write_lock:
            self.conn.execute("BEGIN")

    def commit(self) -> None:
        """Commit the current transaction."""
        with self.write_lock:
            self.conn.execute("COMMIT")

    def rollback(self) -> None:
        """Rollback the current transaction."""
        with self.write_lock:
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Context manager for transactions.

        Automatically commits on success or rolls back on exception.

        Example:
            >>> with transaction_manager.transaction():
            ...     schema.create_tables(offline=False)
        """
        self.begin()
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise
