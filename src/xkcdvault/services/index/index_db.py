"""Comic index database facade.

This module provides the local, queryable cache of xkcd comics: a single
SQLite file holding every indexed comic, the sync watermark and the
settings fixed at initialization.
"""

from __future__ import annotations

import dataclasses
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

from xkcdvault.services.index.operations import (
    InsertOperations,
    QueryOperations,
    UpdateOperations,
)
from xkcdvault.services.index.operations.query import SyncWatermark
from xkcdvault.services.index.schema import SchemaManager
from xkcdvault.services.index.sync import SyncOrchestrator, SyncSummary
from xkcdvault.services.index.transaction import TransactionManager
from xkcdvault.services.xkcd.executor import OfflineContentExecutor
from xkcdvault.services.xkcd.models import Item
from xkcdvault.shared.constants import IndexConfig
from xkcdvault.shared.deadline import Deadline
from xkcdvault.shared.errors import (
    ErrorCode,
    ErrorContext,
    IndexAlreadyInitializedError,
    InvalidIndexPathError,
    PersistenceError,
    RemoteError,
    create_index_not_initialized_error,
    create_persistence_error,
)
from xkcdvault.shared.logging import log_operation_error
from xkcdvault.shared.protocols import ItemSourceProtocol

logger = logging.getLogger(__name__)


class ComicIndex:
    """SQLite-backed index of xkcd comics.

    The index is either uninitialized (no file, no connection) or
    initialized (schema present, connection open). The ``offline`` flag is
    fixed when the index is created; changing it requires a forced
    re-initialization, which drops all data.

    Only one sync batch may run at a time per instance; the connection is
    shared with the sync workers and guarded by the transaction manager's
    write lock.

    Attributes:
        path: Location of the index file
        conn: SQLite connection, None while uninitialized

    Example:
        >>> with ComicIndex.open("~/.xkcd.index") as index:
        ...     if not index.is_initialized():
        ...         index.initialize(offline=False)
        ...     summary = index.sync_range(client, 1, 100, concurrency=5)
        ...     item = index.get(client, 42)
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self.conn: sqlite3.Connection | None = None
        self._offline = False

    @classmethod
    def open(cls, path: Path | str = IndexConfig.DEFAULT_PATH) -> ComicIndex:
        """Open the index at ``path``.

        A missing file yields an uninitialized index rather than an error.

        Raises:
            InvalidIndexPathError: If ``path`` is a directory
            PersistenceError: If the file exists but is not a readable index
        """
        index = cls(path)
        if index.path.is_dir():
            raise InvalidIndexPathError(
                ErrorCode.INVALID_PATH,
                f"index path is a directory, not a file: {index.path}",
                ErrorContext(file_path=str(index.path), operation="open_index"),
            )
        if not index.path.exists():
            logger.debug("No index at %s, staying uninitialized", index.path)
            return index

        logger.debug("Opening index %s", index.path)
        index._connect()
        try:
            index._offline = index._schema.read_offline()
        except (sqlite3.Error, LookupError) as e:
            index._close_quietly()
            raise create_persistence_error(
                f"failed to read index settings: {e}",
                code=ErrorCode.INDEX_OPEN_FAILED,
                file_path=str(index.path),
                operation="open_index",
                original_error=e,
            ) from e
        return index

    def _connect(self) -> None:
        try:
            self.conn = sqlite3.connect(
                str(self.path),
                check_same_thread=False,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise create_persistence_error(
                f"failed to open index database: {e}",
                code=ErrorCode.INDEX_OPEN_FAILED,
                file_path=str(self.path),
                operation="open_index",
                original_error=e,
            ) from e

        self._schema = SchemaManager(self.conn)
        self._transactions = TransactionManager(self.conn)
        lock = self._transactions.write_lock
        self._queries = QueryOperations(self.conn, lock)
        self._inserts = InsertOperations(self.conn, lock)
        self._updates = UpdateOperations(self.conn, lock)

    def is_initialized(self) -> bool:
        return self.conn is not None

    @property
    def is_offline(self) -> bool:
        """Whether image content is stored alongside metadata."""
        return self._offline

    def initialize(self, *, force: bool = False, offline: bool = False) -> None:
        """Create the index schema.

        Args:
            force: Drop an existing index first (all data is lost)
            offline: Store image content for offline use

        Raises:
            IndexAlreadyInitializedError: If initialized and ``force`` is False
            PersistenceError: If the old file cannot be removed or the
                schema cannot be created
        """
        if self.is_initialized() and not force:
            raise IndexAlreadyInitializedError(
                ErrorCode.INDEX_ALREADY_INITIALIZED,
                "index is already initialized",
                ErrorContext(file_path=str(self.path), operation="initialize"),
            )

        if force:
            self._close_quietly()
            if self.path.exists():
                try:
                    self.path.unlink()
                except OSError as e:
                    raise create_persistence_error(
                        f"failed to remove previous index: {e}",
                        code=ErrorCode.FILE_DELETE_ERROR,
                        file_path=str(self.path),
                        operation="initialize",
                        original_error=e,
                    ) from e
                logger.info("Removed previous index %s", self.path)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise create_persistence_error(
                f"failed to create index directory: {e}",
                code=ErrorCode.INDEX_SCHEMA_ERROR,
                file_path=str(self.path),
                operation="initialize",
                original_error=e,
            ) from e

        self._connect()
        try:
            with self._transactions.transaction():
                self._schema.create_tables(offline=offline)
        except sqlite3.Error as e:
            self._close_quietly()
            raise create_persistence_error(
                f"failed to create index schema: {e}",
                code=ErrorCode.INDEX_SCHEMA_ERROR,
                file_path=str(self.path),
                operation="initialize",
                original_error=e,
            ) from e

        self._offline = offline
        logger.info("Initialized index %s (offline=%s)", self.path, offline)

    def close(self) -> None:
        """Close the connection; idempotent.

        Raises:
            PersistenceError: If the connection fails to close
        """
        if self.conn is None:
            return
        conn, self.conn = self.conn, None
        try:
            conn.close()
        except sqlite3.Error as e:
            raise create_persistence_error(
                f"failed to close index: {e}",
                code=ErrorCode.INDEX_WRITE_FAILED,
                file_path=str(self.path),
                operation="close",
                original_error=e,
            ) from e

    def _close_quietly(self) -> None:
        try:
            self.close()
        except PersistenceError as e:
            log_operation_error(logger, e, level=logging.WARNING)

    def __enter__(self) -> ComicIndex:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _read_failed(self, operation: str, error: sqlite3.Error) -> PersistenceError:
        return create_persistence_error(
            f"failed to read index: {error}",
            code=ErrorCode.INDEX_READ_FAILED,
            file_path=str(self.path),
            operation=operation,
            original_error=error,
        )

    def get_watermark(self) -> SyncWatermark:
        """Time and highest id of the last successful sync.

        An uninitialized index reports ``SyncWatermark(None, 0)``.
        """
        if not self.is_initialized():
            return SyncWatermark(None, 0)
        try:
            return self._queries.watermark()
        except sqlite3.Error as e:
            raise self._read_failed("get_watermark", e) from e

    def needs_update(self, max_age: timedelta) -> bool:
        """Whether the last sync is older than ``max_age`` (or never happened)."""
        watermark = self.get_watermark()
        if watermark.synced_at is None:
            return True
        return datetime.now(timezone.utc) - watermark.synced_at >= max_age

    def count(self) -> int:
        if not self.is_initialized():
            return 0
        try:
            return self._queries.count()
        except sqlite3.Error as e:
            raise self._read_failed("count", e) from e

    def search(self, query: str, limit: int = IndexConfig.DEFAULT_SEARCH_LIMIT) -> list[Item]:
        """Find comics whose title, alt text, transcript or news contain ``query``.

        Raises:
            IndexNotInitializedError: If the index has no schema yet
        """
        if not self.is_initialized():
            raise create_index_not_initialized_error(str(self.path), "search")
        try:
            return self._queries.search(query, limit)
        except sqlite3.Error as e:
            raise self._read_failed("search", e) from e

    def get(
        self,
        client: ItemSourceProtocol,
        item_id: int,
        deadline: Deadline | None = None,
    ) -> Item:
        """Read-through lookup of one comic.

        Indexed comics are returned without any network access, with an
        OfflineContentExecutor attached so that image retrieval uses the
        stored bytes when there are some. Misses are fetched from
        ``client`` and written back on a best-effort basis.

        Raises:
            RemoteNotFoundError: If the comic is not indexed and does not exist
            RemoteTransientError: If the comic is not indexed and fetching it failed
            PersistenceError: If the index cannot be read
        """
        if self.is_initialized():
            try:
                item = self._queries.get_item(item_id)
            except sqlite3.Error as e:
                raise self._read_failed("get", e) from e
            if item is not None:
                return dataclasses.replace(
                    item,
                    executor=OfflineContentExecutor(item.payload, fallback=client.session),
                )

        try:
            item = client.fetch_item(item_id, deadline)
        except RemoteError as e:
            raise type(e)(
                e.code,
                f"failed to fetch comic {item_id} from API: {e.message}",
                e.context,
                e,
            ) from e

        self._store_best_effort(item)
        return item

    def _store_best_effort(self, item: Item) -> None:
        if not self.is_initialized():
            logger.debug("Index not initialized, comic %d not stored", item.id)
            return
        try:
            self._inserts.upsert(item)
        except sqlite3.Error as e:
            error = create_persistence_error(
                f"failed to index comic {item.id}: {e}",
                file_path=str(self.path),
                operation="get",
                original_error=e,
            )
            log_operation_error(logger, error, level=logging.WARNING)

    def sync_range(
        self,
        client: ItemSourceProtocol,
        start: int,
        end: int,
        concurrency: int,
        deadline: Deadline | None = None,
    ) -> SyncSummary:
        """Fetch comics ``start..end`` and commit them in one transaction.

        See SyncOrchestrator.run for the failure semantics.

        Raises:
            ApplicationError: If the range or concurrency is invalid
            IndexNotInitializedError: If the index has no schema yet
            SyncTimeoutError: If the deadline passed before commit
            PersistenceError: If a write or the commit failed
        """
        SyncOrchestrator.validate_range(start, end, concurrency)
        if not self.is_initialized():
            raise create_index_not_initialized_error(str(self.path), "sync_range")

        orchestrator = SyncOrchestrator(
            self._transactions,
            self._inserts,
            self._queries,
            self._updates,
            offline=self._offline,
            file_path=str(self.path),
        )
        return orchestrator.run(client, start, end, concurrency, deadline)

    def __repr__(self) -> str:
        state = "initialized" if self.is_initialized() else "uninitialized"
        return f"ComicIndex(path={str(self.path)!r}, {state}, offline={self._offline})"
