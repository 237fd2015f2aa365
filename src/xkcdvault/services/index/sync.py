"""Bulk range synchronization for the comic index.

A range of comics is fetched with bounded parallelism and committed as one
transaction: readers either see the whole batch together with its new
watermark, or nothing at all.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from xkcdvault.shared.deadline import Deadline
from xkcdvault.shared.errors import (
    ErrorCode,
    ErrorContext,
    PersistenceError,
    RemoteError,
    SyncTimeoutError,
    create_persistence_error,
    create_validation_error,
)
from xkcdvault.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

if TYPE_CHECKING:
    from xkcdvault.services.index.operations import (
        InsertOperations,
        QueryOperations,
        UpdateOperations,
    )
    from xkcdvault.services.index.transaction import TransactionManager
    from xkcdvault.shared.protocols import ItemSourceProtocol

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    """Summary of a committed sync batch.

    Attributes:
        start: First requested id
        end: Last requested id (inclusive)
        stored: Number of items written
        skipped_ids: Ids whose fetch failed and that were left out
        last_id: New watermark, the highest id present in the index
        duration_ms: Wall time of the whole batch

    Example:
        >>> summary = SyncSummary(start=1, end=10, stored=9, skipped_ids=[7], last_id=10)
        >>> summary.requested
        10
    """

    start: int
    end: int
    stored: int
    skipped_ids: list[int] = field(default_factory=list)
    last_id: int = 0
    duration_ms: float = 0.0

    @property
    def requested(self) -> int:
        return self.end - self.start + 1


class _BatchState:
    """Shared state of the workers of one batch."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.stop_event = threading.Event()
        self.stored = 0
        self.skipped_ids: list[int] = []
        self.errors: list[PersistenceError] = []

    def should_stop(self, deadline: Deadline) -> bool:
        return self.stop_event.is_set() or deadline.cancelled()

    def record_stored(self) -> None:
        with self._lock:
            self.stored += 1

    def record_skipped(self, item_id: int) -> None:
        with self._lock:
            self.skipped_ids.append(item_id)

    def record_failure(self, error: PersistenceError) -> None:
        with self._lock:
            self.errors.append(error)
        self.stop_event.set()


class SyncOrchestrator:
    """Fetch a contiguous id range and commit it atomically.

    Fetches run in parallel on a thread pool. Writes go through the shared
    transaction, serialized by the transaction manager's write lock. A
    failed fetch only skips its id; a failed write, an expired deadline or
    a cancellation rolls the whole batch back.

    Args:
        transactions: Transaction manager of the index connection
        inserts: Item write operations
        queries: Read operations (for the post-batch max id)
        updates: Watermark update operations
        offline: Also fetch and store image content
        file_path: Index path, used in error context
    """

    def __init__(
        self,
        transactions: TransactionManager,
        inserts: InsertOperations,
        queries: QueryOperations,
        updates: UpdateOperations,
        *,
        offline: bool,
        file_path: str,
    ) -> None:
        self._transactions = transactions
        self._inserts = inserts
        self._queries = queries
        self._updates = updates
        self._offline = offline
        self._file_path = file_path

    @staticmethod
    def validate_range(start: int, end: int, concurrency: int) -> None:
        """Reject impossible ranges before any transaction is opened.

        Raises:
            ApplicationError: With VALIDATION_ERROR
        """
        if start < 1:
            raise create_validation_error(
                f"start must be at least 1, got {start}",
                field="start",
                operation="sync_range",
            )
        if end < start:
            raise create_validation_error(
                f"end ({end}) must not be lower than start ({start})",
                field="end",
                operation="sync_range",
            )
        if concurrency < 1:
            raise create_validation_error(
                f"concurrency must be at least 1, got {concurrency}",
                field="concurrency",
                operation="sync_range",
            )

    def run(
        self,
        client: ItemSourceProtocol,
        start: int,
        end: int,
        concurrency: int,
        deadline: Deadline | None = None,
    ) -> SyncSummary:
        """Synchronize ``start..end`` inclusive.

        Returns:
            SyncSummary of the committed batch

        Raises:
            ApplicationError: If the range or concurrency is invalid
            SyncTimeoutError: If the deadline passed or was cancelled before commit
            PersistenceError: If any write, the watermark update or the commit failed
        """
        self.validate_range(start, end, concurrency)
        deadline = deadline or Deadline.never()
        context = {"start": start, "end": end, "concurrency": concurrency}
        log_operation_start(logger, "sync_range", context)
        started = time.perf_counter()

        try:
            self._transactions.begin()
        except sqlite3.Error as e:
            raise create_persistence_error(
                f"failed to begin sync transaction: {e}",
                code=ErrorCode.INDEX_SYNC_FAILED,
                file_path=self._file_path,
                operation="sync_range",
                original_error=e,
            ) from e

        state = _BatchState()
        try:
            unexpected = self._run_pool(client, start, end, concurrency, deadline, state)
            last_id = self._finalize(deadline, state, unexpected)
        except Exception:
            self._rollback()
            raise

        summary = SyncSummary(
            start=start,
            end=end,
            stored=state.stored,
            skipped_ids=sorted(state.skipped_ids),
            last_id=last_id,
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        if summary.skipped_ids:
            logger.warning(
                "Skipped %d comics that could not be fetched: %s",
                len(summary.skipped_ids),
                ", ".join(str(i) for i in summary.skipped_ids),
            )
        log_operation_success(
            logger,
            "sync_range",
            summary.duration_ms,
            result_info={"stored": summary.stored, "last_id": summary.last_id},
            context=context,
        )
        return summary

    def _run_pool(
        self,
        client: ItemSourceProtocol,
        start: int,
        end: int,
        concurrency: int,
        deadline: Deadline,
        state: _BatchState,
    ) -> list[BaseException]:
        executor = ThreadPoolExecutor(
            max_workers=concurrency,
            thread_name_prefix="xkcdvault-sync",
        )
        futures: list[Future[None]] = []
        try:
            for item_id in range(start, end + 1):
                futures.append(
                    executor.submit(self._sync_one, client, item_id, deadline, state)
                )
            _, not_done = wait(futures, timeout=deadline.remaining())
            if not_done:
                logger.debug("Deadline reached with %d tasks pending", len(not_done))
                state.stop_event.set()
        finally:
            # Running workers always finish before the transaction is closed.
            executor.shutdown(wait=True, cancel_futures=True)

        return [
            exc
            for future in futures
            if not future.cancelled() and (exc := future.exception()) is not None
        ]

    def _sync_one(
        self,
        client: ItemSourceProtocol,
        item_id: int,
        deadline: Deadline,
        state: _BatchState,
    ) -> None:
        if state.should_stop(deadline):
            return

        try:
            item = client.fetch_item(item_id, deadline)
        except RemoteError as e:
            log_operation_error(
                logger,
                e,
                operation="sync_item",
                additional_context={"item_id": item_id},
                level=logging.WARNING,
            )
            state.record_skipped(item_id)
            return

        payload: bytes | None = None
        if self._offline:
            try:
                payload = client.fetch_content(item, deadline)
            except RemoteError as e:
                log_operation_error(
                    logger,
                    e,
                    operation="sync_item_content",
                    additional_context={"item_id": item_id},
                    level=logging.WARNING,
                )

        if state.should_stop(deadline):
            return

        try:
            self._inserts.upsert(item, payload)
        except sqlite3.Error as e:
            error = create_persistence_error(
                f"failed to index comic {item_id}: {e}",
                code=ErrorCode.INDEX_SYNC_FAILED,
                file_path=self._file_path,
                operation="sync_item",
                original_error=e,
            )
            log_operation_error(logger, error, additional_context={"item_id": item_id})
            state.record_failure(error)
            return

        state.record_stored()

    def _finalize(
        self,
        deadline: Deadline,
        state: _BatchState,
        unexpected: list[BaseException],
    ) -> int:
        if deadline.cancelled():
            raise SyncTimeoutError(
                ErrorCode.OPERATION_TIMEOUT,
                "deadline exceeded before the sync batch was committed",
                ErrorContext(file_path=self._file_path, operation="sync_range"),
            )
        if state.errors:
            first = state.errors[0]
            raise PersistenceError(
                ErrorCode.INDEX_SYNC_FAILED,
                f"sync aborted after {len(state.errors)} write failure(s): {first.message}",
                first.context,
                first,
            ) from first
        if unexpected:
            raise unexpected[0]

        try:
            last_id = self._queries.max_id()
            self._updates.update_watermark(last_id)
            self._transactions.commit()
        except sqlite3.Error as e:
            raise create_persistence_error(
                f"failed to commit sync batch: {e}",
                code=ErrorCode.INDEX_SYNC_FAILED,
                file_path=self._file_path,
                operation="sync_range",
                original_error=e,
            ) from e
        return last_id

    def _rollback(self) -> None:
        try:
            self._transactions.rollback()
        except sqlite3.Error:
            logger.warning("Failed to roll back sync transaction", exc_info=True)
