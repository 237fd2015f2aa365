"""Update operations for the comic index."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from xkcdvault.services.index.operations.base import BaseOperation
from xkcdvault.shared.constants import IndexTables

logger = logging.getLogger(__name__)


class UpdateOperations(BaseOperation):
    """Watermark updates."""

    def update_watermark(self, last_id: int, synced_at: datetime | None = None) -> None:
        """Record a completed sync.

        Args:
            last_id: Highest id present in the index
            synced_at: Sync time, now when omitted

        Raises:
            sqlite3.Error: If the statement fails
        """
        synced_at = synced_at or datetime.now(timezone.utc)
        self._execute(
            f"UPDATE {IndexTables.WATERMARK} SET synced_at = ?, last_id = ?",  # noqa: S608
            (int(synced_at.timestamp()), last_id),
        )
        logger.debug("Watermark moved to %d at %s", last_id, synced_at.isoformat())
