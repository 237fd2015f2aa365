"""Insert operations for the comic index."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from xkcdvault.services.index.operations.base import BaseOperation
from xkcdvault.shared.constants import IndexTables

if TYPE_CHECKING:
    from xkcdvault.services.xkcd.models import Item

logger = logging.getLogger(__name__)

UPSERT_SQL = f"""
INSERT OR REPLACE INTO {IndexTables.ITEMS} (
    id, title, content_url, permalink, published_at,
    alt_text, transcript, news, payload
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""  # noqa: S608


class InsertOperations(BaseOperation):
    """Insert operations for item storage."""

    def upsert(self, item: Item, payload: bytes | None = None) -> None:
        """Insert or replace an item keyed by its id.

        Args:
            item: Item to store
            payload: Image bytes for offline indexes; falls back to
                ``item.payload``

        Raises:
            sqlite3.Error: If the statement fails
        """
        content = payload if payload is not None else item.payload
        self._execute(
            UPSERT_SQL,
            (
                item.id,
                item.title,
                item.content_url,
                item.permalink,
                item.published_date.isoformat(),
                item.alt_text,
                item.transcript,
                item.news,
                content or None,
            ),
        )
        logger.debug(
            "Indexed comic %d (payload=%d bytes)",
            item.id,
            len(content) if content else 0,
        )
