"""Query operations for the comic index."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any

from xkcdvault.services.index.operations.base import BaseOperation
from xkcdvault.services.xkcd.models import Item
from xkcdvault.shared.constants import IndexTables

logger = logging.getLogger(__name__)

ITEM_COLUMNS = (
    "id, title, content_url, permalink, published_at, "
    "alt_text, transcript, news, payload"
)


@dataclass(frozen=True)
class SyncWatermark:
    """Time and highest id of the last successful sync.

    Attributes:
        synced_at: Time of the last sync, None if the index was never synced
        last_id: Highest comic id present after that sync, 0 if never synced
    """

    synced_at: dt.datetime | None
    last_id: int

    @property
    def never_synced(self) -> bool:
        return self.synced_at is None


def _item_from_row(row: tuple[Any, ...]) -> Item:
    payload = row[8]
    return Item(
        id=row[0],
        title=row[1],
        content_url=row[2],
        permalink=row[3],
        published_date=dt.date.fromisoformat(row[4]),
        alt_text=row[5],
        transcript=row[6],
        news=row[7],
        payload=bytes(payload) if payload is not None else None,
    )


def _escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class QueryOperations(BaseOperation):
    """Query operations for item retrieval."""

    def get_item(self, item_id: int) -> Item | None:
        """Look up one item.

        Returns:
            The stored item, or None when the id is not indexed

        Raises:
            sqlite3.Error: If the query fails
        """
        row = self._fetchone(
            f"SELECT {ITEM_COLUMNS} FROM {IndexTables.ITEMS} WHERE id = ?",  # noqa: S608
            (item_id,),
        )
        if row is None:
            logger.debug("Comic %d not found in index", item_id)
            return None
        logger.debug("Comic %d found in index", item_id)
        return _item_from_row(row)

    def max_id(self) -> int:
        """Highest stored id, 0 for an empty index."""
        row = self._fetchone(f"SELECT max(id) FROM {IndexTables.ITEMS}")  # noqa: S608
        return int(row[0]) if row and row[0] is not None else 0

    def count(self) -> int:
        row = self._fetchone(f"SELECT count(*) FROM {IndexTables.ITEMS}")  # noqa: S608
        return int(row[0]) if row else 0

    def watermark(self) -> SyncWatermark:
        row = self._fetchone(
            f"SELECT synced_at, last_id FROM {IndexTables.WATERMARK} LIMIT 1"  # noqa: S608
        )
        if row is None or not row[0]:
            return SyncWatermark(None, int(row[1]) if row else 0)
        synced_at = dt.datetime.fromtimestamp(int(row[0]), tz=dt.timezone.utc)
        return SyncWatermark(synced_at, int(row[1]))

    def search(self, query: str, limit: int) -> list[Item]:
        """Case-insensitive substring search over the text columns.

        Results are ordered newest first.
        """
        pattern = f"%{_escape_like(query)}%"
        rows = self._fetchall(
            f"""
            SELECT {ITEM_COLUMNS} FROM {IndexTables.ITEMS}
            WHERE title LIKE ? ESCAPE '\\'
               OR alt_text LIKE ? ESCAPE '\\'
               OR transcript LIKE ? ESCAPE '\\'
               OR news LIKE ? ESCAPE '\\'
            ORDER BY id DESC
            LIMIT ?
            """,  # noqa: S608
            (pattern, pattern, pattern, pattern, limit),
        )
        return [_item_from_row(row) for row in rows]
