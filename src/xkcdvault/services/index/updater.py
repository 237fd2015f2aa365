"""Catch-up of the index with the latest published comic."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from xkcdvault.shared.constants import IndexConfig

if TYPE_CHECKING:
    from xkcdvault.services.index.index_db import ComicIndex
    from xkcdvault.services.index.sync import SyncSummary
    from xkcdvault.shared.deadline import Deadline
    from xkcdvault.shared.protocols import ItemSourceProtocol

logger = logging.getLogger(__name__)


class UpdateStatus(str, enum.Enum):
    """Outcome of an update request."""

    UP_TO_DATE = "up_to_date"
    OUTDATED = "outdated"
    UPDATED = "updated"


@dataclass
class UpdateResult:
    """Result of :func:`update_index`.

    Attributes:
        status: What happened
        summary: Sync summary when a batch was committed
        latest_id: Latest published comic, when the remote was asked
    """

    status: UpdateStatus
    summary: SyncSummary | None = None
    latest_id: int | None = None


def update_index(
    index: ComicIndex,
    client: ItemSourceProtocol,
    *,
    workers: int,
    force: bool = False,
    check_only: bool = False,
    max_age: timedelta = timedelta(hours=IndexConfig.UPDATE_INTERVAL_HOURS),
    deadline: Deadline | None = None,
) -> UpdateResult:
    """Bring the index up to the latest published comic.

    Args:
        index: Initialized index
        client: Remote source
        workers: Concurrent fetches
        force: Update even if the last sync is recent
        check_only: Only report whether an update is due; no network access
        max_age: Age after which the index is considered outdated
        deadline: Caller deadline, shared by the latest-id lookup and the sync

    Returns:
        UpdateResult

    Raises:
        IndexNotInitializedError: If the index has no schema yet
        RemoteError: If the latest comic cannot be fetched
        SyncTimeoutError, PersistenceError: See ComicIndex.sync_range
    """
    stale = index.needs_update(max_age)
    if not stale and not force:
        logger.info("Index is up to date")
        return UpdateResult(UpdateStatus.UP_TO_DATE)
    if check_only:
        logger.info("Index is outdated")
        return UpdateResult(UpdateStatus.OUTDATED)

    last_id = index.get_watermark().last_id
    latest_id = client.fetch_latest_id(deadline)
    if latest_id <= last_id:
        logger.info("No new comic since #%d", last_id)
        return UpdateResult(UpdateStatus.UP_TO_DATE, latest_id=latest_id)

    logger.info("Indexing comics %d..%d", last_id + 1, latest_id)
    summary = index.sync_range(client, last_id + 1, latest_id, workers, deadline)
    return UpdateResult(UpdateStatus.UPDATED, summary=summary, latest_id=latest_id)
