"""Local comic index.

A single-file SQLite cache of xkcd comics with read-through lookups and
transactional bulk synchronization.
"""

from xkcdvault.services.index.index_db import ComicIndex
from xkcdvault.services.index.operations.query import SyncWatermark
from xkcdvault.services.index.sync import SyncOrchestrator, SyncSummary
from xkcdvault.services.index.updater import UpdateResult, UpdateStatus, update_index

__all__ = [
    "ComicIndex",
    "SyncOrchestrator",
    "SyncSummary",
    "SyncWatermark",
    "UpdateResult",
    "UpdateStatus",
    "update_index",
]
