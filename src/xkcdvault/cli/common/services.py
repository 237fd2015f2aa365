"""Construction of the index and client used by a command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from xkcdvault.services.index import ComicIndex
from xkcdvault.services.xkcd import XkcdClient

if TYPE_CHECKING:
    from xkcdvault.cli.common.context import CliContext


def open_index(context: CliContext) -> ComicIndex:
    return ComicIndex.open(context.index_path)


def create_client(context: CliContext) -> XkcdClient:
    return XkcdClient(context.settings.api)
