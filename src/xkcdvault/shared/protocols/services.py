"""Service protocols for dependency inversion."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from xkcdvault.services.xkcd.executor import RequestExecutor
    from xkcdvault.services.xkcd.models import Item
    from xkcdvault.shared.deadline import Deadline


class ItemSourceProtocol(Protocol):
    """Remote source of comics.

    Implementations raise RemoteNotFoundError for ids that do not exist and
    RemoteTransientError for everything else that went wrong remotely.

    Example:
        >>> from xkcdvault.services.xkcd import XkcdClient
        >>> source: ItemSourceProtocol = XkcdClient()
        >>> source.fetch_item(353).title
        'Python'
    """

    @property
    def session(self) -> RequestExecutor:
        """Network executor used when no stored content is available."""

    def fetch_item(self, item_id: int, deadline: Deadline | None = None) -> Item:
        """Fetch one comic by number."""

    def fetch_latest_id(self, deadline: Deadline | None = None) -> int:
        """Number of the most recent comic."""

    def fetch_content(self, item: Item, deadline: Deadline | None = None) -> bytes:
        """Image bytes of a comic."""
