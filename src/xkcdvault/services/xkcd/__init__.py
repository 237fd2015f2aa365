"""xkcd remote API access.

Exposes the HTTP client, the Item value object and the request executors
used to serve image content from the index.
"""

from xkcdvault.services.xkcd.client import XkcdClient
from xkcdvault.services.xkcd.executor import (
    OfflineContentExecutor,
    RequestExecutor,
    sniff_content_type,
)
from xkcdvault.services.xkcd.models import Item, XkcdApiPayload, parse_item

__all__ = [
    "Item",
    "OfflineContentExecutor",
    "RequestExecutor",
    "XkcdApiPayload",
    "XkcdClient",
    "parse_item",
    "sniff_content_type",
]
