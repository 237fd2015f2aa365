"""Request executors used to fetch comic images.

An item served from an offline index carries an :class:`OfflineContentExecutor`
bound to its stored bytes, so image retrieval works the same whether the
bytes come from the index or from the network.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import requests

from xkcdvault.shared.constants import ContentTypes, HTTPStatusCodes

logger = logging.getLogger(__name__)

_MAGIC_NUMBERS: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", ContentTypes.JPEG),
    (b"\x89PNG\r\n\x1a\n", ContentTypes.PNG),
    (b"GIF87a", ContentTypes.GIF),
    (b"GIF89a", ContentTypes.GIF),
)


@runtime_checkable
class RequestExecutor(Protocol):
    """Anything that can perform a GET; ``requests.Session`` qualifies."""

    def get(self, url: str, *, timeout: float | None = None) -> requests.Response:
        """Perform a GET request."""


def sniff_content_type(data: bytes) -> str:
    """Guess an image content type from its magic bytes."""
    for magic, content_type in _MAGIC_NUMBERS:
        if data.startswith(magic):
            return content_type
    return ContentTypes.DEFAULT_IMAGE


class OfflineContentExecutor:
    """Serve stored bytes as a synthetic response, else delegate.

    Args:
        payload: Stored image bytes, empty or None when the item was cached
            without content
        fallback: Executor used when there is no payload
    """

    def __init__(self, payload: bytes | None, fallback: RequestExecutor) -> None:
        self._payload = payload or b""
        self._fallback = fallback

    @property
    def has_payload(self) -> bool:
        return bool(self._payload)

    def get(self, url: str, *, timeout: float | None = None) -> requests.Response:
        if not self._payload:
            return self._fallback.get(url, timeout=timeout)

        logger.debug("Serving %d stored bytes for %s", len(self._payload), url)
        response = requests.Response()
        response.status_code = HTTPStatusCodes.OK
        response.reason = "OK"
        response.url = url
        response.headers["Content-Type"] = sniff_content_type(self._payload)
        response.headers["Content-Length"] = str(len(self._payload))
        response._content = self._payload
        return response

    def __repr__(self) -> str:
        return f"OfflineContentExecutor(payload={len(self._payload)} bytes)"
