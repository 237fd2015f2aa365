"""
Remote API Constants

This module contains all constants related to the xkcd JSON API and
HTTP client configuration.
"""

from typing import ClassVar

from .system import Application


class APIConfig:
    """xkcd API configuration constants."""

    BASE_URL = "https://xkcd.com"
    LATEST_PATH = "/info.0.json"
    ITEM_PATH = "/{item_id}/info.0.json"

    # Request settings
    DEFAULT_TIMEOUT = 10.0  # seconds per request
    DEFAULT_RETRY_ATTEMPTS = 3
    DEFAULT_RETRY_BACKOFF = 0.5  # 0.5s, 1s, 2s between retries
    RETRY_STATUS_FORCELIST: ClassVar[tuple[int, ...]] = (500, 502, 503, 504)

    USER_AGENT = f"{Application.NAME}/{Application.VERSION}"


class HTTPStatusCodes:
    """HTTP status codes used by the client."""

    OK = 200
    NOT_FOUND = 404
    CLIENT_ERROR_MIN = 400
    SERVER_ERROR_MIN = 500

    @classmethod
    def is_server_error(cls, status_code: int) -> bool:
        """Check whether a status code is a 5xx."""
        return status_code >= cls.SERVER_ERROR_MIN


class ContentTypes:
    """Content types accepted for comic images."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    ALLOWED_IMAGES: ClassVar[tuple[str, ...]] = (JPEG, PNG, GIF)
    DEFAULT_IMAGE = JPEG
