"""HTTP client for the xkcd JSON API."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from xkcdvault.config.models import ApiSettings
from xkcdvault.services.xkcd.executor import RequestExecutor
from xkcdvault.services.xkcd.models import Item, parse_item
from xkcdvault.shared.constants import APIConfig, ContentTypes, HTTPStatusCodes
from xkcdvault.shared.deadline import Deadline
from xkcdvault.shared.errors import (
    ErrorCode,
    ErrorContext,
    ItemValidationError,
    RemoteNotFoundError,
    RemoteTransientError,
)
from xkcdvault.shared.logging import log_api_call

logger = logging.getLogger(__name__)


class XkcdClient:
    """
    Client for the public xkcd API, with connection pooling and retries
    for transient server errors.

    The client is safe to share between sync worker threads: it holds no
    per-request state besides the underlying ``requests.Session``.

    Args:
        settings: API settings (base URL, timeouts, retry policy)
        session: Pre-built session, mainly for tests; a retrying session is
            created when omitted
    """

    def __init__(
        self,
        settings: ApiSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings or ApiSettings()
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        retry_strategy = Retry(
            total=self.settings.retry_attempts,
            status_forcelist=list(APIConfig.RETRY_STATUS_FORCELIST),
            backoff_factor=self.settings.retry_backoff,
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"User-Agent": self.settings.user_agent})
        return session

    @property
    def session(self) -> requests.Session:
        """Underlying network executor."""
        return self._session

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> XkcdClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _timeout(self, deadline: Deadline | None, operation: str, url: str) -> float:
        timeout = self.settings.timeout
        if deadline is None:
            return timeout
        timeout = deadline.bounded(timeout)
        if deadline.cancelled() or timeout <= 0:
            raise RemoteTransientError(
                ErrorCode.API_TIMEOUT,
                f"deadline exceeded before requesting {url}",
                ErrorContext(operation=operation, additional_data={"url": url}),
            )
        return timeout

    def _get(
        self,
        executor: RequestExecutor,
        url: str,
        operation: str,
        deadline: Deadline | None,
    ) -> requests.Response:
        timeout = self._timeout(deadline, operation, url)
        context = ErrorContext(operation=operation, additional_data={"url": url})
        start = time.perf_counter()
        try:
            response = executor.get(url, timeout=timeout)
        except requests.Timeout as e:
            raise RemoteTransientError(
                ErrorCode.API_TIMEOUT,
                f"request to {url} timed out",
                context,
                e,
            ) from e
        except requests.RequestException as e:
            raise RemoteTransientError(
                ErrorCode.API_REQUEST_FAILED,
                f"failed to send request to {url}: {e}",
                context,
                e,
            ) from e
        log_api_call(
            logger,
            url,
            status_code=response.status_code,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return response

    def _fetch_json(
        self,
        url: str,
        operation: str,
        deadline: Deadline | None,
        item_id: int | None = None,
    ) -> Item:
        response = self._get(self._session, url, operation, deadline)
        context = ErrorContext(operation=operation, additional_data={"url": url})

        if response.status_code == HTTPStatusCodes.NOT_FOUND:
            raise RemoteNotFoundError(
                ErrorCode.API_ITEM_NOT_FOUND,
                f"no such comic: {item_id}" if item_id is not None else "no such comic",
                context,
            )
        if response.status_code != HTTPStatusCodes.OK:
            code = (
                ErrorCode.API_SERVER_ERROR
                if HTTPStatusCodes.is_server_error(response.status_code)
                else ErrorCode.API_REQUEST_FAILED
            )
            raise RemoteTransientError(
                code,
                f"xkcd API returned status code {response.status_code}",
                context,
            )

        try:
            document: Any = response.json()
        except ValueError as e:
            raise RemoteTransientError(
                ErrorCode.API_INVALID_RESPONSE,
                f"failed to decode response from {url}",
                context,
                e,
            ) from e
        if not isinstance(document, dict):
            raise RemoteTransientError(
                ErrorCode.API_INVALID_RESPONSE,
                f"unexpected JSON document from {url}",
                context,
            )

        try:
            return parse_item(document)
        except ItemValidationError as e:
            raise RemoteTransientError(
                ErrorCode.API_INVALID_RESPONSE,
                f"xkcd API returned an invalid comic: {e.message}",
                context,
                e,
            ) from e

    def fetch_item(self, item_id: int, deadline: Deadline | None = None) -> Item:
        """Fetch one comic by number.

        Raises:
            RemoteNotFoundError: If the number is not positive or unknown upstream
            RemoteTransientError: On network, status, decoding or validation failure
        """
        if item_id <= 0:
            raise RemoteNotFoundError(
                ErrorCode.API_ITEM_NOT_FOUND,
                f"no such comic: {item_id}",
                ErrorContext(operation="fetch_item", additional_data={"item_id": item_id}),
            )
        url = self.settings.base_url + APIConfig.ITEM_PATH.format(item_id=item_id)
        return self._fetch_json(url, "fetch_item", deadline, item_id)

    def fetch_latest(self, deadline: Deadline | None = None) -> Item:
        """Fetch the most recent comic."""
        url = self.settings.base_url + APIConfig.LATEST_PATH
        return self._fetch_json(url, "fetch_latest", deadline)

    def fetch_latest_id(self, deadline: Deadline | None = None) -> int:
        return self.fetch_latest(deadline).id

    def fetch_content(self, item: Item, deadline: Deadline | None = None) -> bytes:
        """Download the image of a comic.

        Goes through the executor attached to the item when there is one, so
        items read from an offline index need no network access.

        Raises:
            RemoteTransientError: If the URL is missing, the request fails, or
                the response is not a supported image
        """
        context = ErrorContext(
            operation="fetch_content",
            additional_data={"item_id": item.id, "url": item.content_url},
        )
        if not item.content_url:
            raise RemoteTransientError(
                ErrorCode.API_INVALID_CONTENT,
                f"comic {item.id} has no image URL",
                context,
            )

        executor: RequestExecutor = item.executor or self._session
        response = self._get(executor, item.content_url, "fetch_content", deadline)
        if response.status_code != HTTPStatusCodes.OK:
            raise RemoteTransientError(
                ErrorCode.API_REQUEST_FAILED,
                f"unexpected status code {response.status_code} for {item.content_url}",
                context,
            )

        content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        if content_type not in ContentTypes.ALLOWED_IMAGES:
            raise RemoteTransientError(
                ErrorCode.API_INVALID_CONTENT,
                f"unexpected or undefined content-type: {content_type or None}",
                context,
            )
        return response.content
