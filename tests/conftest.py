"""
Pytest configuration and shared fixtures for xkcdvault tests.

The remote API is simulated by FakeSession, a stand-in for
``requests.Session`` that answers xkcd URLs from memory, so the real
XkcdClient code path is exercised without network access.
"""

from __future__ import annotations

import json
import logging
import os
import re
import threading
import time
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import requests

from xkcdvault.cli.common.context import clear_cli_context
from xkcdvault.config.models import ApiSettings
from xkcdvault.services.index import ComicIndex
from xkcdvault.services.xkcd import XkcdClient

BASE_URL = "https://xkcd.com"
IMAGE_URL = "https://imgs.xkcd.com/comics/comic_{num}.png"

_ITEM_URL = re.compile(r"^https://xkcd\.com/(\d+)/info\.0\.json$")
_IMAGE_URL = re.compile(r"^https://imgs\.xkcd\.com/comics/comic_(\d+)\.png$")


def comic_payload(num: int, **overrides: Any) -> dict[str, Any]:
    """Raw ``info.0.json`` document of a comic."""
    payload: dict[str, Any] = {
        "num": num,
        "day": str(num % 28 + 1),
        "month": str(num % 12 + 1),
        "year": "2020",
        "title": f"Comic {num}",
        "safe_title": f"Comic {num}",
        "img": IMAGE_URL.format(num=num),
        "link": "",
        "alt": f"Alt text of comic {num}",
        "transcript": "",
        "news": "",
    }
    payload.update(overrides)
    return payload


def image_bytes(num: int) -> bytes:
    return b"\x89PNG\r\n\x1a\n" + f"image-{num}".encode()


def make_response(
    status_code: int,
    body: bytes = b"",
    content_type: str = "application/json",
    url: str = "",
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.headers["Content-Type"] = content_type
    response.url = url
    return response


class FakeSession:
    """In-memory xkcd API.

    Attributes:
        latest: Number of the latest comic
        missing_ids: Comics answering 404
        transient_ids: Comics answering 500
        broken_content_ids: Comics whose image answers 500
        offline: Every request raises ConnectionError
        delay: Seconds slept before answering each request
        calls: Requested URLs, in order
    """

    def __init__(self, latest: int = 10) -> None:
        self.latest = latest
        self.missing_ids: set[int] = set()
        self.transient_ids: set[int] = set()
        self.broken_content_ids: set[int] = set()
        self.payload_overrides: dict[int, dict[str, Any]] = {}
        self.offline = False
        self.delay = 0.0
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def _exists(self, num: int) -> bool:
        return 1 <= num <= self.latest and num not in self.missing_ids

    def get(self, url: str, *, timeout: float | None = None) -> requests.Response:
        with self._lock:
            self.calls.append(url)
        if self.delay:
            time.sleep(self.delay)
        if self.offline:
            raise requests.ConnectionError(f"network is down: {url}")

        if url == f"{BASE_URL}/info.0.json":
            body = comic_payload(self.latest, **self.payload_overrides.get(self.latest, {}))
            return make_response(200, _json_bytes(body), url=url)

        if match := _ITEM_URL.match(url):
            num = int(match.group(1))
            if num in self.transient_ids:
                return make_response(500, b"oops", "text/plain", url)
            if not self._exists(num):
                return make_response(404, b"not found", "text/html", url)
            body = comic_payload(num, **self.payload_overrides.get(num, {}))
            return make_response(200, _json_bytes(body), url=url)

        if match := _IMAGE_URL.match(url):
            num = int(match.group(1))
            if num in self.broken_content_ids:
                return make_response(500, b"oops", "text/plain", url)
            return make_response(200, image_bytes(num), "image/png", url)

        return make_response(404, b"not found", "text/html", url)

    def item_calls(self) -> list[str]:
        return [url for url in self.calls if _ITEM_URL.match(url)]

    def close(self) -> None:
        pass


def _json_bytes(document: dict[str, Any]) -> bytes:
    return json.dumps(document).encode("utf-8")


@pytest.fixture(autouse=True)
def _reset_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from the environment, the CLI context and logger setup."""
    for name in list(os.environ):
        if name.startswith("XKCDVAULT_"):
            monkeypatch.delenv(name, raising=False)
    clear_cli_context()
    yield
    clear_cli_context()
    app_logger = logging.getLogger("xkcdvault")
    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session: FakeSession) -> XkcdClient:
    """Real client bound to the in-memory API."""
    return XkcdClient(ApiSettings(base_url=BASE_URL), session=fake_session)  # type: ignore[arg-type]


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    return tmp_path / "xkcd.index"


@pytest.fixture
def index(index_path: Path) -> Generator[ComicIndex, None, None]:
    """Freshly initialized online index."""
    comic_index = ComicIndex.open(index_path)
    comic_index.initialize(offline=False)
    yield comic_index
    comic_index.close()


@pytest.fixture
def offline_index(index_path: Path) -> Generator[ComicIndex, None, None]:
    """Freshly initialized offline index."""
    comic_index = ComicIndex.open(index_path)
    comic_index.initialize(offline=True)
    yield comic_index
    comic_index.close()


@pytest.fixture
def make_payload() -> Any:
    """Factory of raw API documents: ``make_payload(num, **overrides)``."""
    return comic_payload


@pytest.fixture
def make_image() -> Any:
    """Factory of the image bytes served for a comic."""
    return image_bytes
