"""xkcd API response models.

Raw JSON documents are validated with a Pydantic model at the API
boundary and then turned into the immutable :class:`Item` value object used
by the rest of the application.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from xkcdvault.shared.errors import ItemValidationError

if TYPE_CHECKING:
    from xkcdvault.services.xkcd.executor import RequestExecutor


def validate_url(value: str) -> str:
    """Check that a URL is absolute http(s) with a host.

    Raises:
        ValueError: If the URL is empty, malformed or uses another scheme
    """
    if not value or not value.strip():
        msg = "URL is empty"
        raise ValueError(msg)
    try:
        parts = urlsplit(value)
    except ValueError as e:
        msg = "invalid syntax"
        raise ValueError(msg) from e
    if parts.scheme not in ("http", "https"):
        msg = f"unsupported scheme: {parts.scheme}"
        raise ValueError(msg)
    if not parts.netloc:
        msg = "URL does not have a host"
        raise ValueError(msg)
    return value


class XkcdApiPayload(BaseModel):
    """One ``info.0.json`` document.

    Day, month and year arrive as strings and are coerced to integers.
    Unknown keys are ignored so new upstream fields do not break parsing.
    """

    model_config = ConfigDict(extra="ignore")

    num: int = Field(..., gt=0, description="Comic number")
    day: int = Field(..., ge=1, le=31)
    month: int = Field(..., ge=1, le=12)
    year: int
    title: str = ""
    safe_title: str = ""
    img: str
    link: str = ""
    alt: str = ""
    transcript: str = ""
    news: str = ""

    @field_validator("img")
    @classmethod
    def _validate_img(cls, value: str) -> str:
        return validate_url(value)

    @field_validator("link")
    @classmethod
    def _validate_link(cls, value: str) -> str:
        if value == "":
            return value
        return validate_url(value)


@dataclass(frozen=True)
class Item:
    """A single comic.

    Attributes:
        id: Comic number, always positive
        title: Display title
        content_url: URL of the comic image
        permalink: Optional link the comic points to
        published_date: Publication date
        alt_text: Mouse-over text
        transcript: Transcript, often empty for recent comics
        news: News text published with the comic
        payload: Image bytes, only set for items read from an offline index
        executor: Request executor used to fetch the image; an
            OfflineContentExecutor for items served from the index
    """

    id: int
    title: str
    content_url: str
    permalink: str
    published_date: dt.date
    alt_text: str = ""
    transcript: str = ""
    news: str = ""
    payload: bytes | None = field(default=None, repr=False)
    executor: RequestExecutor | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation without payload or executor."""
        return {
            "id": self.id,
            "title": self.title,
            "content_url": self.content_url,
            "permalink": self.permalink,
            "published_date": self.published_date.isoformat(),
            "alt_text": self.alt_text,
            "transcript": self.transcript,
            "news": self.news,
            "has_payload": bool(self.payload),
        }


def parse_item(payload: Mapping[str, Any]) -> Item:
    """Validate a raw API document and build an Item.

    Args:
        payload: Decoded JSON object

    Returns:
        Well-formed Item

    Raises:
        ItemValidationError: If a field is missing, malformed, or the
            day/month/year triple is not a real calendar date
    """
    try:
        raw = XkcdApiPayload.model_validate(payload)
    except ValidationError as e:
        errors = e.errors()
        field_name = ".".join(str(p) for p in errors[0]["loc"]) if errors else None
        detail = errors[0]["msg"] if errors else str(e)
        raise ItemValidationError(
            f"invalid comic payload: {field_name}: {detail}",
            field=field_name,
            original_error=e,
        ) from e

    try:
        published = dt.date(raw.year, raw.month, raw.day)
    except ValueError as e:
        raise ItemValidationError(
            f"invalid publication date for comic {raw.num}: {e}",
            field="date",
            original_error=e,
        ) from e

    return Item(
        id=raw.num,
        title=raw.title or raw.safe_title,
        content_url=raw.img,
        permalink=raw.link,
        published_date=published,
        alt_text=raw.alt,
        transcript=raw.transcript,
        news=raw.news,
    )
