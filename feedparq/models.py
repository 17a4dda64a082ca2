"""
Core data structures shared by the feed harvesting pipeline.

Feed/Entry are pydantic models filled in by ``feedparq.parser``; the
remaining types are plain dataclasses passed between pipeline stages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

from pydantic import BaseModel, field_validator

from feedparq.errors import FetchError, InvalidAddressError


class Text(BaseModel):
    content: str = ""
    content_type: str = "text/plain"

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Optional[str]) -> str:
        return value or ""


class Link(BaseModel):
    href: str
    rel: Optional[str] = None
    media_type: Optional[str] = None


class Person(BaseModel):
    name: str = ""
    email: Optional[str] = None
    uri: Optional[str] = None


class Content(BaseModel):
    body: Optional[str] = None
    content_type: str = "text/html"


class MediaContent(BaseModel):
    url: Optional[str] = None
    content_type: Optional[str] = None
    size: Optional[int] = None


class MediaObject(BaseModel):
    title: Optional[Text] = None
    description: Optional[Text] = None
    content: List[MediaContent] = []


class Entry(BaseModel):
    id: str = ""
    title: Optional[Text] = None
    links: List[Link] = []
    published: Optional[datetime] = None
    updated: Optional[datetime] = None
    summary: Optional[Text] = None
    content: Optional[Content] = None
    authors: List[Person] = []
    media: List[MediaObject] = []


class Feed(BaseModel):
    id: str = ""
    title: Optional[Text] = None
    description: Optional[Text] = None
    published: Optional[datetime] = None
    updated: Optional[datetime] = None
    entries: List[Entry] = []


class AddressKind(str, Enum):
    PATH = "path"
    URL = "url"


@dataclass(frozen=True)
class FeedAddress:
    """
    Where one feed lives: a local file or an http(s) URL.
    """

    kind: AddressKind
    value: str

    @classmethod
    def parse(cls, raw: str) -> "FeedAddress":
        text = (raw or "").strip()
        if not text:
            raise InvalidAddressError("empty feed address")
        if "\x00" in text:
            raise InvalidAddressError(f"NUL character in feed address: {text!r}")
        parts = urlsplit(text)
        scheme = parts.scheme.lower()
        if scheme in ("http", "https"):
            if not parts.netloc:
                raise InvalidAddressError(f"URL without host: {text!r}")
            return cls(AddressKind.URL, text)
        if scheme == "file":
            return cls(AddressKind.PATH, url2pathname(parts.path))
        # Windows drive letters parse as a one-letter scheme.
        if not scheme or len(scheme) == 1:
            return cls(AddressKind.PATH, text)
        raise InvalidAddressError(f"unsupported scheme {scheme!r} in {text!r}")

    @classmethod
    def from_path(cls, path: str | Path) -> "FeedAddress":
        return cls(AddressKind.PATH, str(path))

    @classmethod
    def from_url(cls, url: str) -> "FeedAddress":
        address = cls.parse(url)
        if address.kind is not AddressKind.URL:
            raise InvalidAddressError(f"not an http(s) URL: {url!r}")
        return address

    @property
    def is_url(self) -> bool:
        return self.kind is AddressKind.URL

    def __str__(self) -> str:
        return self.value


@dataclass
class FetchFailure:
    address: FeedAddress
    error: FetchError


@dataclass
class BatchResult:
    """
    Outcome of one scheduler run. ``tables`` follows address submission order.
    """

    tables: list = field(default_factory=list)
    failures: List[FetchFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.tables)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass
class ChannelReport:
    channel: str
    output_path: Optional[Path] = None
    rows: int = 0
    feeds_ok: int = 0
    feeds_failed: int = 0
    duration_ms: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunReport:
    started_at: datetime
    channels: List[ChannelReport] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return all(channel.ok for channel in self.channels)
