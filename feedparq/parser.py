"""
Adapter from feedparser's loose dictionaries to the typed Feed/Entry models.
"""
from __future__ import annotations

import io
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser

from feedparq.errors import FeedParseError
from feedparq.models import Content, Entry, Feed, Link, MediaContent, MediaObject, Person, Text

logger = logging.getLogger(__name__)


def parse_feed(content: bytes, source: str = "<bytes>") -> Feed:
    """
    Parse raw RSS/Atom/RDF/JSON feed bytes.

    Raises FeedParseError when feedparser cannot recognise any feed format;
    recoverable oddities (bad encodings, undeclared entities) only log.
    """
    # A stream keeps feedparser from treating the body as a path or URL to open.
    parsed = feedparser.parse(io.BytesIO(content))
    if not parsed.get("version"):
        exc = parsed.get("bozo_exception")
        message = str(exc) if exc else "unrecognized feed format"
        raise FeedParseError(source, message)
    if parsed.get("bozo"):
        logger.debug("Feed %s parsed with warnings: %s", source, parsed.get("bozo_exception"))

    meta = parsed.get("feed", {})
    return Feed(
        id=_raw(meta, "id") or _raw(meta, "link") or "",
        title=_text(meta, "title"),
        description=_text(meta, "subtitle"),
        published=_parse_datetime(_raw(meta, "published_parsed")),
        updated=_parse_datetime(_raw(meta, "updated_parsed")),
        entries=[_entry(entry) for entry in parsed.get("entries", [])],
    )


def _entry(entry) -> Entry:
    links = _links(entry)
    return Entry(
        id=_raw(entry, "id") or (links[0].href if links else ""),
        title=_text(entry, "title"),
        links=links,
        published=_parse_datetime(_raw(entry, "published_parsed")),
        updated=_parse_datetime(_raw(entry, "updated_parsed")),
        summary=_text(entry, "summary"),
        content=_content(entry),
        authors=[
            Person(name=author.get("name") or "", email=author.get("email"), uri=author.get("href"))
            for author in _raw(entry, "authors") or []
            if author.get("name")
        ],
        media=_media(entry),
    )


def _links(entry) -> List[Link]:
    links = [
        Link(href=link["href"], rel=link.get("rel"), media_type=link.get("type"))
        for link in _raw(entry, "links") or []
        if link.get("href") and link.get("rel") != "enclosure"
    ]
    if not links and _raw(entry, "link"):
        links.append(Link(href=_raw(entry, "link"), rel="alternate"))
    return links


def _content(entry) -> Optional[Content]:
    bodies = _raw(entry, "content") or []
    if not bodies:
        return None
    first = bodies[0]
    return Content(body=first.get("value"), content_type=first.get("type") or "text/html")


def _media(entry) -> List[MediaObject]:
    media: List[MediaObject] = []
    media_content = _raw(entry, "media_content") or []
    description = _raw(entry, "media_description")
    if media_content or description:
        media.append(
            MediaObject(
                description=Text(content=description) if description else None,
                content=[
                    MediaContent(url=item.get("url"), content_type=item.get("type"), size=_int(item.get("fileSize")))
                    for item in media_content
                ],
            )
        )
    # feedparser synthesizes "enclosures" from these links only on item access.
    enclosures = [
        link for link in _raw(entry, "links") or [] if link.get("rel") == "enclosure" and link.get("href")
    ]
    for enclosure in enclosures:
        media.append(
            MediaObject(
                content=[
                    MediaContent(
                        url=enclosure.get("href"),
                        content_type=enclosure.get("type"),
                        size=_int(enclosure.get("length")),
                    )
                ]
            )
        )
    return media


def _raw(node, key: str) -> Any:
    # dict.get skips FeedParserDict's legacy key aliasing (e.g. updated -> published).
    return dict.get(node, key)


def _text(node, key: str) -> Optional[Text]:
    value = _raw(node, key)
    if value is None:
        return None
    detail = _raw(node, f"{key}_detail") or {}
    return Text(content=value, content_type=detail.get("type") or "text/plain")


def _int(value) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _parse_datetime(struct_time) -> Optional[datetime]:
    if not struct_time:
        return None
    return datetime(*struct_time[:6], tzinfo=timezone.utc)
