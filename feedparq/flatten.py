"""
Turn one parsed Feed into a per-feed table, one row per entry.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Dict, List, Optional

import polars as pl

from feedparq.models import Entry, Feed, Person, Text
from feedparq.schema import COLUMNS, ROW_SCHEMA

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def flatten(feed: Feed) -> pl.DataFrame:
    """
    Build the fixed-schema table for ``feed``.

    Feed-level scalars are computed once and broadcast onto every row. Row
    order follows entry order. A feed without entries yields an empty table
    that still carries every column.
    """
    n_entries = len(feed.entries)
    broadcast = {
        "feed_id": feed.id or "",
        "feed_description": _text(feed.description),
        "feed_published": _rfc3339(feed.published),
        "feed_title": _text(feed.title),
        "feed_updated": _rfc3339(feed.updated),
    }
    columns: Dict[str, list] = {name: [value] * n_entries for name, value in broadcast.items()}
    for name in COLUMNS[len(broadcast):]:
        columns[name] = []

    for entry in feed.entries:
        columns["id"].append(entry.id or "")
        columns["title"].append(_text(entry.title))
        columns["link"].append(entry.links[0].href if entry.links else "")
        columns["published"].append(_rfc2822(entry.published))
        columns["published_ms"].append(_epoch_ms(entry.published))
        columns["summary"].append(_text(entry.summary))
        columns["content"].append((entry.content.body if entry.content else None) or "")
        columns["updated"].append(_rfc2822(entry.updated))
        columns["updated_ms"].append(_epoch_ms(entry.updated))
        columns["authors"].append(format_authors(entry.authors))
        columns["media_url"].append(extract_media_url(entry))

    return pl.DataFrame(columns, schema=ROW_SCHEMA)


def format_authors(authors: List[Person]) -> str:
    return ", ".join(author.name for author in authors)


def extract_media_url(entry: Entry) -> str:
    if not entry.media or not entry.media[0].content:
        return ""
    return entry.media[0].content[0].url or ""


def _text(value: Optional[Text]) -> str:
    return value.content if value is not None else ""


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _rfc3339(value: Optional[datetime]) -> str:
    return _utc(value).isoformat() if value is not None else ""


def _rfc2822(value: Optional[datetime]) -> str:
    return format_datetime(_utc(value)) if value is not None else ""


def _epoch_ms(value: Optional[datetime]) -> int:
    if value is None:
        return 0
    return (_utc(value) - EPOCH) // timedelta(milliseconds=1)
