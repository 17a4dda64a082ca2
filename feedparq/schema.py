"""
The fixed row layout shared by every per-feed and merged table.
"""
from __future__ import annotations

from typing import Dict, List, Type

import polars as pl

FEED_COLUMNS = ("feed_id", "feed_description", "feed_published", "feed_title", "feed_updated")

ROW_SCHEMA: Dict[str, Type[pl.DataType]] = {
    "feed_id": pl.Utf8,
    "feed_description": pl.Utf8,
    "feed_published": pl.Utf8,
    "feed_title": pl.Utf8,
    "feed_updated": pl.Utf8,
    "id": pl.Utf8,
    "title": pl.Utf8,
    "link": pl.Utf8,
    "published": pl.Utf8,
    "published_ms": pl.Int64,
    "summary": pl.Utf8,
    "content": pl.Utf8,
    "updated": pl.Utf8,
    "updated_ms": pl.Int64,
    "authors": pl.Utf8,
    "media_url": pl.Utf8,
}

COLUMNS: List[str] = list(ROW_SCHEMA)


def empty_table() -> pl.DataFrame:
    return pl.DataFrame(schema=ROW_SCHEMA)


def conforms(table: pl.DataFrame) -> bool:
    return table.columns == COLUMNS and table.dtypes == list(ROW_SCHEMA.values())
