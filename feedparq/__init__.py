"""
Public API: harvest syndication feeds into fixed-schema columnar tables.
"""
from __future__ import annotations

from feedparq.flatten import flatten
from feedparq.merge import merge_tables
from feedparq.models import BatchResult, Feed, FeedAddress, FetchFailure
from feedparq.parser import parse_feed
from feedparq.retriever import FeedRetriever
from feedparq.runner import FeedparqRunner, run_channels
from feedparq.scheduler import FetchScheduler, urls_to_tables
from feedparq.schema import COLUMNS, ROW_SCHEMA
from feedparq.writer import write_table

__version__ = "0.3.0"

__all__ = [
    "BatchResult",
    "COLUMNS",
    "Feed",
    "FeedAddress",
    "FeedRetriever",
    "FeedparqRunner",
    "FetchFailure",
    "FetchScheduler",
    "ROW_SCHEMA",
    "flatten",
    "merge_tables",
    "parse_feed",
    "run_channels",
    "urls_to_tables",
    "write_table",
]
