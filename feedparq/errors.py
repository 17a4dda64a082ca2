"""
Exception types raised by the feed harvesting pipeline.
"""
from __future__ import annotations

from typing import Optional


class FeedparqError(Exception):
    """Base class for all feedparq errors."""


class InvalidAddressError(FeedparqError, ValueError):
    pass


class FetchError(FeedparqError):
    """
    A single feed could not be turned into a Feed.
    Always recovered at the scheduler boundary.
    """

    def __init__(self, address: str, message: str) -> None:
        super().__init__(f"{address}: {message}")
        self.address = address
        self.message = message


class FeedIoError(FetchError):
    pass


class FeedNetworkError(FetchError):
    def __init__(self, address: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(address, message)
        self.status_code = status_code


class FeedParseError(FetchError):
    pass


class SchemaMismatchError(FeedparqError):
    """Per-feed tables disagree with the row schema; indicates a flattening bug."""
