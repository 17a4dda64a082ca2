"""
Obtain raw bytes for one feed address and hand them to the parser.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from feedparq.errors import FeedIoError, FeedNetworkError, FeedParseError
from feedparq.http_client import HttpFetcher
from feedparq.models import Feed, FeedAddress
from feedparq.parser import parse_feed

logger = logging.getLogger(__name__)


class FeedRetriever:
    def __init__(self, fetcher: Optional[HttpFetcher] = None) -> None:
        self.fetcher = fetcher or HttpFetcher()

    def retrieve(self, address: FeedAddress) -> Feed:
        """
        One file read or one GET, then parse. No retries, no caching.

        Raises FeedIoError, FeedNetworkError or FeedParseError.
        """
        raw = self._read_url(address) if address.is_url else self._read_path(address)
        try:
            return parse_feed(raw, source=str(address))
        except FeedParseError:
            raise
        except Exception as exc:
            raise FeedParseError(str(address), str(exc)) from exc

    def _read_path(self, address: FeedAddress) -> bytes:
        try:
            return Path(address.value).read_bytes()
        except (OSError, ValueError) as exc:
            raise FeedIoError(str(address), str(exc)) from exc

    def _read_url(self, address: FeedAddress) -> bytes:
        try:
            return self.fetcher.fetch(address.value)
        except requests.RequestException as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise FeedNetworkError(str(address), str(exc), status_code=status) from exc


def feed_from_file(path) -> Feed:
    return FeedRetriever().retrieve(FeedAddress.from_path(path))
