"""
Single-shot HTTP fetching for feed documents.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "feedparq/0.3 (+https://feedparq.club)"


class HttpFetcher:
    """
    Thin wrapper over requests.Session with feed-friendly headers.
    Issues exactly one GET per call; callers decide what a failure means.
    """

    def __init__(self, user_agent: Optional[str] = None, timeout: float = 20) -> None:
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": user_agent or DEFAULT_USER_AGENT,
                "Accept": "application/rss+xml,application/atom+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.8",
            }
        )
        self.timeout = timeout

    def fetch(self, url: str) -> bytes:
        """Return the full response body; raises requests exceptions on transport or HTTP errors."""
        response = self.session.get(url, timeout=self.timeout)
        if response.status_code >= 400:
            raise requests.HTTPError(f"HTTP {response.status_code}", response=response)
        logger.debug("GET %s -> %s (%d bytes)", url, response.status_code, len(response.content))
        return response.content

    def close(self) -> None:
        self.session.close()
