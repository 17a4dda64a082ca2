"""
Bounded-concurrency driver that retrieves and flattens many feeds.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple

import polars as pl

from feedparq.errors import FetchError
from feedparq.flatten import flatten
from feedparq.models import BatchResult, FeedAddress, FetchFailure
from feedparq.retriever import FeedRetriever

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4


class FetchScheduler:
    """
    Runs retrieve+flatten for every address on a pool of ``concurrency``
    workers. A failing address never aborts the batch; it is collected in
    ``BatchResult.failures`` and left for the caller to report.
    """

    def __init__(self, retriever: Optional[FeedRetriever] = None, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.retriever = retriever or FeedRetriever()
        self.concurrency = concurrency

    def run(self, addresses: Sequence[FeedAddress]) -> BatchResult:
        if not addresses:
            return BatchResult()

        start = time.time()
        tables: Dict[int, pl.DataFrame] = {}
        failures: List[Tuple[int, FetchFailure]] = []
        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="feedparq-fetch") as executor:
            future_map = {
                executor.submit(self._fetch_one, address): (index, address)
                for index, address in enumerate(addresses)
            }
            for future in as_completed(future_map):
                index, address = future_map[future]
                try:
                    tables[index] = future.result()
                except FetchError as exc:
                    failures.append((index, FetchFailure(address=address, error=exc)))

        # Completion order is arbitrary; hand results back in submission order.
        result = BatchResult(
            tables=[tables[index] for index in sorted(tables)],
            failures=[failure for _, failure in sorted(failures, key=lambda pair: pair[0])],
        )
        logger.info(
            "Fetched %d/%d feeds in %.0f ms (%d workers)",
            result.succeeded,
            len(addresses),
            (time.time() - start) * 1000,
            self.concurrency,
        )
        return result

    def _fetch_one(self, address: FeedAddress) -> pl.DataFrame:
        feed = self.retriever.retrieve(address)
        table = flatten(feed)
        logger.debug("Flattened %s into %d rows", address, table.height)
        return table


def urls_to_tables(
    addresses: Sequence[FeedAddress],
    concurrency: int = DEFAULT_CONCURRENCY,
    retriever: Optional[FeedRetriever] = None,
) -> List[pl.DataFrame]:
    """
    Per-feed tables for every address that could be fetched and parsed.
    Failures are logged and dropped.
    """
    result = FetchScheduler(retriever=retriever, concurrency=concurrency).run(addresses)
    for failure in result.failures:
        logger.warning("Skipping feed %s: %s", failure.address, failure.error.message)
    return result.tables
