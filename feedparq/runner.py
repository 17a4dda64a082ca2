"""
High-level orchestration: every channel file becomes one Parquet file.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from feedparq.channels import list_channel_files, read_addresses
from feedparq.http_client import HttpFetcher
from feedparq.merge import merge_tables
from feedparq.metrics import (
    URN_COUNTERS_RUN_COUNT,
    URN_HISTOGRAMS_FULL_RUN_DURATION,
    URN_HISTOGRAMS_RUN_DURATION,
    MetricsStore,
)
from feedparq.models import ChannelReport, RunReport
from feedparq.retriever import FeedRetriever
from feedparq.scheduler import FetchScheduler
from feedparq.settings import FeedparqSettings
from feedparq.writer import write_table

logger = logging.getLogger(__name__)


class FeedparqRunner:
    def __init__(
        self,
        settings: FeedparqSettings,
        retriever: Optional[FeedRetriever] = None,
        metrics: Optional[MetricsStore] = None,
    ) -> None:
        self.settings = settings
        self.retriever = retriever or FeedRetriever(
            HttpFetcher(user_agent=settings.user_agent, timeout=settings.request_timeout)
        )
        self.scheduler = FetchScheduler(retriever=self.retriever, concurrency=settings.concurrency)
        self.metrics = metrics or MetricsStore(
            settings.metrics_db, retention=timedelta(hours=settings.metrics_retention_hours)
        )

    def run_channel(self, channel_path: Path) -> ChannelReport:
        channel = channel_path.stem
        report = ChannelReport(channel=channel)
        start = time.time()
        logger.info("Start processing %s at %s", channel, datetime.now(timezone.utc).isoformat())
        try:
            addresses = read_addresses(channel_path)
            batch = self.scheduler.run(addresses)
            for failure in batch.failures:
                logger.warning("Skipping feed %s in %s: %s", failure.address, channel, failure.error.message)
            table = merge_tables(batch.tables)
            output_path = Path(self.settings.output_dir) / f"{channel}.parquet"
            report.output_path = write_table(table, output_path)
            report.rows = table.height
            report.feeds_ok = batch.succeeded
            report.feeds_failed = batch.failed
        except (OSError, ValueError) as exc:
            logger.exception("Channel %s failed", channel)
            report.error = str(exc)

        report.duration_ms = (time.time() - start) * 1000
        self.metrics.record(URN_HISTOGRAMS_RUN_DURATION, report.duration_ms)
        logger.info(
            "Finish processing %s: %d rows from %d feeds (%d failed) in %.0f ms",
            channel,
            report.rows,
            report.feeds_ok,
            report.feeds_failed,
            report.duration_ms,
        )
        return report

    def run_all(self, only: Optional[str] = None) -> RunReport:
        report = RunReport(started_at=datetime.now(timezone.utc))
        start = time.time()
        logger.info("Start processing at %s", report.started_at.isoformat())
        for channel_path in list_channel_files(self.settings.channels_dir):
            if only and channel_path.stem != only and channel_path.name != only:
                continue
            report.channels.append(self.run_channel(channel_path))

        if only and not report.channels:
            logger.warning("No channel named %s in %s", only, self.settings.channels_dir)
        report.duration_ms = (time.time() - start) * 1000
        self.metrics.record(URN_HISTOGRAMS_FULL_RUN_DURATION, report.duration_ms)
        self.metrics.increment(URN_COUNTERS_RUN_COUNT)
        logger.info("Finish processing %d channels in %.0f ms", len(report.channels), report.duration_ms)
        return report


def run_channels(settings: FeedparqSettings) -> RunReport:
    return FeedparqRunner(settings).run_all()
