"""
Command line entry points: ``feedparq run``, ``fetch``, ``slugs``, ``stats``, ``schedule``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

import click
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from feedparq.channels import write_slugs
from feedparq.errors import InvalidAddressError
from feedparq.http_client import HttpFetcher
from feedparq.logging_config import setup_logging
from feedparq.merge import merge_tables
from feedparq.metrics import MetricsStore
from feedparq.models import FeedAddress
from feedparq.retriever import FeedRetriever
from feedparq.runner import FeedparqRunner
from feedparq.scheduler import urls_to_tables
from feedparq.settings import load_settings
from feedparq.writer import write_table

logger = logging.getLogger(__name__)


@click.group()
@click.option("--log-level", default=None, help="Overrides FDPRQ_LOG_LEVEL.")
@click.pass_context
def cli(ctx: click.Context, log_level):
    settings = load_settings()
    if log_level:
        settings = replace(settings, log_level=log_level.upper())
    setup_logging(settings.log_level, settings.log_file)
    ctx.obj = settings


@cli.command()
@click.option("--channels-dir", type=click.Path(path_type=Path), default=None)
@click.option("--output-dir", type=click.Path(path_type=Path), default=None)
@click.option("--concurrency", type=click.IntRange(min=1), default=None)
@click.option("--channel", default=None, help="Only process this channel (file name or stem).")
@click.pass_obj
def run(settings, channels_dir, output_dir, concurrency, channel):
    """Fetch every channel and write one Parquet file per channel."""
    settings = replace(
        settings,
        channels_dir=channels_dir or settings.channels_dir,
        output_dir=output_dir or settings.output_dir,
        concurrency=concurrency or settings.concurrency,
    )
    report = FeedparqRunner(settings).run_all(only=channel)
    for item in report.channels:
        status = "ok" if item.ok else f"failed: {item.error}"
        click.echo(f"{item.channel}: {item.rows} rows, {item.feeds_ok} feeds, {item.feeds_failed} skipped ({status})")
    if channel and not report.channels:
        raise click.ClickException(f"no channel named {channel!r}")
    if not report.ok:
        raise SystemExit(1)


@cli.command()
@click.argument("addresses", nargs=-1, required=True)
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True)
@click.option("--concurrency", type=click.IntRange(min=1), default=None)
@click.pass_obj
def fetch(settings, addresses, output, concurrency):
    """Fetch ADDRESSES (paths or URLs) into a single Parquet file."""
    try:
        parsed = [FeedAddress.parse(address) for address in addresses]
    except InvalidAddressError as exc:
        raise click.BadParameter(str(exc), param_hint="ADDRESSES") from exc
    retriever = FeedRetriever(HttpFetcher(user_agent=settings.user_agent, timeout=settings.request_timeout))
    tables = urls_to_tables(parsed, concurrency=concurrency or settings.concurrency, retriever=retriever)
    table = merge_tables(tables)
    write_table(table, output)
    click.echo(f"{output}: {table.height} rows from {len(tables)}/{len(parsed)} feeds")


@cli.command()
@click.option("--channels-dir", type=click.Path(path_type=Path), default=None)
@click.option("--output", "-o", type=click.Path(path_type=Path), default=Path("functions") / "slugs.json")
@click.pass_obj
def slugs(settings, channels_dir, output):
    """Write the JSON index of channel slugs."""
    target = write_slugs(channels_dir or settings.channels_dir, output)
    click.echo(str(target))


@cli.command()
@click.option("--metrics-db", type=click.Path(path_type=Path), default=None)
@click.pass_obj
def stats(settings, metrics_db):
    """Print recorded run metrics as JSON."""
    store = MetricsStore(metrics_db or settings.metrics_db, retention=None)
    click.echo(json.dumps(store.summary(), indent=2))


@cli.command()
@click.option("--cron", "cron_expr", default="0 * * * *", show_default=True, help="Crontab expression (UTC).")
@click.pass_obj
def schedule(settings, cron_expr):
    """Run every channel on a cron schedule until interrupted."""
    runner = FeedparqRunner(settings)
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(runner.run_all, CronTrigger.from_crontab(cron_expr, timezone="UTC"), id="feedparq_run")
    logger.info("Scheduling feedparq runs with cron %r", cron_expr)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")


def main():  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
