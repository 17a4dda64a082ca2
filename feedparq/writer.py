"""
Columnar file output for merged tables.
"""
from __future__ import annotations

import logging
from pathlib import Path

import polars as pl

logger = logging.getLogger(__name__)


def write_table(table: pl.DataFrame, path: Path | str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    table.write_parquet(target)
    logger.info("Wrote %d rows to %s", table.height, target)
    return target
