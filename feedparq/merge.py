"""
Concatenate per-feed tables into one output table.
"""
from __future__ import annotations

from typing import Sequence

import polars as pl

from feedparq.errors import SchemaMismatchError
from feedparq.schema import COLUMNS, conforms, empty_table


def merge_tables(tables: Sequence[pl.DataFrame]) -> pl.DataFrame:
    """
    Stack ``tables`` in the order given. Zero tables produce an empty table
    with the full row schema, so "nothing fetched" is still a valid output.
    """
    if not tables:
        return empty_table()
    for position, table in enumerate(tables):
        if not conforms(table):
            raise SchemaMismatchError(
                f"table #{position} has columns {table.columns} / {table.dtypes}, expected {COLUMNS}"
            )
    return pl.concat(list(tables), how="vertical", rechunk=True)
