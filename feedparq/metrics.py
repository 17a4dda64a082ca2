"""
SQLite-backed run metrics: counters and histogram samples.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, Float, Integer, MetaData, String, Table, create_engine, delete, func, select

logger = logging.getLogger(__name__)

URN_COUNTERS_RUN_COUNT = "urn:feedparq:counters.run_count"
URN_HISTOGRAMS_RUN_DURATION = "urn:feedparq:histograms.run_duration"
URN_HISTOGRAMS_FULL_RUN_DURATION = "urn:feedparq:histograms.full_run_duration"

COUNTER = "counter"
HISTOGRAM = "histogram"

metadata = MetaData()

metrics_table = Table(
    "metrics",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("key", String, index=True, nullable=False),
    Column("kind", String, nullable=False),
    Column("value", Float, nullable=False),
    Column("recorded_at", DateTime(timezone=True), index=True, nullable=False),
)


class MetricsStore:
    def __init__(self, db_path: Path | str = "data/metrics.db", retention: Optional[timedelta] = timedelta(days=1)) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(f"sqlite:///{self.db_path}", future=True)
        metadata.create_all(self.engine)
        self.retention = retention
        if retention is not None:
            self.prune(retention)

    def increment(self, key: str, by: int = 1) -> None:
        self._insert(key, COUNTER, float(by))

    def record(self, key: str, value: float) -> None:
        self._insert(key, HISTOGRAM, float(value))

    def counter(self, key: str) -> int:
        stmt = select(func.coalesce(func.sum(metrics_table.c.value), 0)).where(
            metrics_table.c.key == key, metrics_table.c.kind == COUNTER
        )
        with self.engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())

    def histogram(self, key: str) -> List[float]:
        stmt = (
            select(metrics_table.c.value)
            .where(metrics_table.c.key == key, metrics_table.c.kind == HISTOGRAM)
            .order_by(metrics_table.c.id)
        )
        with self.engine.connect() as conn:
            return [row[0] for row in conn.execute(stmt)]

    def summary(self) -> Dict[str, Dict[str, Any]]:
        stmt = (
            select(
                metrics_table.c.key,
                metrics_table.c.kind,
                func.count(),
                func.sum(metrics_table.c.value),
                func.min(metrics_table.c.value),
                func.max(metrics_table.c.value),
            )
            .group_by(metrics_table.c.key, metrics_table.c.kind)
            .order_by(metrics_table.c.key)
        )
        result: Dict[str, Dict[str, Any]] = {}
        with self.engine.connect() as conn:
            for key, kind, count, total, low, high in conn.execute(stmt):
                if kind == COUNTER:
                    result[key] = {"kind": kind, "value": int(total)}
                else:
                    result[key] = {
                        "kind": kind,
                        "count": count,
                        "min": low,
                        "max": high,
                        "mean": total / count if count else 0.0,
                    }
        return result

    def prune(self, retention: timedelta) -> int:
        cutoff = datetime.now(timezone.utc) - retention
        with self.engine.begin() as conn:
            removed = conn.execute(delete(metrics_table).where(metrics_table.c.recorded_at < cutoff)).rowcount
        if removed:
            logger.debug("Pruned %d metric samples older than %s", removed, cutoff.isoformat())
        return removed

    def _insert(self, key: str, kind: str, value: float) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                metrics_table.insert().values(
                    key=key,
                    kind=kind,
                    value=value,
                    recorded_at=datetime.now(timezone.utc),
                )
            )

    def close(self) -> None:
        self.engine.dispose()
