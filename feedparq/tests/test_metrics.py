import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from feedparq.metrics import (
    URN_COUNTERS_RUN_COUNT,
    URN_HISTOGRAMS_RUN_DURATION,
    MetricsStore,
    metrics_table,
)


class MetricsStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = Path(self._tmp.name) / "data" / "metrics.db"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_counter_and_histogram(self):
        store = MetricsStore(self.db_path)
        store.increment(URN_COUNTERS_RUN_COUNT)
        store.increment(URN_COUNTERS_RUN_COUNT)
        store.record(URN_HISTOGRAMS_RUN_DURATION, 120.0)
        store.record(URN_HISTOGRAMS_RUN_DURATION, 80.0)

        self.assertEqual(store.counter(URN_COUNTERS_RUN_COUNT), 2)
        self.assertEqual(store.histogram(URN_HISTOGRAMS_RUN_DURATION), [120.0, 80.0])
        summary = store.summary()
        self.assertEqual(summary[URN_COUNTERS_RUN_COUNT], {"kind": "counter", "value": 2})
        self.assertEqual(summary[URN_HISTOGRAMS_RUN_DURATION]["count"], 2)
        self.assertEqual(summary[URN_HISTOGRAMS_RUN_DURATION]["mean"], 100.0)
        store.close()

    def test_unknown_counter_is_zero(self):
        store = MetricsStore(self.db_path)
        self.assertEqual(store.counter("urn:feedparq:counters.nothing"), 0)
        store.close()

    def test_prune_drops_old_samples(self):
        store = MetricsStore(self.db_path, retention=None)
        with store.engine.begin() as conn:
            conn.execute(
                metrics_table.insert().values(
                    key=URN_HISTOGRAMS_RUN_DURATION,
                    kind="histogram",
                    value=1.0,
                    recorded_at=datetime.now(timezone.utc) - timedelta(days=3),
                )
            )
        store.record(URN_HISTOGRAMS_RUN_DURATION, 2.0)
        self.assertEqual(store.prune(timedelta(days=1)), 1)
        self.assertEqual(store.histogram(URN_HISTOGRAMS_RUN_DURATION), [2.0])
        store.close()


if __name__ == "__main__":
    unittest.main()
