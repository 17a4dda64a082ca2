import threading
import time
import unittest
from pathlib import Path

from feedparq.errors import FeedIoError, FeedNetworkError, FeedParseError
from feedparq.models import Entry, Feed, FeedAddress, Text
from feedparq.retriever import FeedRetriever
from feedparq.scheduler import FetchScheduler, urls_to_tables
from feedparq.schema import COLUMNS

FIXTURES = Path(__file__).resolve().parent / "fixtures"


class _FakeRetriever:
    """Serves canned feeds per address, tracking how many calls overlap."""

    def __init__(self, feeds, delays=None):
        self.feeds = feeds
        self.delays = delays or {}
        self.in_flight = 0
        self.peak = 0
        self.calls = []
        self._lock = threading.Lock()

    def retrieve(self, address):
        with self._lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            self.calls.append(address.value)
        try:
            time.sleep(self.delays.get(address.value, 0.02))
            outcome = self.feeds[address.value]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            with self._lock:
                self.in_flight -= 1


def _feed(name: str, n_entries: int) -> Feed:
    return Feed(
        id=name,
        title=Text(content=name),
        entries=[Entry(id=f"{name}-{i}") for i in range(n_entries)],
    )


class FetchSchedulerTests(unittest.TestCase):
    def test_caps_in_flight_fetches(self):
        feeds = {f"https://example.com/{i}.xml": _feed(str(i), 1) for i in range(12)}
        retriever = _FakeRetriever(feeds, delays={key: 0.05 for key in feeds})
        result = FetchScheduler(retriever=retriever, concurrency=4).run(
            [FeedAddress.parse(key) for key in feeds]
        )
        self.assertEqual(result.succeeded, 12)
        self.assertLessEqual(retriever.peak, 4)
        self.assertGreater(retriever.peak, 1)

    def test_failures_are_partitioned_not_raised(self):
        feeds = {
            "https://ok.example/a.xml": _feed("a", 2),
            "https://down.example/b.xml": FeedNetworkError("https://down.example/b.xml", "refused"),
            "/missing/c.xml": FeedIoError("/missing/c.xml", "No such file"),
            "https://ok.example/d.xml": _feed("d", 3),
            "https://bad.example/e.xml": FeedParseError("https://bad.example/e.xml", "not xml"),
        }
        addresses = [FeedAddress.parse(key) for key in feeds]
        result = FetchScheduler(retriever=_FakeRetriever(feeds), concurrency=4).run(addresses)

        self.assertEqual([table.height for table in result.tables], [2, 3])
        self.assertEqual(result.failed, 3)
        self.assertEqual(
            [failure.address.value for failure in result.failures],
            ["https://down.example/b.xml", "/missing/c.xml", "https://bad.example/e.xml"],
        )
        self.assertIsInstance(result.failures[0].error, FeedNetworkError)
        self.assertIsInstance(result.failures[1].error, FeedIoError)
        self.assertIsInstance(result.failures[2].error, FeedParseError)

    def test_results_follow_submission_order(self):
        feeds = {f"https://example.com/{i}.xml": _feed(f"feed-{i}", 1) for i in range(6)}
        # Earlier addresses finish last.
        delays = {key: 0.02 * (6 - i) for i, key in enumerate(feeds)}
        retriever = _FakeRetriever(feeds, delays=delays)
        result = FetchScheduler(retriever=retriever, concurrency=6).run(
            [FeedAddress.parse(key) for key in feeds]
        )
        self.assertEqual([table["feed_id"][0] for table in result.tables], [f"feed-{i}" for i in range(6)])

    def test_empty_input(self):
        retriever = _FakeRetriever({})
        result = FetchScheduler(retriever=retriever).run([])
        self.assertEqual(result.tables, [])
        self.assertEqual(result.failures, [])
        self.assertEqual(retriever.calls, [])

    def test_rejects_non_positive_concurrency(self):
        with self.assertRaises(ValueError):
            FetchScheduler(retriever=_FakeRetriever({}), concurrency=0)

    def test_each_address_fetched_once(self):
        feeds = {f"https://example.com/{i}.xml": _feed(str(i), 0) for i in range(5)}
        retriever = _FakeRetriever(feeds)
        result = FetchScheduler(retriever=retriever).run([FeedAddress.parse(key) for key in feeds])
        self.assertEqual(sorted(retriever.calls), sorted(feeds))
        self.assertTrue(all(table.columns == COLUMNS for table in result.tables))


class UrlsToTablesTests(unittest.TestCase):
    def test_drops_unreachable_and_logs(self):
        addresses = [
            FeedAddress.from_path(FIXTURES / "blog-feed.xml"),
            FeedAddress.from_path(FIXTURES / "missing.xml"),
            FeedAddress.from_path(FIXTURES / "not-a-feed.txt"),
            FeedAddress.from_path(FIXTURES / "videos.xml"),
        ]
        with self.assertLogs("feedparq.scheduler", level="WARNING") as logs:
            tables = urls_to_tables(addresses, concurrency=4, retriever=FeedRetriever())
        self.assertEqual([table.height for table in tables], [20, 15])
        self.assertEqual(len(logs.records), 2)

    def test_unreadable_path_is_dropped_not_raised(self):
        addresses = [
            FeedAddress.from_path(FIXTURES / "blog-feed.xml"),
            FeedAddress.from_path("bad\x00name.xml"),
        ]
        with self.assertLogs("feedparq.scheduler", level="WARNING") as logs:
            tables = urls_to_tables(addresses, concurrency=2, retriever=FeedRetriever())
        self.assertEqual([table.height for table in tables], [20])
        self.assertEqual(len(logs.records), 1)


if __name__ == "__main__":
    unittest.main()
