import unittest
from pathlib import Path

from feedparq.errors import SchemaMismatchError
from feedparq.flatten import flatten
from feedparq.merge import merge_tables
from feedparq.models import Entry, Feed
from feedparq.retriever import feed_from_file
from feedparq.schema import COLUMNS, ROW_SCHEMA

FIXTURES = Path(__file__).resolve().parent / "fixtures"


class MergeTablesTests(unittest.TestCase):
    def test_zero_tables_gives_empty_schema(self):
        table = merge_tables([])
        self.assertEqual(table.height, 0)
        self.assertEqual(table.columns, COLUMNS)
        self.assertEqual(table.dtypes, list(ROW_SCHEMA.values()))

    def test_blog_and_podcast(self):
        blog = flatten(feed_from_file(FIXTURES / "blog-feed.xml"))
        podcast = flatten(feed_from_file(FIXTURES / "podcast.rss"))
        merged = merge_tables([blog, podcast])
        self.assertEqual(merged.height, 344)
        self.assertEqual(merged.width, 16)
        self.assertEqual(merged.columns, COLUMNS)

    def test_preserves_table_and_row_order(self):
        first = flatten(Feed(id="one", entries=[Entry(id="1a"), Entry(id="1b")]))
        empty = flatten(Feed(id="none"))
        second = flatten(Feed(id="two", entries=[Entry(id="2a")]))
        merged = merge_tables([second, empty, first])
        self.assertEqual(merged["id"].to_list(), ["2a", "1a", "1b"])

    def test_schema_mismatch_is_fatal(self):
        good = flatten(Feed(entries=[Entry(id="x")]))
        bad = good.drop("media_url")
        with self.assertRaises(SchemaMismatchError):
            merge_tables([good, bad])


if __name__ == "__main__":
    unittest.main()
