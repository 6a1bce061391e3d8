"""
Tests for the JSON file store.
"""
import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from routeproxy.models.config_store import ConfigStoreError, JsonFileStore


class TestJsonFileStore(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "data" / "store.json"
        self.store = JsonFileStore(self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_reads_as_absent(self):
        self.assertIsNone(self.store.get("proxy_config_v1"))

    def test_set_then_get(self):
        value = {"routes": [{"path": "/a", "target": "http://a"}]}
        self.store.set("proxy_config_v1", value)

        self.assertEqual(self.store.get("proxy_config_v1"), value)
        self.assertEqual(JsonFileStore(self.path).get("proxy_config_v1"), value)

    def test_set_keeps_other_keys(self):
        self.store.set("one", 1)
        self.store.set("two", 2)

        with open(self.path) as f:
            self.assertEqual(json.load(f), {"one": 1, "two": 2})

    def test_no_temp_files_left_behind(self):
        self.store.set("one", 1)

        self.assertEqual(os.listdir(self.path.parent), ["store.json"])

    def test_corrupt_file_raises_store_error(self):
        self.path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(ConfigStoreError):
            self.store.get("proxy_config_v1")

    def test_non_object_document_raises_store_error(self):
        self.path.write_text("[1, 2]", encoding="utf-8")

        with self.assertRaises(ConfigStoreError):
            self.store.get("proxy_config_v1")

    def test_unserialisable_value_raises_store_error(self):
        with self.assertRaises(ConfigStoreError):
            self.store.set("bad", object())


if __name__ == '__main__':
    unittest.main()
