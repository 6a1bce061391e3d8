"""
Tests for ConfigCache freshness, expiry and store-failure behaviour.
"""
import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from proxy_fakes import FakeClock, FakeStore
from routeproxy.models.config_cache import CONFIG_KEY, ConfigCache
from routeproxy.models.config_store import ConfigStoreError
from routeproxy.models.route_config import Config, Route

STORED = {"routes": [{"path": "/openai", "target": "https://api.openai.com"}]}


class TestConfigCache(unittest.TestCase):
    """ConfigCache over a fake store and a fake clock."""

    def setUp(self):
        self.store = FakeStore({CONFIG_KEY: STORED})
        self.clock = FakeClock()
        self.cache = ConfigCache(self.store, ttl=60, clock=self.clock)

    def test_first_read_fetches_from_store(self):
        config = self.cache.read()

        self.assertEqual(config.to_dict(), STORED)
        self.assertEqual(self.store.get_calls, 1)
        self.assertEqual(self.cache.entry.fetched_at, self.clock.now)

    def test_fresh_entry_is_served_without_store_call(self):
        self.cache.read()
        self.clock.advance(59.9)
        self.cache.read()

        self.assertEqual(self.store.get_calls, 1)

    def test_expired_entry_is_refreshed(self):
        self.cache.read()
        self.store.data[CONFIG_KEY] = {"routes": [{"path": "/new", "target": "http://new"}]}
        self.clock.advance(60)

        config = self.cache.read()

        self.assertEqual(config.routes, (Route("/new", "http://new"),))
        self.assertEqual(self.store.get_calls, 2)

    def test_absent_key_reads_as_empty_config_and_is_cached(self):
        cache = ConfigCache(FakeStore(), clock=self.clock)

        self.assertEqual(cache.read(), Config.empty())
        self.assertIsNotNone(cache.entry)

    def test_write_is_visible_immediately_without_store_read(self):
        new_config = Config(routes=[Route("/x", "http://x")])

        self.cache.write(new_config)
        result = self.cache.read()

        self.assertEqual(result, new_config)
        self.assertEqual(self.store.get_calls, 0)
        self.assertEqual(self.store.data[CONFIG_KEY], new_config.to_dict())

    def test_write_resets_freshness_window(self):
        self.cache.read()
        self.clock.advance(59)
        self.cache.write(Config(routes=[Route("/x", "http://x")]))
        self.clock.advance(59)

        self.cache.read()

        self.assertEqual(self.store.get_calls, 1)

    def test_store_outage_without_entry_degrades_to_empty(self):
        self.store.fail_get = True

        config = self.cache.read()

        self.assertEqual(config, Config.empty())
        self.assertIsNone(self.cache.entry)

    def test_store_outage_does_not_replace_expired_entry(self):
        self.cache.read()
        entry = self.cache.entry
        self.clock.advance(120)
        self.store.fail_get = True

        self.assertEqual(self.cache.read(), Config.empty())
        self.assertIs(self.cache.entry, entry)

        # Store back: next read refreshes
        self.store.fail_get = False
        self.assertEqual(self.cache.read().to_dict(), STORED)

    def test_malformed_stored_value_degrades_to_empty(self):
        self.store.data[CONFIG_KEY] = {"routes": "not-a-list"}

        self.assertEqual(self.cache.read(), Config.empty())
        self.assertIsNone(self.cache.entry)

    def test_strict_read_raises_on_store_outage(self):
        self.cache.read()
        entry = self.cache.entry
        self.clock.advance(60)
        self.store.fail_get = True

        with self.assertRaises(ConfigStoreError):
            self.cache.read(strict=True)
        self.assertIs(self.cache.entry, entry)

        # Lenient readers still degrade
        self.assertEqual(self.cache.read(), Config.empty())

    def test_strict_read_raises_on_malformed_value(self):
        self.store.data[CONFIG_KEY] = {"routes": "not-a-list"}

        with self.assertRaises(ConfigStoreError):
            self.cache.read(strict=True)
        self.assertIsNone(self.cache.entry)

    def test_strict_read_serves_fresh_entry_without_store(self):
        self.cache.read()
        self.store.fail_get = True

        self.assertEqual(self.cache.read(strict=True).to_dict(), STORED)
        self.assertEqual(self.store.get_calls, 1)

    def test_failed_write_raises_and_keeps_cache(self):
        self.cache.read()
        entry = self.cache.entry
        self.store.fail_set = True

        with self.assertRaises(ConfigStoreError):
            self.cache.write(Config(routes=[Route("/x", "http://x")]))

        self.assertIs(self.cache.entry, entry)
        self.assertEqual(self.cache.read().to_dict(), STORED)

    def test_refresh_racing_a_write_does_not_clobber_it(self):
        written = Config(routes=[Route("/written", "http://w")])
        cache = self.cache
        store = self.store
        original_get = store.get

        def get_then_write(key):
            value = original_get(key)
            # A write completes while this refresh is waiting on the store
            store.get = original_get
            cache.write(written)
            return value

        store.get = get_then_write

        stale = cache.read()

        self.assertEqual(stale.to_dict(), STORED)
        self.assertEqual(cache.read(), written)

    def test_no_store(self):
        cache = ConfigCache(None, clock=self.clock)

        self.assertFalse(cache.available)
        self.assertEqual(cache.read(), Config.empty())
        with self.assertRaises(ConfigStoreError):
            cache.read(strict=True)
        with self.assertRaises(ConfigStoreError):
            cache.write(Config.empty())


if __name__ == '__main__':
    unittest.main()
