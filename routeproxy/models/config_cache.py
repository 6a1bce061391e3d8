"""
In-process cache of the routing config in front of the config store.
"""
from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Callable, NamedTuple, Optional

from flask import current_app

from routeproxy.models.config_store import ConfigStore, ConfigStoreError
from routeproxy.models.route_config import Config

logger = logging.getLogger(__name__)

CONFIG_KEY = "proxy_config_v1"
DEFAULT_TTL_SECONDS = 60.0


class CacheEntry(NamedTuple):
    value: Config
    fetched_at: float


class ConfigCache:
    """
    Serves the routing config from memory while it is younger than ``ttl``
    and refreshes it from the store otherwise.

    The entry is an immutable tuple replaced as a whole. ``_generation`` is
    bumped by every write; a refresh only installs its result if no write
    completed while it was talking to the store.
    """

    def __init__(
        self,
        store: Optional[ConfigStore],
        key: str = CONFIG_KEY,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.key = key
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._generation = 0
        self._lock = Lock()
        self._write_lock = Lock()

    @property
    def available(self) -> bool:
        """True when a backing store is configured."""
        return self.store is not None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def read(self, strict: bool = False) -> Config:
        """
        Return the current config, or an empty one if the store fails.

        With ``strict`` a failed refresh raises ConfigStoreError instead, for
        callers that must not mistake an outage for an empty routes table.
        """
        now = self._clock()
        entry = self._entry
        if entry is not None and now - entry.fetched_at < self.ttl:
            return entry.value

        if self.store is None:
            if strict:
                raise ConfigStoreError("Config store is not available")
            return Config.empty()

        generation = self._generation
        try:
            raw = self.store.get(self.key)
            config = Config.from_dict(raw) if raw is not None else Config.empty()
        except Exception as e:
            if strict:
                logger.error(f"Config store read failed: {e}")
                if isinstance(e, ConfigStoreError):
                    raise
                raise ConfigStoreError(f"Stored routing config is unreadable: {e}") from e
            logger.warning(f"Config store read failed, serving empty config: {e}")
            return Config.empty()

        with self._lock:
            if self._generation == generation:
                self._entry = CacheEntry(config, now)
        return config

    def write(self, config: Config) -> None:
        """
        Persist ``config`` and make it the cached value.

        Raises ConfigStoreError when there is no store or the store rejects
        the write; the cache is left as it was in that case.
        """
        if self.store is None:
            raise ConfigStoreError("Config store is not available")

        with self._write_lock:
            self.store.set(self.key, config.to_dict())
            with self._lock:
                self._generation += 1
                self._entry = CacheEntry(config, self._clock())


def get_config_cache() -> ConfigCache:
    """The ConfigCache owned by the current Flask app."""
    return current_app.extensions["config_cache"]
