"""
Durable key/value storage for the proxy configuration.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ConfigStoreError(Exception):
    """The store could not be read or written."""


class ConfigStore(ABC):
    """Minimal get/set persistence interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or None when absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Persist ``value`` under ``key``, raising ConfigStoreError on failure."""


class JsonFileStore(ConfigStore):
    """
    Stores every key in one JSON document.

    Writes go to a temporary file in the same directory and replace the
    document with ``os.replace``, so readers never see a half-written file.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = Lock()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigStoreError(f"Cannot create store directory {self.path.parent}: {e}") from e

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigStoreError(f"Error reading {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigStoreError(f"Store file {self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            fd, tmp_name = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, self.path)
            except (OSError, TypeError, ValueError) as e:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
                raise ConfigStoreError(f"Error writing {self.path}: {e}") from e
        logger.debug("Stored key %s in %s", key, self.path)
