#!/usr/bin/env python3
"""
Key/value persistence backends.

The persistent medium beneath the collection store: raw string values
addressed by key. The store never touches files directly.
"""

import asyncio
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from ..exceptions import StorageWriteError

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """Abstract async key/value medium."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Return the raw stored string, or None if the key is absent."""
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Replace the value stored under key."""
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove key; removing an absent key is a no-op."""
        pass

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            await self.remove_item(key)


class MemoryBackend(KeyValueBackend):
    """In-process backend for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self.write_count += 1

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return set(self._items.keys())


class FileBackend(KeyValueBackend):
    """
    One JSON file per key under a data directory.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash mid-write never leaves a half-written value.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"FileBackend initialized at {self.data_dir}")

    def _path_for(self, key: str) -> Path:
        safe_key = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in key)
        return self.data_dir / f"{safe_key}.json"

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def set_item(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as e:
            logger.error(f"Failed to write {key}: {e}")
            raise StorageWriteError(key, e) from e

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    def _read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            # Unreadable bytes are treated like unparsable JSON by the store
            logger.warning(f"Could not read {path}: {e}")
            return ""

    def _write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _remove(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            pass
