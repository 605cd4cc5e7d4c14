#!/usr/bin/env python3
"""
Bounded Collection Store.

Corruption-tolerant read/write of JSON arrays and objects on top of a
key/value backend.

Rules:
- Reads never raise: a missing key or unparsable payload yields the default.
- Writes replace the whole collection; there is no indexed update.
- Inserts prepend and then truncate to the capacity, so index 0 is always
  the newest item and the cap holds after every single insert.
- No caching: every call re-reads the backend.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .backends import KeyValueBackend
from ..exceptions import StorageCorruptionError

logger = logging.getLogger(__name__)

JsonObject = Dict[str, Any]
Predicate = Callable[[JsonObject], bool]


class StorageKeys:
    """Logical keys of the persisted collections."""
    ANALYSES = 'verdict_analyses'
    SETTINGS = 'verdict_settings'
    INSIGHTS = 'verdict_insights'
    TEMPLATES = 'verdict_templates'
    DRAFT = 'verdict_draft'


class BoundedCollectionStore:
    """Whole-collection read-modify-write store."""

    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    async def _read_json(self, key: str) -> Tuple[bool, Any]:
        """Return (found, value). Corrupted payloads are reported as not found."""
        raw = await self.backend.get_item(key)
        if raw is None:
            return False, None
        try:
            return True, json.loads(raw)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            error = StorageCorruptionError(key, e)
            logger.warning(f"{error.message}, treating as empty: {e}")
            return False, None

    async def load(self, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        """Load a collection; missing or corrupted data yields the default (empty list)."""
        fallback = list(default) if default is not None else []
        found, value = await self._read_json(key)
        if not found:
            return fallback
        if not isinstance(value, list):
            logger.warning(f"Stored value for '{key}' is not a list, treating as empty")
            return fallback
        return value

    async def save(self, key: str, items: List[Any]) -> None:
        """Replace the whole collection."""
        await self.backend.set_item(key, json.dumps(items, ensure_ascii=False))
        logger.debug(f"Saved {len(items)} items to '{key}'")

    async def prepend(self, key: str, item: Any, cap: int) -> List[Any]:
        """Insert item at index 0 and truncate to cap. Returns the stored collection."""
        items = await self.load(key)
        items.insert(0, item)
        trimmed = items[:cap]
        if len(items) > cap:
            logger.info(f"Evicted {len(items) - cap} oldest item(s) from '{key}' (cap {cap})")
        await self.save(key, trimmed)
        return trimmed

    async def update(self, key: str, predicate: Predicate,
                     fn: Callable[[JsonObject], JsonObject]) -> Optional[JsonObject]:
        """
        Replace the first item matching predicate with fn(item).

        Returns the updated item, or None when nothing matched (nothing is written).
        """
        items = await self.load(key)
        for index, item in enumerate(items):
            if isinstance(item, dict) and predicate(item):
                items[index] = fn(dict(item))
                await self.save(key, items)
                return items[index]
        return None

    async def remove(self, key: str, predicate: Predicate) -> int:
        """Remove every item matching predicate. Returns the number removed."""
        items = await self.load(key)
        kept = [item for item in items if not (isinstance(item, dict) and predicate(item))]
        removed = len(items) - len(kept)
        if removed:
            await self.save(key, kept)
        return removed

    async def load_object(self, key: str) -> Optional[JsonObject]:
        """Load a singleton object; missing, corrupted or non-object data yields None."""
        found, value = await self._read_json(key)
        if not found:
            return None
        if not isinstance(value, dict):
            logger.warning(f"Stored value for '{key}' is not an object, ignoring")
            return None
        return value

    async def save_object(self, key: str, value: JsonObject) -> None:
        await self.backend.set_item(key, json.dumps(value, ensure_ascii=False))

    async def remove_key(self, key: str) -> None:
        await self.backend.remove_item(key)

    async def remove_keys(self, keys: List[str]) -> None:
        await self.backend.multi_remove(keys)
