#!/usr/bin/env python3
"""
Settings store.

Settings are persisted as a versioned envelope. Every read migrates the
payload, merges it over defaults and runs the quota staleness check; a
reset is written through before the settings are returned.
"""

import dataclasses
import logging
from typing import Any, Callable, Optional

from ..migration import migrate_settings, unwrap_versioned, wrap_with_version
from ..models import AppSettings
from ..quota import QuotaTracker
from ..timeutils import now_ms
from .collection_store import BoundedCollectionStore, StorageKeys

logger = logging.getLogger(__name__)


class SettingsStore:
    """Persisted AppSettings singleton."""

    def __init__(self, store: BoundedCollectionStore, quota: QuotaTracker,
                 clock: Callable[[], int] = now_ms):
        self.store = store
        self.quota = quota
        self.clock = clock
        self.key = StorageKeys.SETTINGS

    def default_settings(self, now: Optional[int] = None) -> AppSettings:
        return AppSettings(week_start_timestamp=self.quota.week_start(now))

    async def load_settings(self, now: Optional[int] = None) -> AppSettings:
        """Load settings, resetting a stale quota window as a side effect."""
        now = now if now is not None else self.clock()
        stored = await self.store.load_object(self.key)
        if stored is None:
            return self.default_settings(now)

        result = unwrap_versioned(stored, migrate_settings)
        if not result.success:
            logger.warning(f"Stored settings could not be migrated ({result.error}), using defaults")
            return self.default_settings(now)
        for warning in result.warnings:
            logger.info(warning)

        try:
            settings = self._merge_over_defaults(result.data, now)
        except (TypeError, ValueError) as e:
            logger.warning(f"Stored settings are invalid ({e}), using defaults")
            return self.default_settings(now)

        if self.quota.apply_rollover(settings, now):
            await self.save_settings(settings)
        return settings

    def _merge_over_defaults(self, data: Any, now: int) -> AppSettings:
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        merged = self.default_settings(now).to_dict()
        merged.update(data)
        return AppSettings.from_dict(merged)

    async def save_settings(self, settings: AppSettings) -> None:
        await self.store.save_object(self.key, wrap_with_version(settings.to_dict(), self.clock()))

    async def update_settings(self, **changes: Any) -> AppSettings:
        """Apply snake_case attribute changes and persist."""
        settings = await self.load_settings()
        unknown = [name for name in changes if name not in AppSettings.__dataclass_fields__]
        if unknown:
            raise AttributeError(f"Unknown setting(s): {', '.join(unknown)}")
        # replace() re-runs __post_init__ coercion of enum and integer fields
        settings = dataclasses.replace(settings, **changes)
        await self.save_settings(settings)
        return settings


async def clear_all_data(store: BoundedCollectionStore) -> None:
    """Remove analyses, settings and cached insights. Templates and draft are kept."""
    await store.remove_keys([StorageKeys.ANALYSES, StorageKeys.SETTINGS, StorageKeys.INSIGHTS])
    logger.info("Cleared all analyses, settings and insights")
