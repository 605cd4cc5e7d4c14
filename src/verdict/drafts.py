#!/usr/bin/env python3
"""
Draft Autosave Manager.

Single-slot persistence of the in-progress input. Saving overwrites the
slot wholesale; expiry is enforced when the draft is read.
"""

import logging
from typing import Callable, Optional

from .models import DraftData
from .storage import BoundedCollectionStore, StorageKeys
from .timeutils import now_ms

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_TTL_HOURS = 24


class DraftManager:
    """Saves, loads and expires the autosave draft."""

    def __init__(self, store: BoundedCollectionStore, ttl_hours: float = DEFAULT_DRAFT_TTL_HOURS,
                 clock: Callable[[], int] = now_ms):
        self.store = store
        self.ttl_ms = int(ttl_hours * 60 * 60 * 1000)
        self.clock = clock
        self.key = StorageKeys.DRAFT

    async def save_draft(self, draft: DraftData) -> None:
        await self.store.save_object(self.key, draft.to_dict())
        logger.debug(f"Draft saved with {len(draft.sides)} sides")

    async def load_draft(self, now: Optional[int] = None) -> Optional[DraftData]:
        """
        Load the draft, or None if absent, unreadable or expired.

        An expired draft is deleted as a side effect of the read.
        """
        stored = await self.store.load_object(self.key)
        if stored is None:
            return None

        try:
            draft = DraftData.from_dict(stored)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable draft: {e}")
            return None

        now = now if now is not None else self.clock()
        if now - draft.saved_at > self.ttl_ms:
            logger.info("Draft expired, removing it")
            await self.clear_draft()
            return None

        return draft

    async def clear_draft(self) -> None:
        await self.store.remove_key(self.key)
