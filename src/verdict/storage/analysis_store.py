#!/usr/bin/env python3
"""
Analysis history repository.

Bounded, newest-first collection of analysis results. Stored records are
migrated lazily on read; records that cannot be migrated or parsed are
dropped from the returned list with a warning.
"""

import logging
import random
import string
from typing import Any, Callable, Dict, List, Optional

from ..migration import migrate_analyses_array, needs_migration
from ..models import AnalysisResult, AnalysisSummary
from ..models.analysis import ANALYSIS_ID_PREFIX
from ..timeutils import now_ms
from ..validation import is_valid_analysis_result
from .collection_store import BoundedCollectionStore, StorageKeys

logger = logging.getLogger(__name__)

DEFAULT_ANALYSES_CAP = 100
COPY_SUFFIX = " (Copy)"

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_analysis_id(timestamp_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """Build an id of the form ``analysis_<ms>_<9 base36 chars>``."""
    rng = rng or random.Random()
    stamp = timestamp_ms if timestamp_ms is not None else now_ms()
    suffix = ''.join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"{ANALYSIS_ID_PREFIX}{stamp}_{suffix}"


class AnalysisRepository:
    """Persisted analysis history."""

    def __init__(self, store: BoundedCollectionStore, cap: int = DEFAULT_ANALYSES_CAP,
                 clock: Callable[[], int] = now_ms, rng: Optional[random.Random] = None):
        self.store = store
        self.cap = cap
        self.clock = clock
        self.rng = rng or random.Random()
        self.key = StorageKeys.ANALYSES

    async def load_records(self) -> List[Dict[str, Any]]:
        """Load raw records at the current schema version."""
        raw = await self.store.load(self.key)
        if any(needs_migration(item) for item in raw):
            result = migrate_analyses_array(raw)
            for warning in result.warnings:
                logger.info(warning)
            raw = result.data

        records = []
        for item in raw:
            if is_valid_analysis_result(item):
                records.append(item)
            else:
                record_id = item.get('id') if isinstance(item, dict) else None
                logger.warning(f"Dropping invalid stored analysis {record_id!r}")
        return records

    async def load_analyses(self) -> List[AnalysisResult]:
        analyses = []
        for record in await self.load_records():
            try:
                analyses.append(AnalysisResult.from_dict(record))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                logger.warning(f"Skipping unreadable analysis {record.get('id')!r}: {e}")
        return analyses

    async def save_analysis(self, analysis: AnalysisResult) -> None:
        """Prepend a new analysis, evicting the oldest beyond the cap."""
        await self.store.prepend(self.key, analysis.to_dict(), self.cap)
        logger.info(f"Saved analysis {analysis.id}")

    async def replace_all(self, records: List[Dict[str, Any]]) -> None:
        await self.store.save(self.key, list(records)[:self.cap])

    async def get_analysis_by_id(self, analysis_id: str) -> Optional[AnalysisResult]:
        for analysis in await self.load_analyses():
            if analysis.id == analysis_id:
                return analysis
        return None

    async def get_analysis_summaries(self) -> List[AnalysisSummary]:
        return [analysis.to_summary() for analysis in await self.load_analyses()]

    async def delete_analysis(self, analysis_id: str) -> bool:
        records = await self.load_records()
        kept = [record for record in records if record['id'] != analysis_id]
        if len(kept) == len(records):
            logger.debug(f"Analysis {analysis_id} not found, nothing deleted")
            return False
        await self.store.save(self.key, kept)
        logger.info(f"Deleted analysis {analysis_id}")
        return True

    async def _update_record(self, analysis_id: str, changes: Dict[str, Any]) -> bool:
        records = await self.load_records()
        for record in records:
            if record['id'] == analysis_id:
                record.update(changes)
                await self.store.save(self.key, records)
                return True
        return False

    async def rename_analysis(self, analysis_id: str, title: str) -> bool:
        """Set the headline shown in history."""
        title = title.strip()
        if not title:
            return False
        return await self._update_record(analysis_id, {'verdictHeadline': title})

    async def add_takeaway(self, analysis_id: str, takeaway: str) -> bool:
        return await self._update_record(analysis_id, {'takeaway': takeaway.strip() or None})

    async def duplicate_analysis(self, analysis_id: str) -> Optional[AnalysisResult]:
        """
        Copy an analysis under a fresh id and timestamp.

        The copy's headline is suffixed with " (Copy)", its takeaway is cleared,
        and it is stored at the front of the history.
        """
        original = await self.get_analysis_by_id(analysis_id)
        if original is None:
            return None

        created_at = self.clock()
        copy_data = original.to_dict()
        copy_data.update({
            'id': generate_analysis_id(created_at, self.rng),
            'createdAt': created_at,
            'verdictHeadline': f"{original.verdict_headline}{COPY_SUFFIX}",
            'takeaway': None,
        })
        duplicate = AnalysisResult.from_dict(copy_data)
        await self.save_analysis(duplicate)
        return duplicate

    async def clear(self) -> None:
        await self.store.remove_key(self.key)
