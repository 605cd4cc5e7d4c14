#!/usr/bin/env python3
"""
Analysis template repository.

Bounded collection of quick-start templates with usage tracking.
"""

import logging
import random
import string
from typing import Any, Callable, Dict, List, Optional

from ..models import AnalysisTemplate, TemplateSummary
from ..timeutils import now_ms
from ..validation import is_valid_template
from .collection_store import BoundedCollectionStore, StorageKeys

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_CAP = 20
TEMPLATE_ID_PREFIX = "template_"

# Fields callers may change through update_template
_MUTABLE_FIELDS = {'title', 'description', 'sides', 'commentatorStyle', 'evidenceMode'}


def generate_template_id(timestamp_ms: int, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    suffix = "".join(rng.choice(string.digits + string.ascii_lowercase) for _ in range(5))
    return f"{TEMPLATE_ID_PREFIX}{timestamp_ms}_{suffix}"


class TemplateRepository:
    """Persisted template collection, newest first."""

    def __init__(self, store: BoundedCollectionStore, cap: int = DEFAULT_TEMPLATES_CAP,
                 clock: Callable[[], int] = now_ms):
        self.store = store
        self.cap = cap
        self.clock = clock
        self.key = StorageKeys.TEMPLATES

    async def _load_records(self) -> List[Dict[str, Any]]:
        records = await self.store.load(self.key)
        valid = [record for record in records if is_valid_template(record)]
        if len(valid) != len(records):
            logger.warning(f"Ignoring {len(records) - len(valid)} invalid template(s)")
        return valid

    async def load_templates(self) -> List[AnalysisTemplate]:
        templates = []
        for record in await self._load_records():
            try:
                templates.append(AnalysisTemplate.from_dict(record))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                logger.warning(f"Skipping unreadable template {record.get('id')!r}: {e}")
        return templates

    async def save_template(self, template: AnalysisTemplate) -> None:
        await self.store.prepend(self.key, template.to_dict(), self.cap)
        logger.info(f"Saved template '{template.title}'")

    async def get_template(self, template_id: str) -> Optional[AnalysisTemplate]:
        for template in await self.load_templates():
            if template.id == template_id:
                return template
        return None

    async def update_template(self, template_id: str, changes: Dict[str, Any]) -> Optional[AnalysisTemplate]:
        """Apply camelCase field changes to a stored template."""
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update template fields: {', '.join(sorted(unknown))}")

        def apply(record: Dict[str, Any]) -> Dict[str, Any]:
            record.update(changes)
            # Round-trip through the model so enum values are checked
            return AnalysisTemplate.from_dict(record).to_dict()

        updated = await self.store.update(
            self.key, lambda record: record.get('id') == template_id, apply
        )
        return AnalysisTemplate.from_dict(updated) if updated else None

    async def delete_template(self, template_id: str) -> bool:
        removed = await self.store.remove(self.key, lambda record: record.get('id') == template_id)
        return removed > 0

    async def mark_template_used(self, template_id: str) -> Optional[AnalysisTemplate]:
        used_at = self.clock()

        def touch(record: Dict[str, Any]) -> Dict[str, Any]:
            record['useCount'] = int(record.get('useCount', 0)) + 1
            record['lastUsedAt'] = used_at
            return record

        updated = await self.store.update(
            self.key, lambda record: record.get('id') == template_id, touch
        )
        return AnalysisTemplate.from_dict(updated) if updated else None

    async def get_template_summaries(self) -> List[TemplateSummary]:
        return [template.to_summary() for template in await self.load_templates()]

    async def get_recent_templates(self, limit: int = 3) -> List[AnalysisTemplate]:
        """Most recently used templates; never-used templates are excluded."""
        used = [template for template in await self.load_templates() if template.last_used_at > 0]
        used.sort(key=lambda template: template.last_used_at, reverse=True)
        return used[:limit]
