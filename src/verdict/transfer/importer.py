#!/usr/bin/env python3
"""
Import/Export Reconciler.

Exports the history as a portable document and re-ingests one in either
replace or merge mode. Imported records are migrated before ids are
compared, so records written with the old id scheme deduplicate against
their normalized counterparts.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from dateutil import parser as date_parser

from ..exceptions import ImportValidationError
from ..migration import migrate_analyses_array
from ..storage import AnalysisRepository
from ..timeutils import now_ms
from ..validation import is_valid_analysis_result
from .exporter import build_export_document, dump_export_document
from .validator import ImportValidator

logger = logging.getLogger(__name__)


class ImportMode(str, Enum):
    REPLACE = "replace"
    MERGE = "merge"


@dataclass
class ImportResult:
    """Outcome of an import; a failed import changed nothing."""
    success: bool
    message: str
    imported: int = 0
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'message': self.message,
            'imported': self.imported,
            'skipped': self.skipped,
            'warnings': list(self.warnings),
        }


def _describe_source(document: Dict[str, Any]) -> str:
    try:
        exported_at = date_parser.isoparse(document['exportedAt']).strftime('%Y-%m-%d %H:%M')
    except (ValueError, OverflowError):
        exported_at = document['exportedAt']
    return f"export from app {document['appVersion']} at {exported_at}"


def _result_message(imported: int, skipped: int) -> str:
    noun = "analysis" if imported == 1 else "analyses"
    message = f"Imported {imported} {noun}"
    if skipped:
        message += f" ({skipped} skipped)"
    return message


class TransferService:
    """Export and import of the analysis history."""

    def __init__(self, analyses: AnalysisRepository, app_version: str = "1.0.0",
                 clock: Callable[[], int] = now_ms):
        self.analyses = analyses
        self.app_version = app_version
        self.clock = clock

    async def build_export(self) -> Dict[str, Any]:
        records = await self.analyses.load_records()
        return build_export_document(records, self.app_version, self.clock())

    async def export_analyses(self, indent: Optional[int] = 2) -> str:
        document = await self.build_export()
        logger.info(f"Exported {document['totalAnalyses']} analyses")
        return dump_export_document(document, indent)

    async def import_analyses(self, json_text: str, mode: ImportMode = ImportMode.MERGE) -> ImportResult:
        """
        Import an export document.

        Validation runs to completion before any write; on failure the
        result carries the reason and the store is untouched.
        """
        mode = ImportMode(mode)
        try:
            document = ImportValidator.validate(json_text)
        except ImportValidationError as e:
            logger.warning(f"Import rejected: {e.message}")
            return ImportResult(success=False, message=e.message)

        incoming = document['analyses']
        logger.info(f"Importing {len(incoming)} analyses ({mode.value}) from {_describe_source(document)}")

        migration = migrate_analyses_array(incoming)
        warnings = list(migration.warnings)
        records = []
        for record in migration.data:
            if is_valid_analysis_result(record):
                records.append(record)
            else:
                warnings.append(f"Skipped invalid analysis: {record.get('id')!r} is missing required fields")
        rejected = len(incoming) - len(records)

        if not records:
            return ImportResult(
                success=False,
                message="Invalid import file: none of the analyses could be read",
                skipped=rejected,
                warnings=warnings
            )

        if mode == ImportMode.REPLACE:
            imported, skipped = await self._replace(records)
        else:
            imported, skipped = await self._merge(records)
        skipped += rejected

        logger.info(f"Import finished: {imported} imported, {skipped} skipped")
        return ImportResult(
            success=True,
            message=_result_message(imported, skipped),
            imported=imported,
            skipped=skipped,
            warnings=warnings
        )

    async def _replace(self, records: List[Dict[str, Any]]) -> Tuple[int, int]:
        cap = self.analyses.cap
        await self.analyses.replace_all(records[:cap])
        return min(len(records), cap), max(0, len(records) - cap)

    async def _merge(self, records: List[Dict[str, Any]]) -> Tuple[int, int]:
        existing = await self.analyses.load_records()
        known_ids = {record['id'] for record in existing}
        merged = list(existing)
        imported = skipped = 0

        for record in records:
            if record['id'] in known_ids:
                skipped += 1
                continue
            merged.append(record)
            known_ids.add(record['id'])
            imported += 1

        merged.sort(key=lambda record: record['createdAt'], reverse=True)
        evicted = len(merged) - self.analyses.cap
        if evicted > 0:
            logger.info(f"Merge exceeds capacity, evicting {evicted} oldest analyses")
        await self.analyses.replace_all(merged)
        return imported, skipped
