#!/usr/bin/env python3
"""
History export.

The export document carries the whole current collection, already at the
current schema version.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..timeutils import from_ms, now_ms

logger = logging.getLogger(__name__)

EXPORT_FILE_PREFIX = "verdict-plus-export-"


def iso_timestamp(timestamp_ms: int) -> str:
    """Epoch ms as an ISO-8601 UTC string with millisecond precision."""
    moment = from_ms(timestamp_ms)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{timestamp_ms % 1000:03d}Z"


def export_file_name(timestamp_ms: Optional[int] = None) -> str:
    return f"{EXPORT_FILE_PREFIX}{timestamp_ms if timestamp_ms is not None else now_ms()}.json"


def build_export_document(analyses: List[Dict[str, Any]], app_version: str,
                          now: Optional[int] = None) -> Dict[str, Any]:
    return {
        'exportedAt': iso_timestamp(now if now is not None else now_ms()),
        'appVersion': app_version,
        'totalAnalyses': len(analyses),
        'analyses': list(analyses),
    }


def dump_export_document(document: Dict[str, Any], indent: Optional[int] = 2) -> str:
    return json.dumps(document, indent=indent, ensure_ascii=False)
