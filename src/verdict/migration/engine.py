#!/usr/bin/env python3
"""
Migration Engine

Upgrades persisted records of any supported past schema version to the
current one. Steps are pure, additive and idempotent, and run in order
from the detected version up to CURRENT_DATA_VERSION.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import RecordValidationError, UnsupportedVersionError
from ..models.analysis import (
    ANALYSIS_ID_PREFIX, CURRENT_DATA_VERSION, MIN_SUPPORTED_VERSION, SIDE_ID_PREFIX
)
from ..models.settings import DEFAULT_DESIGN_PRESET
from ..timeutils import now_ms
from .fingerprints import ANALYSIS, SETTINGS, detect_data_version

logger = logging.getLogger(__name__)

Transform = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass
class MigrationResult:
    """Outcome of migrating one record or a batch of records."""
    success: bool
    from_version: int
    to_version: int = CURRENT_DATA_VERSION
    data: Any = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_version_failure(self) -> bool:
        return (
            self.from_version < MIN_SUPPORTED_VERSION
            or self.from_version > CURRENT_DATA_VERSION
        )

    def raise_for_error(self) -> Any:
        """Return the migrated data, or raise the matching exception on failure."""
        if self.success:
            return self.data
        if self.is_version_failure:
            raise UnsupportedVersionError(self.from_version, self.error or 'Unsupported version')
        raise RecordValidationError(self.error or 'Migration failed')


@dataclass(frozen=True)
class MigrationStep:
    """Transform from ``from_version`` to ``from_version + 1``."""
    kind: str
    from_version: int
    description: str
    transform: Transform


def _prefixed(value: Any, prefix: str) -> str:
    text = str(value)
    return text if text.startswith(prefix) else f"{prefix}{text}"


def _analysis_v1_to_v2(data: Dict[str, Any]) -> Dict[str, Any]:
    migrated = copy.deepcopy(data)
    migrated.setdefault('takeaway', None)
    return migrated


def _analysis_v2_to_v3(data: Dict[str, Any]) -> Dict[str, Any]:
    migrated = copy.deepcopy(data)
    migrated['id'] = _prefixed(migrated['id'], ANALYSIS_ID_PREFIX)

    for side in migrated['input']['sides']:
        side['id'] = _prefixed(side['id'], SIDE_ID_PREFIX)

    for side_analysis in migrated['sideAnalyses']:
        side_analysis['sideId'] = _prefixed(side_analysis['sideId'], SIDE_ID_PREFIX)

    # Keep references to sides consistent with the renamed ids
    win = migrated.get('winAnalysis')
    if isinstance(win, dict) and win.get('winnerId') is not None:
        win['winnerId'] = _prefixed(win['winnerId'], SIDE_ID_PREFIX)

    for pattern in migrated.get('patternsDetected') or []:
        for occurrence in pattern.get('occurrences') or []:
            occurrence['sideId'] = _prefixed(occurrence['sideId'], SIDE_ID_PREFIX)

    migrated['version'] = CURRENT_DATA_VERSION
    return migrated


def _settings_v1_to_v2(data: Dict[str, Any]) -> Dict[str, Any]:
    migrated = copy.deepcopy(data)
    migrated.setdefault('designPreset', DEFAULT_DESIGN_PRESET.value)
    return migrated


def _settings_v2_to_v3(data: Dict[str, Any]) -> Dict[str, Any]:
    migrated = copy.deepcopy(data)
    for key in ('hapticsEnabled', 'reduceMotion', 'isPro'):
        if key in migrated:
            migrated[key] = bool(migrated[key])
    for key in ('analysesThisWeek', 'weekStartTimestamp'):
        if key in migrated:
            migrated[key] = int(migrated[key] or 0)
    return migrated


MIGRATION_CHAINS: Dict[str, List[MigrationStep]] = {
    ANALYSIS: [
        MigrationStep(ANALYSIS, 1, 'Migrated from V1 to V2: added takeaway field', _analysis_v1_to_v2),
        MigrationStep(ANALYSIS, 2, 'Migrated from V2 to V3: normalized IDs', _analysis_v2_to_v3),
    ],
    SETTINGS: [
        MigrationStep(SETTINGS, 1, 'Migrated settings from V1 to V2: added designPreset', _settings_v1_to_v2),
        MigrationStep(SETTINGS, 2, 'Migrated settings from V2 to V3: ensured strict types', _settings_v2_to_v3),
    ],
}

_FAILURE_PREFIX = {
    ANALYSIS: 'Migration failed',
    SETTINGS: 'Settings migration failed',
}

_UNDETECTED = {
    ANALYSIS: 'Unable to detect data version',
    SETTINGS: 'Unable to detect settings version',
}


def _run_chain(kind: str, data: Any, from_version: Optional[int]) -> MigrationResult:
    version = from_version if from_version is not None else detect_data_version(data)

    if version == 0:
        return MigrationResult(success=False, from_version=0, error=_UNDETECTED[kind])

    if version < MIN_SUPPORTED_VERSION:
        return MigrationResult(
            success=False, from_version=version,
            error=f"Data version {version} is below minimum supported version {MIN_SUPPORTED_VERSION}"
        )

    if version > CURRENT_DATA_VERSION:
        return MigrationResult(
            success=False, from_version=version,
            error=f"Data version {version} is newer than supported version {CURRENT_DATA_VERSION}"
        )

    if version == CURRENT_DATA_VERSION:
        return MigrationResult(success=True, from_version=version, data=data)

    if not isinstance(data, dict):
        return MigrationResult(
            success=False, from_version=version,
            error=f"{_FAILURE_PREFIX[kind]}: expected an object, got {type(data).__name__}"
        )

    current = data
    warnings = []
    try:
        for step in MIGRATION_CHAINS[kind]:
            if step.from_version < version:
                continue
            current = step.transform(current)
            warnings.append(step.description)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        detail = f"missing field {e}" if isinstance(e, KeyError) else str(e)
        return MigrationResult(
            success=False, from_version=version,
            error=f"{_FAILURE_PREFIX[kind]}: {detail}"
        )

    return MigrationResult(success=True, from_version=version, data=current, warnings=warnings)


def migrate_analysis(data: Any, from_version: Optional[int] = None) -> MigrationResult:
    """Migrate one analysis record to the current version."""
    return _run_chain(ANALYSIS, data, from_version)


def migrate_settings(data: Any, from_version: Optional[int] = None) -> MigrationResult:
    """Migrate a settings record to the current version."""
    return _run_chain(SETTINGS, data, from_version)


def migrate_analyses_array(analyses: List[Any]) -> MigrationResult:
    """
    Migrate a batch of analysis records.

    Records that fail are skipped with a warning; the batch itself always
    succeeds. ``from_version`` is the lowest version among migrated records.
    """
    results = []
    warnings = []
    lowest_version = CURRENT_DATA_VERSION

    for analysis in analyses:
        result = migrate_analysis(analysis)
        if result.success and result.data is not None:
            results.append(result.data)
            lowest_version = min(lowest_version, result.from_version)
            warnings.extend(result.warnings)
        else:
            warnings.append(f"Skipped invalid analysis: {result.error}")

    skipped = len(analyses) - len(results)
    if skipped:
        logger.warning(f"Batch migration skipped {skipped} of {len(analyses)} analyses")

    return MigrationResult(success=True, from_version=lowest_version, data=results, warnings=warnings)


def wrap_with_version(data: Any, migrated_at: Optional[int] = None) -> Dict[str, Any]:
    """Wrap data in a current-version envelope."""
    return {
        'version': CURRENT_DATA_VERSION,
        'data': data,
        'migratedAt': migrated_at if migrated_at is not None else now_ms(),
    }


def is_versioned_envelope(value: Any) -> bool:
    return isinstance(value, dict) and 'version' in value and 'data' in value


def unwrap_versioned(value: Any, migrate_fn: Callable[..., MigrationResult]) -> MigrationResult:
    """Unwrap an envelope (migrating from its declared version) or migrate a bare record."""
    if is_versioned_envelope(value):
        declared = value['version']
        if isinstance(declared, int) and not isinstance(declared, bool):
            return migrate_fn(value['data'], declared)
        return migrate_fn(value['data'])
    return migrate_fn(value)


def needs_migration(data: Any) -> bool:
    version = detect_data_version(data)
    return 0 < version < CURRENT_DATA_VERSION


def get_migration_path(from_version: int) -> List[str]:
    """Human-readable list of steps between from_version and the current version."""
    path = []
    if from_version < 2:
        path.append('V1 → V2: Add takeaway field to analyses, add designPreset to settings')
    if from_version < 3:
        path.append('V2 → V3: Normalize IDs, ensure strict typing')
    return path
