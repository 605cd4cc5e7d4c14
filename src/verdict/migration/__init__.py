#!/usr/bin/env python3
"""
Versioned data migration.

Detects the schema version of persisted records and upgrades them to the
current version.
"""

from .fingerprints import Fingerprint, FINGERPRINTS, detect_data_version, match_fingerprint
from .engine import (
    MigrationResult, MigrationStep, MIGRATION_CHAINS,
    migrate_analysis, migrate_analyses_array, migrate_settings,
    wrap_with_version, unwrap_versioned, is_versioned_envelope,
    needs_migration, get_migration_path
)

__all__ = [
    'Fingerprint', 'FINGERPRINTS', 'detect_data_version', 'match_fingerprint',
    'MigrationResult', 'MigrationStep', 'MIGRATION_CHAINS',
    'migrate_analysis', 'migrate_analyses_array', 'migrate_settings',
    'wrap_with_version', 'unwrap_versioned', 'is_versioned_envelope',
    'needs_migration', 'get_migration_path'
]
