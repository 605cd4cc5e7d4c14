#!/usr/bin/env python3
"""
Storage package.

Key/value backends, the bounded collection store and the repositories
built on top of it.
"""

from .backends import KeyValueBackend, MemoryBackend, FileBackend
from .collection_store import BoundedCollectionStore, StorageKeys
from .analysis_store import AnalysisRepository, generate_analysis_id, DEFAULT_ANALYSES_CAP
from .template_store import TemplateRepository, generate_template_id, DEFAULT_TEMPLATES_CAP
from .settings_store import SettingsStore, clear_all_data

__all__ = [
    'KeyValueBackend', 'MemoryBackend', 'FileBackend',
    'BoundedCollectionStore', 'StorageKeys',
    'AnalysisRepository', 'generate_analysis_id', 'DEFAULT_ANALYSES_CAP',
    'TemplateRepository', 'generate_template_id', 'DEFAULT_TEMPLATES_CAP',
    'SettingsStore', 'clear_all_data'
]
