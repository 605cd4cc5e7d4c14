#!/usr/bin/env python3
"""
Import and export of the analysis history.
"""

from .validator import ImportValidator
from .exporter import build_export_document, dump_export_document, export_file_name, iso_timestamp
from .importer import ImportMode, ImportResult, TransferService

__all__ = [
    'ImportValidator',
    'build_export_document', 'dump_export_document', 'export_file_name', 'iso_timestamp',
    'ImportMode', 'ImportResult', 'TransferService'
]
