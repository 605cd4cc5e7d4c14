#!/usr/bin/env python3
"""
Verdict core.

Computes, versions, persists and reconciles dispute analyses: the verdict
engine, the bounded on-device collection store, the schema migration engine,
import/export, the weekly quota and the draft autosave slot.
"""

__version__ = "1.0.0"
