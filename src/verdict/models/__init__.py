#!/usr/bin/env python3
"""
Core data models for the verdict core.

Contains all data structures used throughout the application.
"""

from .analysis import (
    CURRENT_DATA_VERSION, MIN_SUPPORTED_VERSION, CommentatorStyle, EvidenceMode,
    Side, AnalysisInput, SideScores, SideAnalysis, PatternOccurrence, PatternDetected,
    WinAnalysis, PeaceAnalysis, AnalysisResult, AnalysisSummary
)
from .settings import AppSettings, DesignPreset, TierLimits
from .template import AnalysisTemplate, TemplateSide, TemplateSummary
from .draft import DraftData, WeeklyInsights, TagCount

__all__ = [
    'CURRENT_DATA_VERSION', 'MIN_SUPPORTED_VERSION', 'CommentatorStyle', 'EvidenceMode',
    'Side', 'AnalysisInput', 'SideScores', 'SideAnalysis', 'PatternOccurrence', 'PatternDetected',
    'WinAnalysis', 'PeaceAnalysis', 'AnalysisResult', 'AnalysisSummary',
    'AppSettings', 'DesignPreset', 'TierLimits',
    'AnalysisTemplate', 'TemplateSide', 'TemplateSummary',
    'DraftData', 'WeeklyInsights', 'TagCount'
]
