#!/usr/bin/env python3
"""
Application settings data models.

Contains user preferences, feature flags and the weekly quota state.
"""

from enum import Enum
from typing import Dict, Any
from dataclasses import dataclass

from .analysis import CommentatorStyle, EvidenceMode


class DesignPreset(str, Enum):
    """UI design style."""
    SOFT_PREMIUM = "soft-premium"
    SHARP_MINIMAL = "sharp-minimal"
    NEO_GLASS = "neo-glass"
    PLAYFUL_BOLD = "playful-bold"


DEFAULT_DESIGN_PRESET = DesignPreset.SOFT_PREMIUM


@dataclass(frozen=True)
class TierLimits:
    analyses_per_week: float
    """Per-tier caps: weekly analyses (math.inf when unlimited) and sides per analysis."""
    analyses_per_week: float
    max_sides: int


@dataclass
class AppSettings:
    """Persisted settings singleton."""
    haptics_enabled: bool = True
    reduce_motion: bool = False
    default_commentator_style: CommentatorStyle = CommentatorStyle.NEUTRAL
    default_evidence_mode: EvidenceMode = EvidenceMode.LIGHT
    is_pro: bool = False
    analyses_this_week: int = 0
    week_start_timestamp: int = 0  # epoch ms
    design_preset: DesignPreset = DEFAULT_DESIGN_PRESET

    def __post_init__(self):
        self.default_commentator_style = CommentatorStyle(self.default_commentator_style)
        self.default_evidence_mode = EvidenceMode(self.default_evidence_mode)
        self.design_preset = DesignPreset(self.design_preset)
        self.analyses_this_week = max(0, int(self.analyses_this_week))
        self.week_start_timestamp = int(self.week_start_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hapticsEnabled': self.haptics_enabled,
            'reduceMotion': self.reduce_motion,
            'defaultCommentatorStyle': self.default_commentator_style.value,
            'defaultEvidenceMode': self.default_evidence_mode.value,
            'isPro': self.is_pro,
            'analysesThisWeek': self.analyses_this_week,
            'weekStartTimestamp': self.week_start_timestamp,
            'designPreset': self.design_preset.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSettings':
        defaults = cls()
        return cls(
            haptics_enabled=bool(data.get('hapticsEnabled', defaults.haptics_enabled)),
            reduce_motion=bool(data.get('reduceMotion', defaults.reduce_motion)),
            default_commentator_style=data.get('defaultCommentatorStyle', defaults.default_commentator_style),
            default_evidence_mode=data.get('defaultEvidenceMode', defaults.default_evidence_mode),
            is_pro=bool(data.get('isPro', defaults.is_pro)),
            analyses_this_week=data.get('analysesThisWeek', defaults.analyses_this_week),
            week_start_timestamp=data.get('weekStartTimestamp', defaults.week_start_timestamp),
            design_preset=data.get('designPreset', defaults.design_preset)
        )
