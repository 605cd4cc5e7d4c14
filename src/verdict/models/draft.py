#!/usr/bin/env python3
"""
Draft and insights data models.

Contains the single-slot autosave draft and the derived weekly insights.
"""

from typing import List, Dict, Any
from dataclasses import dataclass, field

from .analysis import Side, CommentatorStyle, EvidenceMode


@dataclass
class DraftData:
    """In-progress, not yet submitted input."""
    sides: List[Side]
    commentator_style: CommentatorStyle
    evidence_mode: EvidenceMode
    context: str
    saved_at: int  # epoch ms

    def __post_init__(self):
        self.commentator_style = CommentatorStyle(self.commentator_style)
        self.evidence_mode = EvidenceMode(self.evidence_mode)
        self.context = self.context or ""

    def has_content(self) -> bool:
        return any(side.content.strip() for side in self.sides)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sides': [side.to_dict() for side in self.sides],
            'commentatorStyle': self.commentator_style.value,
            'evidenceMode': self.evidence_mode.value,
            'context': self.context,
            'savedAt': self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DraftData':
        return cls(
            sides=[Side.from_dict(side) for side in data['sides']],
            commentator_style=data.get('commentatorStyle', CommentatorStyle.NEUTRAL.value),
            evidence_mode=data.get('evidenceMode', EvidenceMode.LIGHT.value),
            context=data.get('context', ''),
            saved_at=int(data['savedAt'])
        )


@dataclass
class TagCount:
    tag: str
    count: int


@dataclass
class WeeklyInsights:
    """Usage statistics for the current quota week."""
    week_start_timestamp: int
    total_analyses: int
    top_tags: List[TagCount] = field(default_factory=list)
    most_used_style: CommentatorStyle = CommentatorStyle.NEUTRAL
    style_usage: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weekStartTimestamp': self.week_start_timestamp,
            'totalAnalyses': self.total_analyses,
            'topTags': [{'tag': t.tag, 'count': t.count} for t in self.top_tags],
            'mostUsedStyle': CommentatorStyle(self.most_used_style).value,
            'styleUsage': dict(self.style_usage),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WeeklyInsights':
        return cls(
            week_start_timestamp=int(data['weekStartTimestamp']),
            total_analyses=int(data['totalAnalyses']),
            top_tags=[TagCount(tag=t['tag'], count=int(t['count'])) for t in data.get('topTags', [])],
            most_used_style=CommentatorStyle(data.get('mostUsedStyle', CommentatorStyle.NEUTRAL.value)),
            style_usage={str(k): int(v) for k, v in data.get('styleUsage', {}).items()}
        )
