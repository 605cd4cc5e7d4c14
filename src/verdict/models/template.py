#!/usr/bin/env python3
"""
Analysis template data models.

Templates are reusable input skeletons with popularity tracking.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass

from .analysis import CommentatorStyle, EvidenceMode


@dataclass
class TemplateSide:
    label: str
    placeholder: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'label': self.label}
        if self.placeholder is not None:
            data['placeholder'] = self.placeholder
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TemplateSide':
        return cls(label=data.get('label', ''), placeholder=data.get('placeholder'))


@dataclass
class AnalysisTemplate:
    """Quick-start skeleton for an analysis (e.g. "Couple Disagreement")."""
    id: str
    title: str
    sides: List[TemplateSide]
    commentator_style: CommentatorStyle = CommentatorStyle.NEUTRAL
    evidence_mode: EvidenceMode = EvidenceMode.LIGHT
    created_at: int = 0
    last_used_at: int = 0  # 0 = never used
    use_count: int = 0
    description: Optional[str] = None

    def __post_init__(self):
        self.title = self.title.strip()
        self.commentator_style = CommentatorStyle(self.commentator_style)
        self.evidence_mode = EvidenceMode(self.evidence_mode)

    def to_summary(self) -> 'TemplateSummary':
        return TemplateSummary(
            id=self.id,
            title=self.title,
            side_count=len(self.sides),
            commentator_style=self.commentator_style,
            last_used_at=self.last_used_at,
            use_count=self.use_count
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'title': self.title,
            'sides': [side.to_dict() for side in self.sides],
            'commentatorStyle': self.commentator_style.value,
            'evidenceMode': self.evidence_mode.value,
            'createdAt': self.created_at,
            'lastUsedAt': self.last_used_at,
            'useCount': self.use_count,
        }
        if self.description is not None:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisTemplate':
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            sides=[TemplateSide.from_dict(side) for side in data.get('sides', [])],
            commentator_style=data.get('commentatorStyle', CommentatorStyle.NEUTRAL.value),
            evidence_mode=data.get('evidenceMode', EvidenceMode.LIGHT.value),
            created_at=int(data.get('createdAt', 0)),
            last_used_at=int(data.get('lastUsedAt', 0)),
            use_count=int(data.get('useCount', 0)),
            description=data.get('description')
        )


@dataclass
class TemplateSummary:
    id: str
    title: str
    side_count: int
    commentator_style: CommentatorStyle
    last_used_at: int
    use_count: int = 0
