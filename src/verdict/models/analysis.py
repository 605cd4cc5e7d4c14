#!/usr/bin/env python3
"""
Analysis data models.

Contains the input, per-side and overall result structures of a verdict.
Wire format keys are camelCase to stay compatible with stored data and
export files; attributes are snake_case.
"""

import math
from enum import Enum
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

# Increment when making breaking changes to stored data shapes.
# v1: initial release (no version field)
# v2: added takeaway to analyses, designPreset to settings
# v3: version tracking, normalized ids, strict typing
CURRENT_DATA_VERSION = 3
MIN_SUPPORTED_VERSION = 1

MIN_SIDES = 2
MAX_SIDES = 5

ANALYSIS_ID_PREFIX = "analysis_"
SIDE_ID_PREFIX = "side_"


class CommentatorStyle(str, Enum):
    """Tone applied to verdict phrasing."""
    NEUTRAL = "neutral"
    DIRECT = "direct"
    HARSH = "harsh"
    SAVAGE = "savage"
    COACH = "coach"
    LAWYER = "lawyer"
    MEDIATOR = "mediator"


class EvidenceMode(str, Enum):
    """How strictly unsupported claims are treated."""
    LIGHT = "light"
    STRICT = "strict"


@dataclass
class Side:
    """One party's position in a dispute."""
    id: str
    label: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'label': self.label, 'content': self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Side':
        return cls(
            id=str(data['id']),
            label=data.get('label', ''),
            content=data.get('content', '')
        )


@dataclass
class AnalysisInput:
    """Sides and options submitted for analysis."""
    sides: List[Side]
    commentator_style: CommentatorStyle = CommentatorStyle.NEUTRAL
    evidence_mode: EvidenceMode = EvidenceMode.LIGHT
    context: Optional[str] = None

    def __post_init__(self):
        self.commentator_style = CommentatorStyle(self.commentator_style)
        self.evidence_mode = EvidenceMode(self.evidence_mode)
        if self.context is not None:
            self.context = self.context.strip() or None

    def validate(self) -> List[str]:
        """Return a list of problems; empty when the input can be analyzed."""
        errors = []
        if not MIN_SIDES <= len(self.sides) <= MAX_SIDES:
            errors.append(f"Expected {MIN_SIDES}-{MAX_SIDES} sides, got {len(self.sides)}")

        seen_ids = set()
        for index, side in enumerate(self.sides):
            if not side.id:
                errors.append(f"Side {index + 1} has no id")
            elif side.id in seen_ids:
                errors.append(f"Duplicate side id '{side.id}'")
            seen_ids.add(side.id)

        return errors

    @property
    def is_strict(self) -> bool:
        return self.evidence_mode == EvidenceMode.STRICT

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'sides': [side.to_dict() for side in self.sides],
            'commentatorStyle': self.commentator_style.value,
            'evidenceMode': self.evidence_mode.value,
        }
        if self.context is not None:
            data['context'] = self.context
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisInput':
        return cls(
            sides=[Side.from_dict(side) for side in data.get('sides', [])],
            commentator_style=data.get('commentatorStyle', CommentatorStyle.NEUTRAL.value),
            evidence_mode=data.get('evidenceMode', EvidenceMode.LIGHT.value),
            context=data.get('context')
        )


def _clamp_score(value: float) -> float:
    """Clamp to [0, 10] and round to one decimal place."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return round(max(0.0, min(10.0, value)), 1)


@dataclass
class SideScores:
    """Five independent dimensions, each in [0, 10]."""
    clarity: float
    evidence_quality: float
    logical_consistency: float
    emotional_escalation: float  # lower is calmer
    fairness: float

    def __post_init__(self):
        self.clarity = _clamp_score(self.clarity)
        self.evidence_quality = _clamp_score(self.evidence_quality)
        self.logical_consistency = _clamp_score(self.logical_consistency)
        self.emotional_escalation = _clamp_score(self.emotional_escalation)
        self.fairness = _clamp_score(self.fairness)

    def composite(self, emotional_penalty: float = 0.5) -> float:
        """Winner-determination scalar: four positives minus weighted escalation."""
        return (
            self.clarity
            + self.evidence_quality
            + self.logical_consistency
            + self.fairness
            - emotional_penalty * self.emotional_escalation
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            'clarity': self.clarity,
            'evidenceQuality': self.evidence_quality,
            'logicalConsistency': self.logical_consistency,
            'emotionalEscalation': self.emotional_escalation,
            'fairness': self.fairness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SideScores':
        return cls(
            clarity=data.get('clarity', 0.0),
            evidence_quality=data.get('evidenceQuality', 0.0),
            logical_consistency=data.get('logicalConsistency', 0.0),
            emotional_escalation=data.get('emotionalEscalation', 0.0),
            fairness=data.get('fairness', 0.0)
        )


@dataclass
class SideAnalysis:
    """Per-side output of the verdict engine."""
    side_id: str
    label: str
    summary: str
    claims: List[str]
    evidence_provided: List[str]
    emotional_statements: List[str]
    logical_statements: List[str]
    scores: SideScores
    flagged_assumptions: Optional[List[str]] = None  # strict mode only

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'sideId': self.side_id,
            'label': self.label,
            'summary': self.summary,
            'claims': list(self.claims),
            'evidenceProvided': list(self.evidence_provided),
            'emotionalStatements': list(self.emotional_statements),
            'logicalStatements': list(self.logical_statements),
            'scores': self.scores.to_dict(),
        }
        if self.flagged_assumptions is not None:
            data['flaggedAssumptions'] = list(self.flagged_assumptions)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SideAnalysis':
        return cls(
            side_id=str(data['sideId']),
            label=data.get('label', ''),
            summary=data.get('summary', ''),
            claims=list(data.get('claims', [])),
            evidence_provided=list(data.get('evidenceProvided', [])),
            emotional_statements=list(data.get('emotionalStatements', [])),
            logical_statements=list(data.get('logicalStatements', [])),
            scores=SideScores.from_dict(data.get('scores', {})),
            flagged_assumptions=data.get('flaggedAssumptions')
        )


@dataclass
class PatternOccurrence:
    side_id: str
    quote: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'sideId': self.side_id}
        if self.quote is not None:
            data['quote'] = self.quote
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PatternOccurrence':
        return cls(side_id=str(data['sideId']), quote=data.get('quote'))


@dataclass
class PatternDetected:
    """A rhetorical or structural observation referencing one or more sides."""
    name: str
    description: str
    occurrences: List[PatternOccurrence] = field(default_factory=list)

    @property
    def side_ids(self) -> List[str]:
        return [occurrence.side_id for occurrence in self.occurrences]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'occurrences': [occurrence.to_dict() for occurrence in self.occurrences],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PatternDetected':
        return cls(
            name=data.get('name', ''),
            description=data.get('description', ''),
            occurrences=[PatternOccurrence.from_dict(o) for o in data.get('occurrences', [])]
        )


@dataclass
class WinAnalysis:
    """Who is more justified; winner fields are None when there is no clear winner."""
    winner_id: Optional[str]
    winner_label: Optional[str]
    confidence: int
    reasoning: str

    @property
    def is_clear(self) -> bool:
        return self.winner_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'winnerId': self.winner_id,
            'winnerLabel': self.winner_label,
            'confidence': self.confidence,
            'reasoning': self.reasoning,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WinAnalysis':
        return cls(
            winner_id=data.get('winnerId'),
            winner_label=data.get('winnerLabel'),
            confidence=int(data.get('confidence', 0)),
            reasoning=data.get('reasoning', '')
        )


@dataclass
class PeaceAnalysis:
    """Resolution path, produced independently of the win/lose computation."""
    common_ground: List[str]
    suggested_compromise: str
    steps_forward: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'commonGround': list(self.common_ground),
            'suggestedCompromise': self.suggested_compromise,
            'stepsForward': list(self.steps_forward),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PeaceAnalysis':
        return cls(
            common_ground=list(data.get('commonGround', [])),
            suggested_compromise=data.get('suggestedCompromise', ''),
            steps_forward=list(data.get('stepsForward', []))
        )


@dataclass
class AnalysisResult:
    """
    The persisted unit.

    Invariant: one side analysis per input side, in the same order and with
    matching ids.
    """
    id: str
    created_at: int  # epoch ms
    input: AnalysisInput
    side_analyses: List[SideAnalysis]
    verdict_headline: str
    verdict_explanation: str
    win_analysis: Optional[WinAnalysis] = None
    peace_analysis: Optional[PeaceAnalysis] = None
    outcome_changers: List[str] = field(default_factory=list)
    patterns_detected: List[PatternDetected] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    takeaway: Optional[str] = None

    def __post_init__(self):
        self.verdict_headline = self.verdict_headline.strip()
        if self.takeaway is not None:
            self.takeaway = self.takeaway.strip() or None

    def check_integrity(self) -> List[str]:
        """Return problems with the side analysis / input side correspondence."""
        errors = []
        if len(self.side_analyses) != len(self.input.sides):
            errors.append(
                f"{len(self.side_analyses)} side analyses for {len(self.input.sides)} sides"
            )
        for side, side_analysis in zip(self.input.sides, self.side_analyses):
            if side.id != side_analysis.side_id:
                errors.append(f"Side analysis '{side_analysis.side_id}' does not match side '{side.id}'")
        return errors

    def to_summary(self) -> 'AnalysisSummary':
        return AnalysisSummary(
            id=self.id,
            created_at=self.created_at,
            verdict_headline=self.verdict_headline,
            participant_labels=[side.label for side in self.input.sides],
            commentator_style=self.input.commentator_style,
            tags=list(self.tags)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored/exported JSON shape (always current version)."""
        data = {
            'version': CURRENT_DATA_VERSION,
            'id': self.id,
            'createdAt': self.created_at,
            'input': self.input.to_dict(),
            'sideAnalyses': [sa.to_dict() for sa in self.side_analyses],
            'verdictHeadline': self.verdict_headline,
            'verdictExplanation': self.verdict_explanation,
            'outcomeChangers': list(self.outcome_changers),
            'patternsDetected': [p.to_dict() for p in self.patterns_detected],
            'tags': list(self.tags),
            'takeaway': self.takeaway,
        }
        if self.win_analysis is not None:
            data['winAnalysis'] = self.win_analysis.to_dict()
        if self.peace_analysis is not None:
            data['peaceAnalysis'] = self.peace_analysis.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisResult':
        """Create from a current-version record. Raises KeyError/ValueError on bad shape."""
        win = data.get('winAnalysis')
        peace = data.get('peaceAnalysis')
        return cls(
            id=str(data['id']),
            created_at=int(data['createdAt']),
            input=AnalysisInput.from_dict(data['input']),
            side_analyses=[SideAnalysis.from_dict(sa) for sa in data.get('sideAnalyses', [])],
            verdict_headline=data.get('verdictHeadline', ''),
            verdict_explanation=data.get('verdictExplanation', ''),
            win_analysis=WinAnalysis.from_dict(win) if win else None,
            peace_analysis=PeaceAnalysis.from_dict(peace) if peace else None,
            outcome_changers=list(data.get('outcomeChangers', [])),
            patterns_detected=[PatternDetected.from_dict(p) for p in data.get('patternsDetected', [])],
            tags=list(data.get('tags', [])),
            takeaway=data.get('takeaway')
        )

    def __repr__(self):
        return f"AnalysisResult(id='{self.id}', headline='{self.verdict_headline[:50]}', sides={len(self.side_analyses)})"


@dataclass
class AnalysisSummary:
    """Subset of an analysis for history lists."""
    id: str
    created_at: int
    verdict_headline: str
    participant_labels: List[str]
    commentator_style: CommentatorStyle
    tags: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'createdAt': self.created_at,
            'verdictHeadline': self.verdict_headline,
            'participantLabels': list(self.participant_labels),
            'commentatorStyle': CommentatorStyle(self.commentator_style).value,
            'tags': list(self.tags),
        }
