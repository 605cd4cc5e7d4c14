#!/usr/bin/env python3
"""
Pattern detection and tag derivation.

Rules are threshold predicates over already computed side scores. Each
rule is evaluated on its own; a side can appear in several patterns.
"""

from dataclasses import dataclass
from typing import Callable, List, Sequence

from ..models import AnalysisInput, PatternDetected, PatternOccurrence, SideAnalysis

EMOTIONAL_ESCALATION = 'Emotional Escalation'
APPEAL_WITHOUT_EVIDENCE = 'Appeal Without Evidence'

ESCALATION_THRESHOLD = 6.0
EVIDENCE_THRESHOLD = 5.0


@dataclass(frozen=True)
class PatternRule:
    """Named pattern triggered by a per-side predicate."""
    name: str
    description: str
    predicate: Callable[[SideAnalysis], bool]

    def evaluate(self, side_analyses: Sequence[SideAnalysis]) -> List[PatternOccurrence]:
        return [PatternOccurrence(side_id=sa.side_id) for sa in side_analyses if self.predicate(sa)]


def build_default_rules(escalation_threshold: float = ESCALATION_THRESHOLD,
                        evidence_threshold: float = EVIDENCE_THRESHOLD) -> List[PatternRule]:
    return [
        PatternRule(
            EMOTIONAL_ESCALATION,
            'Strong emotional language that may overshadow logical points',
            lambda sa: sa.scores.emotional_escalation > escalation_threshold
        ),
        PatternRule(
            APPEAL_WITHOUT_EVIDENCE,
            'Claims made without supporting evidence or examples',
            lambda sa: sa.scores.evidence_quality < evidence_threshold
        ),
    ]


DEFAULT_PATTERN_RULES = build_default_rules()


def detect_patterns(side_analyses: Sequence[SideAnalysis],
                    rules: Sequence[PatternRule] = DEFAULT_PATTERN_RULES) -> List[PatternDetected]:
    """Evaluate every rule; a rule with no matching side produces nothing."""
    patterns = []
    for rule in rules:
        occurrences = rule.evaluate(side_analyses)
        if occurrences:
            patterns.append(PatternDetected(
                name=rule.name,
                description=rule.description,
                occurrences=occurrences
            ))
    return patterns


def derive_tags(analysis_input: AnalysisInput, patterns: Sequence[PatternDetected]) -> List[str]:
    tags = []
    if any(pattern.name == EMOTIONAL_ESCALATION for pattern in patterns):
        tags.append('emotional')
    if len(analysis_input.sides) > 2:
        tags.append('multi-party')
    if analysis_input.is_strict:
        tags.append('strict-mode')
    tags.append(analysis_input.commentator_style.value)
    return tags
