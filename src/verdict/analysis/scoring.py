#!/usr/bin/env python3
"""
Side scoring strategies.

The scoring function is the only non-deterministic part of a verdict. It
sits behind ScoringStrategy so a model-backed scorer can replace the
heuristic placeholder without touching winner determination, pattern
detection or tagging.
"""

import re
import random
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Side, SideAnalysis, SideScores, EvidenceMode

SENTENCE_SPLIT = re.compile(r'[.!?]+')
MIN_CLAIM_LENGTH = 10
MAX_CLAIMS = 3
DETAILED_CONTENT_LENGTH = 100

NO_CLAIMS = 'Position stated without specific claims'
STRICT_ASSUMPTIONS = [
    'Assumes reader understands full context',
    'No cited sources provided',
]


def extract_claims(content: str) -> List[str]:
    """First three sentences longer than ten characters."""
    sentences = [s.strip() for s in SENTENCE_SPLIT.split(content or '')]
    return [s for s in sentences if len(s) > MIN_CLAIM_LENGTH][:MAX_CLAIMS]


class ScoringStrategy(ABC):
    """Contract for per-side scoring."""

    @abstractmethod
    def score(self, side: Side, evidence_mode: EvidenceMode) -> SideScores:
        """
        Score one side.

        Args:
            side: Side to score
            evidence_mode: Light or strict evidence treatment

        Returns:
            Five independent scores in [0, 10], one decimal place
        """
        pass

    def flag_assumptions(self, side: Side) -> List[str]:
        """Unsupported assumptions flagged in strict mode."""
        return list(STRICT_ASSUMPTIONS)

    def get_name(self) -> str:
        return self.__class__.__name__

    def analyze_side(self, side: Side, evidence_mode: EvidenceMode) -> SideAnalysis:
        """Build the full per-side analysis around this strategy's scores."""
        content = side.content or ''
        claims = extract_claims(content)
        lead = claims[0].lower() if claims else 'their position'

        return SideAnalysis(
            side_id=side.id,
            label=side.label,
            summary=f"{side.label} argues {lead}.",
            claims=claims or [NO_CLAIMS],
            evidence_provided=[
                'Provides detailed context' if len(content) > DETAILED_CONTENT_LENGTH
                else 'Limited supporting details'
            ],
            emotional_statements=['Uses emphatic language'] if '!' in content else [],
            logical_statements=['Presents multiple points'] if len(claims) > 1 else [],
            scores=self.score(side, evidence_mode),
            flagged_assumptions=self.flag_assumptions(side) if evidence_mode == EvidenceMode.STRICT else None
        )


class HeuristicScoringStrategy(ScoringStrategy):
    """
    Placeholder scorer.

    Draws a base score per side and varies each dimension around it.
    Exclamation marks push emotional escalation into the 6-9 band.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _varied(self, base: float) -> float:
        return max(0.0, min(10.0, base + (self.rng.random() - 0.5) * 3))

    def score(self, side: Side, evidence_mode: EvidenceMode) -> SideScores:
        base = 5 + self.rng.random() * 4
        emphatic = '!' in (side.content or '')
        escalation = (6 + self.rng.random() * 3) if emphatic else (3 + self.rng.random() * 3)

        return SideScores(
            clarity=self._varied(base),
            evidence_quality=self._varied(base) - 1,
            logical_consistency=self._varied(base),
            emotional_escalation=escalation,
            fairness=self._varied(base)
        )

