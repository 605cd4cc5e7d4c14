#!/usr/bin/env python3
"""
Verdict Computation Engine.

Turns an AnalysisInput into one complete AnalysisResult. Everything except
the scoring strategy is deterministic: winner determination, headline
phrasing, pattern detection and tagging depend only on the scores.
"""

import asyncio
import logging
import math
import random
from typing import Callable, List, Optional, Sequence

from ..config import VerdictConfig
from ..exceptions import ComputationError, InvalidInputError, VerdictError
from ..models import (
    AnalysisInput, AnalysisResult, CommentatorStyle, PeaceAnalysis, SideAnalysis, WinAnalysis
)
from ..storage.analysis_store import generate_analysis_id
from ..timeutils import now_ms
from .patterns import PatternRule, build_default_rules, derive_tags, detect_patterns
from .scoring import HeuristicScoringStrategy, ScoringStrategy

logger = logging.getLogger(__name__)

TONE_PREFIXES = {
    CommentatorStyle.NEUTRAL: '',
    CommentatorStyle.DIRECT: 'Bottom line: ',
    CommentatorStyle.HARSH: "Let's be real here: ",
    CommentatorStyle.SAVAGE: 'Oh, this is interesting: ',
    CommentatorStyle.COACH: "Here's what I see: ",
    CommentatorStyle.LAWYER: 'Upon examination: ',
    CommentatorStyle.MEDIATOR: 'Looking at both perspectives: ',
}

MARGIN_PRECISION = 6

UNCLEAR_VERDICT = 'This is a close call with valid points on both sides.'
UNCLEAR_REASONING = 'Both sides present roughly equivalent arguments with different strengths.'

PEACE_COMMON_GROUND = [
    'Both parties care about the outcome',
    'There is willingness to discuss',
]
PEACE_COMPROMISE = 'Consider focusing on shared goals rather than individual positions.'
PEACE_STEPS = [
    "Acknowledge each other's valid points",
    'Focus on facts over emotions',
    'Seek to understand before being understood',
]

OUTCOME_CHANGERS = [
    'Providing specific evidence would strengthen any position',
    'Reducing emotional language would improve persuasiveness',
    "Addressing the other side's main concerns directly",
]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def apply_commentator_tone(style: CommentatorStyle, text: str) -> str:
    """Prefix text with the phrase of the given commentator style."""
    return TONE_PREFIXES[CommentatorStyle(style)] + text


def verdict_base(win: WinAnalysis) -> str:
    if win.is_clear:
        return f"{win.winner_label} presents a stronger case overall."
    return UNCLEAR_VERDICT


def determine_winner(side_analyses: Sequence[SideAnalysis], config: Optional[VerdictConfig] = None,
                     rng: Optional[random.Random] = None) -> WinAnalysis:
    """
    Pick the winner by composite score.

    A win is clear only when the top composite beats the runner-up by more
    than the configured margin; otherwise there is no winner and the
    confidence falls in the tie band.
    """
    config = config or VerdictConfig()
    rng = rng or random.Random()

    ranked = sorted(
        side_analyses,
        key=lambda sa: sa.scores.composite(config.emotional_penalty),
        reverse=True
    )
    composites = [sa.scores.composite(config.emotional_penalty) for sa in ranked]
    margin = composites[0] - composites[1] if len(composites) > 1 else 0.0
    # drop float noise from summing one-decimal scores
    margin = round(margin, MARGIN_PRECISION)

    if margin > config.clear_win_margin:
        top = ranked[0]
        return WinAnalysis(
            winner_id=top.side_id,
            winner_label=top.label,
            confidence=round_half_up(config.base_confidence + margin * config.confidence_per_point),
            reasoning=f"{top.label} scored higher in clarity and evidence presentation."
        )

    band = config.tie_confidence_high - config.tie_confidence_low
    return WinAnalysis(
        winner_id=None,
        winner_label=None,
        confidence=round_half_up(config.tie_confidence_low + rng.random() * band),
        reasoning=UNCLEAR_REASONING
    )


def build_peace_analysis() -> PeaceAnalysis:
    return PeaceAnalysis(
        common_ground=list(PEACE_COMMON_GROUND),
        suggested_compromise=PEACE_COMPROMISE,
        steps_forward=list(PEACE_STEPS)
    )


class VerdictEngine:
    """Computes complete verdicts; never returns a partial result."""

    def __init__(self, config: Optional[VerdictConfig] = None, scoring: Optional[ScoringStrategy] = None,
                 rng: Optional[random.Random] = None, clock: Callable[[], int] = now_ms,
                 simulated_delay_ms: int = 0, pattern_rules: Optional[List[PatternRule]] = None):
        self.config = config or VerdictConfig()
        self.rng = rng or random.Random()
        self.scoring = scoring or HeuristicScoringStrategy(self.rng)
        self.clock = clock
        self.simulated_delay_ms = simulated_delay_ms
        self.pattern_rules = pattern_rules if pattern_rules is not None else build_default_rules(
            self.config.escalation_threshold, self.config.evidence_threshold
        )

    async def analyze(self, analysis_input: AnalysisInput) -> AnalysisResult:
        """
        Analyze the input and build an AnalysisResult.

        Raises:
            InvalidInputError: If the input fails validation
            ComputationError: If any stage of the computation fails
        """
        errors = analysis_input.validate()
        if errors:
            raise InvalidInputError(errors)

        if self.simulated_delay_ms > 0:
            await asyncio.sleep(self.simulated_delay_ms / 1000)

        stage = 'scoring'
        try:
            side_analyses = [
                self.scoring.analyze_side(side, analysis_input.evidence_mode)
                for side in analysis_input.sides
            ]

            stage = 'winner determination'
            win = determine_winner(side_analyses, self.config, self.rng)
            base = verdict_base(win)

            stage = 'pattern detection'
            patterns = detect_patterns(side_analyses, self.pattern_rules)
            tags = derive_tags(analysis_input, patterns)

            stage = 'assembly'
            created_at = self.clock()
            result = AnalysisResult(
                id=generate_analysis_id(created_at, self.rng),
                created_at=created_at,
                input=analysis_input,
                side_analyses=side_analyses,
                verdict_headline=apply_commentator_tone(analysis_input.commentator_style, base),
                verdict_explanation=(
                    "Based on analysis of clarity, evidence quality, logical consistency, "
                    f"and communication style, {base.lower()} Each side has room for "
                    "improvement in presenting their case more effectively."
                ),
                win_analysis=win,
                peace_analysis=build_peace_analysis(),
                outcome_changers=list(OUTCOME_CHANGERS),
                patterns_detected=patterns,
                tags=tags
            )
        except VerdictError:
            raise
        except Exception as e:
            logger.error(f"Analysis failed during {stage}: {e}", exc_info=True)
            raise ComputationError(stage, e) from e

        problems = result.check_integrity()
        if problems:
            raise ComputationError('assembly', ValueError('; '.join(problems)))

        logger.info(
            f"Analysis {result.id} complete ({self.scoring.get_name()}): {len(side_analyses)} sides, "
            f"winner={win.winner_label or 'none'}, confidence={win.confidence}"
        )
        return result
