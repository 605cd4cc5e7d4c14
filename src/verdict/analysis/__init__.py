#!/usr/bin/env python3
"""
Verdict computation package.

Scoring strategies, winner determination, pattern detection and prompt
templates.
"""

from .scoring import ScoringStrategy, HeuristicScoringStrategy, extract_claims
from .patterns import (
    PatternRule, DEFAULT_PATTERN_RULES, EMOTIONAL_ESCALATION, APPEAL_WITHOUT_EVIDENCE,
    build_default_rules, detect_patterns, derive_tags
)
from .engine import VerdictEngine, determine_winner, apply_commentator_tone, TONE_PREFIXES
from .prompts import PromptBuilder, sanitize_side_content


async def analyze(analysis_input):
    """Analyze with the engine registered in the global container."""
    from ..container import get_service
    engine = get_service('verdict_engine')
    return await engine.analyze(analysis_input)


__all__ = [
    'ScoringStrategy', 'HeuristicScoringStrategy', 'extract_claims',
    'PatternRule', 'DEFAULT_PATTERN_RULES', 'EMOTIONAL_ESCALATION', 'APPEAL_WITHOUT_EVIDENCE',
    'build_default_rules', 'detect_patterns', 'derive_tags',
    'VerdictEngine', 'determine_winner', 'apply_commentator_tone', 'TONE_PREFIXES',
    'PromptBuilder', 'sanitize_side_content', 'analyze'
]
