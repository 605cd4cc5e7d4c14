#!/usr/bin/env python3
"""
Prompt templates for model-backed scoring providers.

Builds the system prompt (tone and evidence instructions) and the
analysis prompt for an AnalysisInput.
"""

import re
from typing import Dict

from ..models import AnalysisInput, CommentatorStyle, EvidenceMode

MAX_SIDE_CONTENT_LENGTH = 4000

TONE_INSTRUCTIONS: Dict[CommentatorStyle, str] = {
    CommentatorStyle.NEUTRAL: 'Be balanced and impartial in your analysis.',
    CommentatorStyle.DIRECT: 'Be straightforward and no-nonsense. State facts plainly without softening.',
    CommentatorStyle.HARSH: 'Be brutally honest and critical. Point out flaws directly.',
    CommentatorStyle.SAVAGE: 'Be witty and cutting in your observations, but keep it clever rather than mean.',
    CommentatorStyle.COACH: 'Be supportive but firm. Frame feedback constructively while being honest.',
    CommentatorStyle.LAWYER: 'Be precise and analytical. Focus on logical structure and evidence.',
    CommentatorStyle.MEDIATOR: 'Focus on finding common ground and paths to resolution.',
}

STRICT_INSTRUCTIONS = (
    'STRICT MODE: Flag every unverified claim and assumption. Note when evidence is '
    'missing or weak. Be rigorous about what counts as evidence.'
)
LIGHT_INSTRUCTIONS = 'LIGHT MODE: Accept reasonable assumptions. Focus on major evidentiary gaps only.'

_INJECTION_PATTERNS = [
    r'ignore\s+previous\s+instructions?',
    r'forget\s+everything\s+above',
    r'new\s+instructions?:',
    r'system\s*:',
    r'assistant\s*:',
    r'role\s*:\s*system',
]


def sanitize_side_content(text: str) -> str:
    """Filter prompt injection phrases and cap the length of user text."""
    if not text:
        return ""

    sanitized = text
    for pattern in _INJECTION_PATTERNS:
        sanitized = re.sub(pattern, '[FILTERED]', sanitized, flags=re.IGNORECASE)

    if len(sanitized) > MAX_SIDE_CONTENT_LENGTH:
        sanitized = sanitized[:MAX_SIDE_CONTENT_LENGTH - 3] + "..."

    return sanitized.strip()


class PromptBuilder:
    """Prompts for one commentator style and evidence mode."""

    def __init__(self, commentator_style: CommentatorStyle, evidence_mode: EvidenceMode):
        self.commentator_style = CommentatorStyle(commentator_style)
        self.evidence_mode = EvidenceMode(evidence_mode)

    def get_tone_instructions(self) -> str:
        return TONE_INSTRUCTIONS[self.commentator_style]

    def get_evidence_instructions(self) -> str:
        if self.evidence_mode == EvidenceMode.STRICT:
            return STRICT_INSTRUCTIONS
        return LIGHT_INSTRUCTIONS

    def get_system_prompt(self) -> str:
        return f"""You are an argument analyst. {self.get_tone_instructions()}

{self.get_evidence_instructions()}

Analyze the provided argument/discussion and:
1. Summarize each side's position
2. Identify claims, evidence, emotional vs logical statements
3. Score each side on: clarity, evidence quality, logical consistency, emotional escalation, fairness
4. Provide a verdict with reasoning
5. Suggest what would change the outcome
6. Identify communication patterns or logical fallacies

Keep analysis balanced and constructive. Avoid medical/psychological diagnoses."""

    def build_analysis_prompt(self, analysis_input: AnalysisInput) -> str:
        sides_text = "\n\n".join(
            f"[{side.label}]: {sanitize_side_content(side.content)}" for side in analysis_input.sides
        )
        prompt = f"Analyze this argument:\n\n{sides_text}"
        if analysis_input.context:
            prompt += f"\n\nContext: {sanitize_side_content(analysis_input.context)}"
        return prompt

    @classmethod
    def for_input(cls, analysis_input: AnalysisInput) -> 'PromptBuilder':
        return cls(analysis_input.commentator_style, analysis_input.evidence_mode)
