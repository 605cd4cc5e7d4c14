#!/usr/bin/env python3
"""
Analyze command: run a verdict on two to five sides.
"""

import json
import logging
from argparse import Namespace
from typing import List

from verdict.models import AnalysisResult, Side
from verdict.models.analysis import MIN_SIDES

from .base import BaseCommand

logger = logging.getLogger(__name__)


def parse_side_args(raw_sides: List[str]) -> List[Side]:
    """Parse ``LABEL=CONTENT`` arguments; sides without a label get Side A, Side B, ..."""
    sides = []
    for index, raw in enumerate(raw_sides):
        label, sep, content = raw.partition('=')
        if not sep:
            label, content = f"Side {chr(ord('A') + index)}", raw
        sides.append(Side(id=f"side_{index + 1}", label=label.strip(), content=content.strip()))
    return sides


def print_verdict(result: AnalysisResult) -> None:
    print(f"\n=== {result.verdict_headline} ===")
    print(result.verdict_explanation)

    if result.win_analysis:
        win = result.win_analysis
        winner = win.winner_label or "No clear winner"
        print(f"\n🏆 {winner} (confidence {win.confidence}%)")
        print(f"   {win.reasoning}")

    print("\n📊 Sides:")
    for side_analysis in result.side_analyses:
        scores = side_analysis.scores
        print(f"   • {side_analysis.label}: {side_analysis.summary}")
        print(f"     clarity {scores.clarity}, evidence {scores.evidence_quality}, "
              f"logic {scores.logical_consistency}, escalation {scores.emotional_escalation}, "
              f"fairness {scores.fairness}")
        for assumption in side_analysis.flagged_assumptions or []:
            print(f"     ⚠️  {assumption}")

    if result.patterns_detected:
        print("\n🔍 Patterns:")
        for pattern in result.patterns_detected:
            print(f"   • {pattern.name}: {pattern.description}")

    if result.peace_analysis:
        print(f"\n🕊️  {result.peace_analysis.suggested_compromise}")
        for step in result.peace_analysis.steps_forward:
            print(f"   • {step}")

    print(f"\nTags: {', '.join(result.tags)}")
    print(f"Saved as {result.id}")


class AnalyzeCommand(BaseCommand):
    """Run a new analysis and store it in history."""

    SUBCOMMANDS = ('run', 'draft')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute analyze subcommand."""
        try:
            if subcommand == "run":
                return self.run(args)
            elif subcommand == "draft":
                return self.save_draft(args)
            return self.unknown_subcommand(subcommand)
        except Exception as e:
            return self.handle_error(e, f"analyze {subcommand}")

    def _apply_options(self, session, args: Namespace) -> None:
        if getattr(args, 'style', None):
            session.set_commentator_style(args.style)
        if getattr(args, 'mode', None):
            session.set_evidence_mode(args.mode)
        if getattr(args, 'context', None) is not None:
            session.set_context(args.context)

    def run(self, args: Namespace) -> int:
        sides = parse_side_args(getattr(args, 'side', None) or [])
        from_draft = getattr(args, 'from_draft', False)
        if not from_draft and len(sides) < MIN_SIDES:
            self.logger.error(f"At least {MIN_SIDES} sides are required (use --side LABEL=CONTENT)")
            return 22

        session = self.create_session()

        async def _run():
            await session.load_app_settings()
            if from_draft:
                draft = await session.load_saved_draft()
                if draft is None:
                    print("❌ No saved draft to analyze")
                    return None
                session.restore_draft(draft)
            else:
                if len(sides) > session.max_sides:
                    print(f"❌ Your plan allows at most {session.max_sides} sides")
                    return None
                session.set_sides(sides)
            self._apply_options(session, args)
            result = await session.start_analysis()
            if result is not None and from_draft:
                await session.clear_saved_draft()
            return result

        result = self.run_async(_run())

        if result is None:
            if session.analysis_error:
                print(f"❌ {session.analysis_error}")
                print("   Upgrade to Pro for unlimited analyses: run.py settings pro --on")
            return 1

        if getattr(args, 'json', False):
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            print_verdict(result)
            print(session.describe_quota())
        return 0

    def save_draft(self, args: Namespace) -> int:
        """Store the given sides as the autosave draft without analyzing them."""
        sides = parse_side_args(getattr(args, 'side', None) or [])
        session = self.create_session()

        async def _save():
            await session.load_app_settings()
            if sides:
                session.set_sides(sides)
            self._apply_options(session, args)
            return await session.save_current_draft()

        if self.run_async(_save()):
            print(f"💾 Draft saved (kept for {self.config.storage.draft_ttl_hours} hours)")
            return 0
        print("Nothing to save: every side is empty")
        return 1
