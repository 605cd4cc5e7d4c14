#!/usr/bin/env python3
"""
History command endpoints for browsing and editing stored analyses.
"""

import json
import logging
from argparse import Namespace

import pytz

from verdict.timeutils import format_ms

from .analyze import print_verdict
from .base import BaseCommand

logger = logging.getLogger(__name__)


class HistoryCommand(BaseCommand):
    """Handle analysis history operations."""

    SUBCOMMANDS = ('list', 'show', 'delete', 'rename', 'duplicate', 'takeaway')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute history subcommand."""
        try:
            if subcommand == "list":
                return self.list_analyses(args)
            elif subcommand == "show":
                return self.show(args)
            elif subcommand == "delete":
                return self.delete(args)
            elif subcommand == "rename":
                return self.rename(args)
            elif subcommand == "duplicate":
                return self.duplicate(args)
            elif subcommand == "takeaway":
                return self.takeaway(args)
            return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"history {subcommand}")

    def _format_date(self, timestamp_ms: int) -> str:
        return format_ms(timestamp_ms, "%b %d, %Y %H:%M", pytz.timezone(self.config.quota.timezone))

    def list_analyses(self, args: Namespace) -> int:
        limit = getattr(args, 'limit', 20)
        summaries = self.run_async(self.analyses.get_analysis_summaries())

        print(f"\n=== Analysis History ({len(summaries)} stored) ===")
        if not summaries:
            print("No analyses yet. Start one with: run.py analyze run --side A=... --side B=...")
            return 0

        for summary in summaries[:limit]:
            participants = " vs ".join(summary.participant_labels)
            print(f"[{self._format_date(summary.created_at)}] {summary.id}")
            print(f"    {summary.verdict_headline}")
            print(f"    {participants} · {summary.commentator_style.value} · {', '.join(summary.tags)}")

        if len(summaries) > limit:
            print(f"\n... and {len(summaries) - limit} more")
        return 0

    def show(self, args: Namespace) -> int:
        analysis = self.run_async(self.analyses.get_analysis_by_id(args.id))
        if analysis is None:
            print(f"❌ Analysis {args.id} not found")
            return 1

        if getattr(args, 'json', False):
            print(json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False))
            return 0

        print(f"Created {self._format_date(analysis.created_at)}")
        print_verdict(analysis)
        if analysis.takeaway:
            print(f"\n📝 Takeaway: {analysis.takeaway}")
        return 0

    def delete(self, args: Namespace) -> int:
        if self.run_async(self.analyses.delete_analysis(args.id)):
            print(f"✅ Deleted {args.id}")
            return 0
        print(f"❌ Analysis {args.id} not found")
        return 1

    def rename(self, args: Namespace) -> int:
        if self.run_async(self.analyses.rename_analysis(args.id, args.title)):
            print(f"✅ Renamed {args.id} to '{args.title.strip()}'")
            return 0
        print(f"❌ Could not rename {args.id} (not found or empty title)")
        return 1

    def duplicate(self, args: Namespace) -> int:
        duplicate = self.run_async(self.analyses.duplicate_analysis(args.id))
        if duplicate is None:
            print(f"❌ Analysis {args.id} not found")
            return 1
        print(f"✅ Created {duplicate.id}: {duplicate.verdict_headline}")
        return 0

    def takeaway(self, args: Namespace) -> int:
        if self.run_async(self.analyses.add_takeaway(args.id, args.text)):
            print(f"✅ Takeaway saved for {args.id}")
            return 0
        print(f"❌ Analysis {args.id} not found")
        return 1
