#!/usr/bin/env python3
"""
Data command endpoints for exporting, importing and clearing stored data.
"""

import logging
from argparse import Namespace
from pathlib import Path

from verdict.storage import clear_all_data
from verdict.transfer import ImportMode, export_file_name

from .base import BaseCommand

logger = logging.getLogger(__name__)


class DataCommand(BaseCommand):
    """Handle data management operations."""

    SUBCOMMANDS = ('export', 'import', 'stats', 'clear')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute data subcommand."""
        try:
            if subcommand == "export":
                return self.export(args)
            elif subcommand == "import":
                return self.import_file(args)
            elif subcommand == "stats":
                return self.stats(args)
            elif subcommand == "clear":
                return self.clear(args)
            return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"data {subcommand}")

    def export(self, args: Namespace) -> int:
        """Write the analysis history to a JSON export file."""
        document_text = self.run_async(self.transfer.export_analyses())
        output = getattr(args, 'output', None)

        if output == '-':
            print(document_text)
            return 0

        path = Path(output) if output else Path.cwd() / export_file_name()
        path.write_text(document_text, encoding='utf-8')
        print(f"📤 History exported to {path}")
        return 0

    def import_file(self, args: Namespace) -> int:
        """Import an export file in merge or replace mode."""
        mode = ImportMode(getattr(args, 'mode', 'merge'))
        if mode == ImportMode.REPLACE and not getattr(args, 'force', False):
            answer = input("This will delete all existing analyses and replace them. Continue? [y/N] ")
            if answer.strip().lower() not in ('y', 'yes'):
                print("Import cancelled")
                return 1

        json_text = Path(args.file).read_text(encoding='utf-8')
        result = self.run_async(self.transfer.import_analyses(json_text, mode))

        if not result.success:
            print(f"❌ Import failed: {result.message}")
            return 22

        print(f"✅ {result.message}")
        if getattr(args, 'verbose', False):
            for warning in result.warnings:
                print(f"   • {warning}")
        return 0

    def stats(self, args: Namespace) -> int:
        """Show history size, quota and this week's insights."""
        summaries = self.run_async(self.analyses.get_analysis_summaries())
        settings = self.run_async(self.settings_store.load_settings())
        insights = self.run_async(self.insights.calculate_weekly_insights())

        remaining = self.quota.remaining(settings)
        print("\n=== Verdict Data Statistics ===")
        print(f"📁 Stored analyses: {len(summaries)} / {self.analyses.cap}")
        print(f"📅 This week: {insights.total_analyses} analyses")
        print(f"🎫 Remaining: {'unlimited' if settings.is_pro else int(remaining)}")
        print(f"🎙️  Most used style: {insights.most_used_style.value}")
        if insights.top_tags:
            tags = ", ".join(f"{t.tag} ({t.count})" for t in insights.top_tags)
            print(f"🏷️  Top tags: {tags}")
        return 0

    def clear(self, args: Namespace) -> int:
        """Delete analyses, settings and insights."""
        if not getattr(args, 'force', False):
            answer = input("Delete all analyses and settings? This cannot be undone. [y/N] ")
            if answer.strip().lower() not in ('y', 'yes'):
                print("Clear cancelled")
                return 1

        self.run_async(clear_all_data(self.collection_store))
        print("🧹 All analyses, settings and insights removed")
        return 0
