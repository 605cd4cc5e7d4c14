#!/usr/bin/env python3
"""
Settings command endpoints: preferences, pro mode and the autosave draft.
"""

import logging
from argparse import Namespace

import pytz

from verdict.config import get_config_manager
from verdict.timeutils import format_ms

from .base import BaseCommand

logger = logging.getLogger(__name__)


class SettingsCommand(BaseCommand):
    """Show and change settings, manage the saved draft."""

    SUBCOMMANDS = ('show', 'set', 'pro', 'draft', 'clear-draft')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute settings subcommand."""
        try:
            if subcommand == "show":
                return self.show(args)
            elif subcommand == "set":
                return self.set_defaults(args)
            elif subcommand == "pro":
                return self.pro(args)
            elif subcommand == "draft":
                return self.draft(args)
            elif subcommand == "clear-draft":
                return self.clear_draft(args)
            return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"settings {subcommand}")

    def show(self, args: Namespace) -> int:
        settings = self.run_async(self.settings_store.load_settings())
        tz = pytz.timezone(self.config.quota.timezone)
        remaining = self.quota.remaining(settings)

        print("\n=== Settings ===")
        print(f"Plan: {'Pro' if settings.is_pro else 'Free'}")
        print(f"Default style: {settings.default_commentator_style.value}")
        print(f"Default evidence mode: {settings.default_evidence_mode.value}")
        print(f"Design preset: {settings.design_preset.value}")
        print(f"Haptics: {'on' if settings.haptics_enabled else 'off'}, "
              f"reduce motion: {'on' if settings.reduce_motion else 'off'}")
        print(f"\nWeek started: {format_ms(settings.week_start_timestamp, '%a %b %d %H:%M %Z', tz)}")
        print(f"Analyses this week: {settings.analyses_this_week}")
        print(f"Remaining: {'unlimited' if settings.is_pro else int(remaining)}")
        print(f"Max sides: {self.quota.max_sides(settings)}")

        if getattr(args, 'verbose', False):
            print("\n=== Configuration ===")
            for key, value in get_config_manager().get_summary().items():
                print(f"{key}: {value}")
        return 0

    def set_defaults(self, args: Namespace) -> int:
        changes = {}
        if getattr(args, 'style', None):
            changes['default_commentator_style'] = args.style
        if getattr(args, 'mode', None):
            changes['default_evidence_mode'] = args.mode
        if getattr(args, 'preset', None):
            changes['design_preset'] = args.preset
        if getattr(args, 'haptics', None) is not None:
            changes['haptics_enabled'] = args.haptics
        if getattr(args, 'reduce_motion', None) is not None:
            changes['reduce_motion'] = args.reduce_motion

        if not changes:
            self.logger.error("Nothing to change (see settings set --help)")
            return 22

        self.run_async(self.settings_store.update_settings(**changes))
        print(f"✅ Updated {', '.join(sorted(changes))}")
        return 0

    def pro(self, args: Namespace) -> int:
        if getattr(args, 'on', False) or getattr(args, 'off', False):
            settings = self.run_async(self.settings_store.update_settings(is_pro=bool(args.on)))
            enabled = settings.is_pro
        else:
            session = self.create_session()
            enabled = self.run_async(session.toggle_pro())
        print(f"✅ Pro mode {'enabled' if enabled else 'disabled'}")
        return 0

    def draft(self, args: Namespace) -> int:
        draft = self.run_async(self.drafts.load_draft())
        if draft is None:
            print("No saved draft")
            return 0

        tz = pytz.timezone(self.config.quota.timezone)
        print(f"\n=== Draft saved {format_ms(draft.saved_at, '%b %d %H:%M', tz)} ===")
        print(f"Style: {draft.commentator_style.value}, evidence: {draft.evidence_mode.value}")
        for side in draft.sides:
            print(f"   • {side.label}: {side.content or '(empty)'}")
        if draft.context:
            print(f"Context: {draft.context}")
        return 0

    def clear_draft(self, args: Namespace) -> int:
        self.run_async(self.drafts.clear_draft())
        print("🧹 Draft cleared")
        return 0
