#!/usr/bin/env python3
"""
Template command endpoints.
"""

import logging
from argparse import Namespace

from verdict.models import TemplateSide

from .base import BaseCommand

logger = logging.getLogger(__name__)


class TemplatesCommand(BaseCommand):
    """Manage analysis templates."""

    SUBCOMMANDS = ('list', 'create', 'use', 'delete')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute templates subcommand."""
        try:
            if subcommand == "list":
                return self.list_templates(args)
            elif subcommand == "create":
                return self.create(args)
            elif subcommand == "use":
                return self.use(args)
            elif subcommand == "delete":
                return self.delete(args)
            return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"templates {subcommand}")

    def list_templates(self, args: Namespace) -> int:
        summaries = self.run_async(self.templates.get_template_summaries())
        recent = self.run_async(self.templates.get_recent_templates())

        print(f"\n=== Templates ({len(summaries)}) ===")
        if not summaries:
            print("No templates yet. Create one with: run.py templates create --title ... --side LABEL")
            return 0

        for summary in summaries:
            print(f"{summary.id}: {summary.title} "
                  f"({summary.side_count} sides, {summary.commentator_style.value}, used {summary.use_count}x)")

        if recent:
            print(f"\nRecently used: {', '.join(template.title for template in recent)}")
        return 0

    def create(self, args: Namespace) -> int:
        labels = args.side or []
        if len(labels) < 2:
            self.logger.error("A template needs at least 2 sides (use --side LABEL)")
            return 22

        session = self.create_session()
        template = self.run_async(session.create_template(
            title=args.title,
            sides=[TemplateSide(label=label) for label in labels],
            commentator_style=getattr(args, 'style', None) or 'neutral',
            evidence_mode=getattr(args, 'mode', None) or 'light',
            description=getattr(args, 'description', None)
        ))
        print(f"✅ Created template {template.id}: {template.title}")
        return 0

    def use(self, args: Namespace) -> int:
        template = self.run_async(self.templates.mark_template_used(args.id))
        if template is None:
            print(f"❌ Template {args.id} not found")
            return 1

        print(f"📋 {template.title} ({template.commentator_style.value}, {template.evidence_mode.value})")
        example = " ".join(f'--side "{side.label}=..."' for side in template.sides)
        print(f"   run.py analyze run {example} --style {template.commentator_style.value} "
              f"--mode {template.evidence_mode.value}")
        return 0

    def delete(self, args: Namespace) -> int:
        if self.run_async(self.templates.delete_template(args.id)):
            print(f"✅ Deleted template {args.id}")
            return 0
        print(f"❌ Template {args.id} not found")
        return 1
