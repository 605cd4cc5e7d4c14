#!/usr/bin/env python3
"""
CLI router for the verdict engine.

Parses ``command subcommand [options]`` and dispatches to the command classes.
"""

import argparse
import logging
import sys
from typing import Optional, List

from verdict.config import get_config_manager
from verdict.models import CommentatorStyle, DesignPreset, EvidenceMode

from verdict_commands import get_command, COMMANDS

logger = logging.getLogger(__name__)

STYLE_CHOICES = [style.value for style in CommentatorStyle]
MODE_CHOICES = [mode.value for mode in EvidenceMode]
PRESET_CHOICES = [preset.value for preset in DesignPreset]


class CLIRouter:
    """
    CLI router for verdict commands.

    Command structure:
    - python run.py analyze run --side "Alice=..." --side "Bob=..." --style coach
    - python run.py history list --limit 10
    - python run.py data import backup.json --mode merge
    - python run.py settings pro --on
    """

    def __init__(self):
        """Initialize CLI router."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Verdict: score a dispute between two to five sides",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )
        self._command_parsers = subparsers.choices

        self._add_analyze_parser(subparsers)
        self._add_history_parser(subparsers)
        self._add_data_parser(subparsers)
        self._add_settings_parser(subparsers)
        self._add_templates_parser(subparsers)

        return parser

    def _add_input_options(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument('--side', action='append', metavar='LABEL=CONTENT',
                            help='A side of the dispute (repeat 2-5 times)')
        parser.add_argument('--style', choices=STYLE_CHOICES, help='Commentator style (default: from settings)')
        parser.add_argument('--mode', choices=MODE_CHOICES, help='Evidence mode (default: from settings)')
        parser.add_argument('--context', help='Optional background for the dispute')

    def _add_analyze_parser(self, subparsers):
        """Add analyze command parser."""
        analyze_parser = subparsers.add_parser(
            'analyze',
            help='Run a new analysis'
        )

        analyze_subparsers = analyze_parser.add_subparsers(
            dest='subcommand',
            help='Analyze operations',
            metavar='{run,draft}'
        )

        run_parser = analyze_subparsers.add_parser('run', help='Analyze the given sides and save the verdict')
        self._add_input_options(run_parser)
        run_parser.add_argument('--from-draft', action='store_true', help='Analyze the saved draft instead of --side')
        run_parser.add_argument('--json', action='store_true', help='Print the stored result as JSON')

        draft_parser = analyze_subparsers.add_parser('draft', help='Save the given sides as a draft')
        self._add_input_options(draft_parser)

    def _add_history_parser(self, subparsers):
        """Add history command parser."""
        history_parser = subparsers.add_parser(
            'history',
            help='Browse and edit stored analyses'
        )

        history_subparsers = history_parser.add_subparsers(
            dest='subcommand',
            help='History operations',
            metavar='{list,show,delete,rename,duplicate,takeaway}'
        )

        list_parser = history_subparsers.add_parser('list', help='List stored analyses, newest first')
        list_parser.add_argument('--limit', type=int, default=20, help='Maximum rows to show (default: 20)')

        show_parser = history_subparsers.add_parser('show', help='Show one analysis')
        show_parser.add_argument('id', help='Analysis id')
        show_parser.add_argument('--json', action='store_true', help='Print as JSON')

        delete_parser = history_subparsers.add_parser('delete', help='Delete an analysis')
        delete_parser.add_argument('id', help='Analysis id')

        rename_parser = history_subparsers.add_parser('rename', help='Change the headline of an analysis')
        rename_parser.add_argument('id', help='Analysis id')
        rename_parser.add_argument('title', help='New headline')

        duplicate_parser = history_subparsers.add_parser('duplicate', help='Copy an analysis')
        duplicate_parser.add_argument('id', help='Analysis id')

        takeaway_parser = history_subparsers.add_parser('takeaway', help='Attach a personal takeaway')
        takeaway_parser.add_argument('id', help='Analysis id')
        takeaway_parser.add_argument('text', help='Takeaway text')

    def _add_data_parser(self, subparsers):
        """Add data command parser."""
        data_parser = subparsers.add_parser(
            'data',
            help='Data management operations'
        )

        data_subparsers = data_parser.add_subparsers(
            dest='subcommand',
            help='Data operations',
            metavar='{export,import,stats,clear}'
        )

        export_parser = data_subparsers.add_parser('export', help='Export analysis history to JSON')
        export_parser.add_argument('--output', '-o', help="Output file ('-' for stdout, default: timestamped file)")

        import_parser = data_subparsers.add_parser('import', help='Import an export file')
        import_parser.add_argument('file', help='Path to the export file')
        import_parser.add_argument('--mode', choices=['merge', 'replace'], default='merge',
                                   help='merge keeps existing analyses, replace discards them (default: merge)')
        import_parser.add_argument('--force', action='store_true', help='Skip confirmation prompt')
        import_parser.add_argument('--verbose', action='store_true', help='List migration warnings')

        data_subparsers.add_parser('stats', help='Show storage and weekly statistics')

        clear_parser = data_subparsers.add_parser('clear', help='Delete analyses, settings and insights')
        clear_parser.add_argument('--force', action='store_true', help='Skip confirmation prompt')

    def _add_settings_parser(self, subparsers):
        """Add settings command parser."""
        settings_parser = subparsers.add_parser(
            'settings',
            help='Preferences, pro mode and drafts'
        )

        settings_subparsers = settings_parser.add_subparsers(
            dest='subcommand',
            help='Settings operations',
            metavar='{show,set,pro,draft,clear-draft}'
        )

        show_parser = settings_subparsers.add_parser('show', help='Show settings and quota')
        show_parser.add_argument('--verbose', action='store_true', help='Include runtime configuration')

        set_parser = settings_subparsers.add_parser('set', help='Change default preferences')
        set_parser.add_argument('--style', choices=STYLE_CHOICES, help='Default commentator style')
        set_parser.add_argument('--mode', choices=MODE_CHOICES, help='Default evidence mode')
        set_parser.add_argument('--preset', choices=PRESET_CHOICES, help='Design preset')
        set_parser.add_argument('--haptics', dest='haptics', action='store_true', default=None,
                                help='Enable haptics')
        set_parser.add_argument('--no-haptics', dest='haptics', action='store_false', help='Disable haptics')
        set_parser.add_argument('--reduce-motion', dest='reduce_motion', action='store_true', default=None,
                                help='Reduce motion')
        set_parser.add_argument('--full-motion', dest='reduce_motion', action='store_false',
                                help='Allow full motion')

        pro_parser = settings_subparsers.add_parser('pro', help='Toggle pro mode')
        pro_group = pro_parser.add_mutually_exclusive_group()
        pro_group.add_argument('--on', action='store_true', help='Enable pro mode')
        pro_group.add_argument('--off', action='store_true', help='Disable pro mode')

        settings_subparsers.add_parser('draft', help='Show the saved draft')
        settings_subparsers.add_parser('clear-draft', help='Discard the saved draft')

    def _add_templates_parser(self, subparsers):
        """Add templates command parser."""
        templates_parser = subparsers.add_parser(
            'templates',
            help='Reusable analysis templates'
        )

        templates_subparsers = templates_parser.add_subparsers(
            dest='subcommand',
            help='Template operations',
            metavar='{list,create,use,delete}'
        )

        templates_subparsers.add_parser('list', help='List templates')

        create_parser = templates_subparsers.add_parser('create', help='Create a template')
        create_parser.add_argument('--title', required=True, help='Template title')
        create_parser.add_argument('--side', action='append', metavar='LABEL', help='Side label (repeat 2-5 times)')
        create_parser.add_argument('--style', choices=STYLE_CHOICES, help='Commentator style (default: neutral)')
        create_parser.add_argument('--mode', choices=MODE_CHOICES, help='Evidence mode (default: light)')
        create_parser.add_argument('--description', help='Short description')

        use_parser = templates_subparsers.add_parser('use', help='Mark a template used and print its sides')
        use_parser.add_argument('id', help='Template id')

        delete_parser = templates_subparsers.add_parser('delete', help='Delete a template')
        delete_parser.add_argument('id', help='Template id')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  # Analyze a dispute
  python run.py analyze run --side "Alice=We should split rent by income" --side "Bob=Equal split is fairer"
  python run.py analyze run --side "Alice=..." --side "Bob=..." --style savage --mode strict --json

  # History
  python run.py history list
  python run.py history rename analysis_1718000000000_abc123xyz "Rent debate"

  # Backup and restore
  python run.py data export -o backup.json
  python run.py data import backup.json --mode merge

  # Preferences
  python run.py settings set --style coach --no-haptics
  python run.py settings pro --on

"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self._command_parsers[args.command].print_help()
            return 1

        try:
            command = get_command(args.command)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        get_config_manager().update_logging()
    except ValueError as e:
        logger.error(str(e))
        return 22

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
