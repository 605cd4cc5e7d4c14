#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from argparse import Namespace
from typing import Any, Awaitable, List, Tuple

from verdict.container import get_container
from verdict.exceptions import StorageError, ValidationError, VerdictError

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides access to the configured services and standard error
    handling. Core operations are coroutines; commands drive them with
    run_async().
    """

    SUBCOMMANDS: Tuple[str, ...] = ()

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def analyses(self):
        return self._container.get('analysis_repository')

    @property
    def templates(self):
        return self._container.get('template_repository')

    @property
    def settings_store(self):
        return self._container.get('settings_store')

    @property
    def collection_store(self):
        return self._container.get('collection_store')

    @property
    def quota(self):
        return self._container.get('quota_tracker')

    @property
    def drafts(self):
        return self._container.get('draft_manager')

    @property
    def transfer(self):
        return self._container.get('transfer_service')

    @property
    def insights(self):
        return self._container.get('insights_service')

    def create_session(self):
        """Create a new session wired to the container's services."""
        return self._container.get('session')

    def run_async(self, coroutine: Awaitable[Any]) -> Any:
        return asyncio.run(coroutine)

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """Get list of available subcommands for this command."""
        return list(self.SUBCOMMANDS)

    def unknown_subcommand(self, subcommand: str) -> int:
        available = ", ".join(self.get_available_subcommands())
        self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
        return 1

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)

        if isinstance(error, VerdictError):
            # Expected failures: report without a traceback
            self.logger.error(f"{error_msg} {error.context}" if error.context else error_msg)
            print(f"❌ {error.message}")
        else:
            self.logger.error(error_msg, exc_info=True)

        # Map common exceptions to exit codes
        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        elif isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, (ValueError, ValidationError)):
            return 22
        elif isinstance(error, StorageError):
            return 74
        else:
            return 1
