#!/usr/bin/env python3
"""
Standardized exception hierarchy for the verdict core.

Provides specific exception types for the failure classes the core can
surface, with error codes and context for logging and user messages.
"""

from typing import Optional, Dict, Any, List


class VerdictError(Exception):
    """Base exception for all verdict core errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Storage-related exceptions
class StorageError(VerdictError):
    """Base exception for storage errors."""
    pass


class StorageCorruptionError(StorageError):
    """Persisted bytes could not be parsed. Recovered locally, never surfaced."""

    def __init__(self, key: str, original_error: Exception):
        message = f"Stored value for '{key}' is unreadable"
        context = {
            'key': key,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class StorageWriteError(StorageError):
    """Writing to the persistent medium failed."""

    def __init__(self, key: str, original_error: Exception):
        message = f"Failed to write '{key}' to storage"
        context = {
            'key': key,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Validation-related exceptions
class ValidationError(VerdictError):
    """Base exception for malformed payloads and records."""
    pass


class ImportValidationError(ValidationError):
    """Import payload failed validation; nothing was changed."""

    def __init__(self, reason: str):
        message = f"Invalid import file: {reason}"
        super().__init__(message, context={'reason': reason})


class RecordValidationError(ValidationError):
    """A stored or imported record is structurally invalid."""

    def __init__(self, reason: str, record_id: Optional[str] = None):
        message = f"Invalid record: {reason}"
        context = {'reason': reason}
        if record_id:
            context['record_id'] = record_id
        super().__init__(message, context=context)


# Migration-related exceptions
class MigrationError(VerdictError):
    """Base exception for schema migration errors."""
    pass


class UnsupportedVersionError(MigrationError):
    """Detected schema version cannot be migrated."""

    def __init__(self, version: int, reason: str):
        super().__init__(reason, context={'version': version})
        self.version = version


# Analysis-related exceptions
class AnalysisError(VerdictError):
    """Base exception for verdict computation errors."""
    pass


class InvalidInputError(AnalysisError):
    """Analysis input validation failed."""

    def __init__(self, validation_errors: List[str]):
        message = f"Analysis input is invalid: {'; '.join(validation_errors)}"
        context = {'validation_errors': validation_errors}
        super().__init__(message, context=context)


class ComputationError(AnalysisError):
    """The verdict engine failed; no result was produced."""

    def __init__(self, stage: str, original_error: Exception):
        message = f"Analysis failed during {stage}"
        context = {
            'stage': stage,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Quota-related exceptions
class QuotaExceededError(VerdictError):
    """Free tier weekly limit reached."""

    def __init__(self, used: int, limit: int):
        message = f"Weekly limit reached ({used}/{limit} analyses used)"
        context = {
            'used': used,
            'limit': limit
        }
        super().__init__(message, context=context)


def get_error_message(error: Exception) -> str:
    """Get a user-facing message for any exception."""
    if isinstance(error, VerdictError):
        return error.message
    return str(error) or error.__class__.__name__
