#!/usr/bin/env python3
"""
Import payload validation.

An import file must pass every check here before anything is written.
"""

import json
import logging
from typing import Any, Dict

from ..exceptions import ImportValidationError

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ImportValidator:
    """Validates export documents prior to import."""

    @staticmethod
    def validate(json_text: str) -> Dict[str, Any]:
        """
        Parse and validate an export document.

        Args:
            json_text: Raw file contents

        Returns:
            The parsed document

        Raises:
            ImportValidationError: Describing the first problem found
        """
        if not json_text or not json_text.strip():
            raise ImportValidationError("file is empty")

        try:
            document = json.loads(json_text)
        except json.JSONDecodeError as e:
            logger.warning(f"Import payload is not JSON: {e}")
            raise ImportValidationError(f"not valid JSON (line {e.lineno}, column {e.colno})")

        ImportValidator._validate_document(document)
        return document

    @staticmethod
    def _validate_document(document: Any) -> None:
        if not isinstance(document, dict):
            raise ImportValidationError("expected a JSON object at the top level")

        if not isinstance(document.get('exportedAt'), str):
            raise ImportValidationError("'exportedAt' must be a string")
        if not isinstance(document.get('appVersion'), str):
            raise ImportValidationError("'appVersion' must be a string")
        if not _is_number(document.get('totalAnalyses')):
            raise ImportValidationError("'totalAnalyses' must be a number")

        analyses = document.get('analyses')
        if not isinstance(analyses, list):
            raise ImportValidationError("'analyses' must be an array")
        if not analyses:
            raise ImportValidationError("the file contains no analyses")

        for index, record in enumerate(analyses):
            ImportValidator._validate_record(index, record)

    @staticmethod
    def _validate_record(index: int, record: Any) -> None:
        position = f"analysis #{index + 1}"
        if not isinstance(record, dict):
            raise ImportValidationError(f"{position} is not an object")
        if not isinstance(record.get('id'), str):
            raise ImportValidationError(f"{position} has no string 'id'")
        if not _is_number(record.get('createdAt')):
            raise ImportValidationError(f"{position} has no numeric 'createdAt'")
        if not isinstance(record.get('input'), dict):
            raise ImportValidationError(f"{position} has no 'input' object")
