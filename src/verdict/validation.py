#!/usr/bin/env python3
"""
Record shape checks.

Structural guards applied to persisted and imported records before they
are turned into model objects.
"""

from typing import Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_optional(value: Any, kind: type) -> bool:
    return value is None or isinstance(value, kind)


def _is_list_of_dicts(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, dict) for item in value)


def is_valid_analysis_result(data: Any) -> bool:
    """
    Check a current-version analysis record has every required field.

    Nested objects are checked down to the level the model constructors
    read, so a record that passes always loads.
    """
    if not isinstance(data, dict):
        return False

    if not isinstance(data.get('id'), str):
        return False
    if not _is_number(data.get('createdAt')):
        return False
    if not isinstance(data.get('input'), dict):
        return False
    for key in ('sideAnalyses', 'outcomeChangers', 'patternsDetected', 'tags'):
        if not isinstance(data.get(key), list):
            return False
    for key in ('verdictHeadline', 'verdictExplanation'):
        if not isinstance(data.get(key), str):
            return False
    if not _is_optional(data.get('takeaway'), str):
        return False
    for key in ('winAnalysis', 'peaceAnalysis'):
        if not _is_optional(data.get(key), dict):
            return False

    input_data = data['input']
    if not _is_list_of_dicts(input_data.get('sides')):
        return False
    if not isinstance(input_data.get('commentatorStyle'), str):
        return False
    if not isinstance(input_data.get('evidenceMode'), str):
        return False
    if not _is_optional(input_data.get('context'), str):
        return False

    if not _is_list_of_dicts(data['sideAnalyses']):
        return False
    if not all(isinstance(sa.get('scores', {}), dict) for sa in data['sideAnalyses']):
        return False

    if not _is_list_of_dicts(data['patternsDetected']):
        return False
    for pattern in data['patternsDetected']:
        if not _is_list_of_dicts(pattern.get('occurrences', [])):
            return False

    return True


def is_valid_template(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    return (
        isinstance(data.get('id'), str)
        and isinstance(data.get('title'), str)
        and _is_list_of_dicts(data.get('sides'))
        and isinstance(data.get('commentatorStyle'), str)
        and isinstance(data.get('evidenceMode'), str)
        and _is_number(data.get('createdAt'))
    )
