#!/usr/bin/env python3
"""
Schema version fingerprints.

Unversioned records are identified by structural predicates evaluated in
order. Each fingerprint is an independent, testable rule; an explicit
integer ``version`` field always takes precedence over all of them.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

ANALYSIS = 'analysis'
SETTINGS = 'settings'


@dataclass(frozen=True)
class Fingerprint:
    """Structural rule mapping an unversioned record to a schema version."""
    name: str
    kind: str
    version: int
    predicate: Callable[[Dict[str, Any]], bool]

    def matches(self, data: Any) -> bool:
        return isinstance(data, dict) and self.predicate(data)


def _has_keys(data: Dict[str, Any], *keys: str) -> bool:
    return all(key in data for key in keys)


def _is_analysis(data: Dict[str, Any]) -> bool:
    return _has_keys(data, 'id', 'createdAt', 'sideAnalyses')


def _is_settings(data: Dict[str, Any]) -> bool:
    return _has_keys(data, 'hapticsEnabled', 'reduceMotion')


FINGERPRINTS: Tuple[Fingerprint, ...] = (
    Fingerprint('analysis-with-takeaway', ANALYSIS, 2,
                lambda d: _is_analysis(d) and 'takeaway' in d),
    Fingerprint('analysis-without-takeaway', ANALYSIS, 1,
                lambda d: _is_analysis(d) and 'takeaway' not in d),
    Fingerprint('settings-with-design-preset', SETTINGS, 2,
                lambda d: _is_settings(d) and 'designPreset' in d),
    Fingerprint('settings-without-design-preset', SETTINGS, 1,
                lambda d: _is_settings(d) and 'designPreset' not in d),
)


def explicit_version(data: Any) -> Optional[int]:
    """Return the integer ``version`` field if present (booleans do not count)."""
    if not isinstance(data, dict):
        return None
    version = data.get('version')
    if isinstance(version, int) and not isinstance(version, bool):
        return version
    return None


def match_fingerprint(data: Any) -> Optional[Fingerprint]:
    for fingerprint in FINGERPRINTS:
        if fingerprint.matches(data):
            return fingerprint
    return None


def detect_data_version(data: Any) -> int:
    """
    Detect the schema version of a stored record.

    Returns:
        The explicit version, else the first matching fingerprint's version,
        else 0 (unknown structure).
    """
    version = explicit_version(data)
    if version is not None:
        return version

    fingerprint = match_fingerprint(data)
    return fingerprint.version if fingerprint else 0
