#!/usr/bin/env python3
"""
Timestamp helpers.

Stored timestamps are integer epoch milliseconds.
"""

import time
from datetime import datetime
from typing import Optional

import pytz


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def to_ms(moment: datetime) -> int:
    """Convert an aware (or naive UTC) datetime to epoch milliseconds."""
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return int(moment.timestamp() * 1000)


def from_ms(timestamp_ms: int, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime (UTC by default)."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=pytz.utc)
    return moment.astimezone(tz) if tz is not None else moment


def format_ms(timestamp_ms: int, fmt: str = "%Y-%m-%d %H:%M", tz: Optional[pytz.BaseTzInfo] = None) -> str:
    """Format epoch milliseconds for display."""
    try:
        return from_ms(int(timestamp_ms), tz).strftime(fmt)
    except (TypeError, ValueError, OverflowError, OSError):
        return "Unknown date"
