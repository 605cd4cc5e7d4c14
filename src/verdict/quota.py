#!/usr/bin/env python3
"""
Quota Tracker - rolling weekly analysis quota.

The quota window starts on Monday 00:00 local time. Resets are lazy: a
settings read after the boundary notices the stale window and resets the
counter. Pro users bypass the cap.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz

from .models import AppSettings, TierLimits
from .timeutils import from_ms, now_ms, to_ms

logger = logging.getLogger(__name__)


class QuotaTracker:
    """Weekly quota decisions over AppSettings."""

    def __init__(self, timezone_str: str = "UTC", free_analyses_per_week: int = 5,
                 free_max_sides: int = 3, pro_max_sides: int = 5,
                 clock: Callable[[], int] = now_ms):
        """Initialize tracker with timezone and tier limits."""
        self.tz = pytz.timezone(timezone_str)
        self.free_tier = TierLimits(analyses_per_week=free_analyses_per_week, max_sides=free_max_sides)
        self.pro_tier = TierLimits(analyses_per_week=math.inf, max_sides=pro_max_sides)
        self.clock = clock

    def tier(self, settings: AppSettings) -> TierLimits:
        return self.pro_tier if settings.is_pro else self.free_tier

    def week_start(self, now: Optional[int] = None) -> int:
        """Epoch ms of the most recent Monday 00:00 in the configured timezone."""
        local_now = from_ms(now if now is not None else self.clock(), self.tz)
        monday = local_now.date() - timedelta(days=local_now.weekday())
        # localize() picks the correct UTC offset for the date, across DST changes
        midnight = self.tz.localize(datetime(monday.year, monday.month, monday.day))
        return to_ms(midnight)

    def is_stale(self, settings: AppSettings, now: Optional[int] = None) -> bool:
        return settings.week_start_timestamp < self.week_start(now)

    def apply_rollover(self, settings: AppSettings, now: Optional[int] = None) -> bool:
        """
        Reset the weekly counter if the stored window is stale.

        Returns:
            True if settings were changed and must be persisted
        """
        if not self.is_stale(settings, now):
            return False

        current_week_start = self.week_start(now)
        logger.info(
            f"Quota window rolled over: {settings.analyses_this_week} analyses used last window, "
            f"new window starts {from_ms(current_week_start, self.tz).isoformat()}"
        )
        settings.analyses_this_week = 0
        settings.week_start_timestamp = current_week_start
        return True

    def limit(self, settings: AppSettings) -> float:
        return self.tier(settings).analyses_per_week

    def can_start(self, settings: AppSettings) -> bool:
        return settings.analyses_this_week < self.limit(settings)

    def remaining(self, settings: AppSettings) -> float:
        """Analyses left this window; math.inf for pro."""
        return max(0, self.limit(settings) - settings.analyses_this_week)

    def record_usage(self, settings: AppSettings) -> None:
        """Count one completed analysis against the current window."""
        settings.analyses_this_week += 1
        logger.debug(f"Quota usage now {settings.analyses_this_week}/{self.limit(settings)}")

    def max_sides(self, settings: AppSettings) -> int:
        return self.tier(settings).max_sides
