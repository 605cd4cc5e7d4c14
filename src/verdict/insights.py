#!/usr/bin/env python3
"""
Weekly usage insights.

Derived statistics over the analyses created in the current quota week.
The result is cached under its own key but can always be recomputed.
"""

import logging
from collections import Counter
from typing import Optional

from .models import CommentatorStyle, TagCount, WeeklyInsights
from .quota import QuotaTracker
from .storage import AnalysisRepository, BoundedCollectionStore, StorageKeys

logger = logging.getLogger(__name__)

TOP_TAGS_LIMIT = 5


class InsightsService:
    """Computes and caches WeeklyInsights."""

    def __init__(self, store: BoundedCollectionStore, analyses: AnalysisRepository, quota: QuotaTracker):
        self.store = store
        self.analyses = analyses
        self.quota = quota

    async def calculate_weekly_insights(self, now: Optional[int] = None) -> WeeklyInsights:
        week_start = self.quota.week_start(now)
        this_week = [a for a in await self.analyses.load_analyses() if a.created_at >= week_start]

        tag_counts = Counter(tag for analysis in this_week for tag in analysis.tags)
        top_tags = [TagCount(tag=tag, count=count) for tag, count in tag_counts.most_common(TOP_TAGS_LIMIT)]

        style_usage = {style.value: 0 for style in CommentatorStyle}
        for analysis in this_week:
            style_usage[analysis.input.commentator_style.value] += 1

        # max() keeps the first of equal counts, so neutral wins an all-zero week
        most_used = max(style_usage, key=lambda style: style_usage[style])

        insights = WeeklyInsights(
            week_start_timestamp=week_start,
            total_analyses=len(this_week),
            top_tags=top_tags,
            most_used_style=CommentatorStyle(most_used),
            style_usage=style_usage
        )
        await self.store.save_object(StorageKeys.INSIGHTS, insights.to_dict())
        return insights

    async def load_cached_insights(self) -> Optional[WeeklyInsights]:
        """Return the cached insights, or None if absent or unreadable."""
        cached = await self.store.load_object(StorageKeys.INSIGHTS)
        if cached is None:
            return None
        try:
            return WeeklyInsights.from_dict(cached)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Cached insights unreadable, will recompute: {e}")
            return None
