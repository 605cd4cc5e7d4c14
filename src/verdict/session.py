#!/usr/bin/env python3
"""
Application session state.

AppSession is the explicit state container for one user session: loaded
settings, the input being edited, the latest analysis and the loaded
history, insights and templates. Every coroutine that touches persisted
data runs under a single asyncio.Lock, which is the one serialization
point for writes to the store.
"""

import asyncio
import logging
import math
import random
import string
from typing import Any, Callable, Dict, List, Optional

from .analysis import VerdictEngine
from .drafts import DraftManager
from .exceptions import QuotaExceededError, VerdictError, get_error_message
from .insights import InsightsService
from .models import (
    AnalysisInput, AnalysisResult, AnalysisSummary, AnalysisTemplate, AppSettings,
    CommentatorStyle, DraftData, EvidenceMode, Side, TemplateSide, TemplateSummary, WeeklyInsights
)
from .models.analysis import MIN_SIDES, SIDE_ID_PREFIX
from .quota import QuotaTracker
from .storage import AnalysisRepository, SettingsStore, TemplateRepository, generate_template_id
from .timeutils import now_ms
from .transfer import ImportMode, ImportResult, TransferService

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class AppSession:
    """Session state plus the operations the UI or CLI performs on it."""

    def __init__(self, settings_store: SettingsStore, analyses: AnalysisRepository,
                 templates: TemplateRepository, drafts: DraftManager, quota: QuotaTracker,
                 engine: VerdictEngine, transfer: TransferService, insights: InsightsService,
                 clock: Callable[[], int] = now_ms, rng: Optional[random.Random] = None):
        self.settings_store = settings_store
        self.analyses = analyses
        self.templates_repo = templates
        self.drafts = drafts
        self.quota = quota
        self.engine = engine
        self.transfer = transfer
        self.insights_service = insights
        self.clock = clock
        self.rng = rng or random.Random()
        self._lock = asyncio.Lock()

        self.settings: AppSettings = settings_store.default_settings()
        self.settings_loaded = False

        self.current_sides: List[Side] = self._default_sides()
        self.current_commentator_style = CommentatorStyle.NEUTRAL
        self.current_evidence_mode = EvidenceMode.LIGHT
        self.current_context = ""

        self.is_analyzing = False
        self.current_analysis: Optional[AnalysisResult] = None
        self.analysis_error: Optional[str] = None

        self.analysis_summaries: List[AnalysisSummary] = []
        self.weekly_insights: Optional[WeeklyInsights] = None

        self.templates: List[AnalysisTemplate] = []
        self.template_summaries: List[TemplateSummary] = []
        self.recent_templates: List[AnalysisTemplate] = []

    @classmethod
    def from_container(cls, container) -> 'AppSession':
        return cls(
            settings_store=container.get('settings_store'),
            analyses=container.get('analysis_repository'),
            templates=container.get('template_repository'),
            drafts=container.get('draft_manager'),
            quota=container.get('quota_tracker'),
            engine=container.get('verdict_engine'),
            transfer=container.get('transfer_service'),
            insights=container.get('insights_service')
        )

    def _side_id(self) -> str:
        suffix = ''.join(self.rng.choice(_ID_ALPHABET) for _ in range(5))
        return f"{SIDE_ID_PREFIX}{self.clock()}_{suffix}"

    def _default_sides(self) -> List[Side]:
        return [
            Side(id=self._side_id(), label='Side A', content=''),
            Side(id=self._side_id(), label='Side B', content=''),
        ]

    # Settings

    async def load_app_settings(self) -> AppSettings:
        async with self._lock:
            self.settings = await self.settings_store.load_settings()
            self.settings_loaded = True
            self.current_commentator_style = self.settings.default_commentator_style
            self.current_evidence_mode = self.settings.default_evidence_mode
            return self.settings

    async def update_settings(self, **changes: Any) -> AppSettings:
        async with self._lock:
            self.settings = await self.settings_store.update_settings(**changes)
            return self.settings

    async def toggle_pro(self) -> bool:
        async with self._lock:
            current = await self.settings_store.load_settings()
            self.settings = await self.settings_store.update_settings(is_pro=not current.is_pro)
            logger.info(f"Pro mode {'enabled' if self.settings.is_pro else 'disabled'}")
            return self.settings.is_pro

    # Input editing

    @property
    def max_sides(self) -> int:
        return self.quota.max_sides(self.settings)

    def set_sides(self, sides: List[Side]) -> None:
        self.current_sides = list(sides)

    def add_side(self) -> Optional[Side]:
        """Append an empty side unless the tier's side limit is reached."""
        if len(self.current_sides) >= self.max_sides:
            return None
        side = Side(
            id=self._side_id(),
            label=f"Side {chr(ord('A') + len(self.current_sides))}",
            content=''
        )
        self.current_sides.append(side)
        return side

    def update_side(self, side_id: str, label: Optional[str] = None, content: Optional[str] = None) -> bool:
        for side in self.current_sides:
            if side.id == side_id:
                if label is not None:
                    side.label = label
                if content is not None:
                    side.content = content
                return True
        return False

    def remove_side(self, side_id: str) -> bool:
        if len(self.current_sides) <= MIN_SIDES:
            return False
        remaining = [side for side in self.current_sides if side.id != side_id]
        removed = len(remaining) != len(self.current_sides)
        self.current_sides = remaining
        return removed

    def set_commentator_style(self, style: CommentatorStyle) -> None:
        self.current_commentator_style = CommentatorStyle(style)

    def set_evidence_mode(self, mode: EvidenceMode) -> None:
        self.current_evidence_mode = EvidenceMode(mode)

    def set_context(self, context: str) -> None:
        self.current_context = context or ""

    def build_input(self) -> AnalysisInput:
        return AnalysisInput(
            sides=[Side(id=s.id, label=s.label, content=s.content) for s in self.current_sides],
            commentator_style=self.current_commentator_style,
            evidence_mode=self.current_evidence_mode,
            context=self.current_context or None
        )

    async def reset_input(self) -> None:
        """Restore default input and clear the saved draft."""
        async with self._lock:
            self.current_sides = self._default_sides()
            self.current_commentator_style = self.settings.default_commentator_style
            self.current_evidence_mode = self.settings.default_evidence_mode
            self.current_context = ""
            self.current_analysis = None
            self.analysis_error = None
            await self.drafts.clear_draft()

    # Drafts

    async def save_current_draft(self) -> bool:
        """Autosave the input; nothing is written while every side is empty."""
        draft = DraftData(
            sides=[Side(id=s.id, label=s.label, content=s.content) for s in self.current_sides],
            commentator_style=self.current_commentator_style,
            evidence_mode=self.current_evidence_mode,
            context=self.current_context,
            saved_at=self.clock()
        )
        if not draft.has_content():
            return False
        async with self._lock:
            await self.drafts.save_draft(draft)
        return True

    async def load_saved_draft(self) -> Optional[DraftData]:
        async with self._lock:
            return await self.drafts.load_draft()

    async def clear_saved_draft(self) -> None:
        async with self._lock:
            await self.drafts.clear_draft()

    def restore_draft(self, draft: DraftData) -> None:
        self.current_sides = [Side(id=s.id, label=s.label, content=s.content) for s in draft.sides]
        self.current_commentator_style = draft.commentator_style
        self.current_evidence_mode = draft.evidence_mode
        self.current_context = draft.context

    # Analysis

    def can_start_analysis(self) -> bool:
        if not all(side.content.strip() for side in self.current_sides):
            return False
        return self.quota.can_start(self.settings)

    def remaining_analyses(self) -> float:
        return self.quota.remaining(self.settings)

    async def start_analysis(self) -> Optional[AnalysisResult]:
        """
        Run an analysis of the current input and persist it.

        The quota is checked against freshly loaded settings before any
        computation. An exhausted quota sets analysis_error and returns None.
        A failed computation sets analysis_error, persists nothing, consumes
        no quota and is re-raised.
        """
        async with self._lock:
            self.analysis_error = None
            settings = await self.settings_store.load_settings()
            self.settings = settings

            if not self.quota.can_start(settings):
                error = QuotaExceededError(settings.analyses_this_week, self.quota.free_tier.analyses_per_week)
                logger.info(error.message)
                self.analysis_error = error.message
                return None

            self.is_analyzing = True
            try:
                result = await self.engine.analyze(self.build_input())
            except VerdictError as e:
                self.analysis_error = get_error_message(e)
                raise
            finally:
                self.is_analyzing = False

            await self.analyses.save_analysis(result)
            self.quota.record_usage(settings)
            await self.settings_store.save_settings(settings)

            self.current_analysis = result
            await self._refresh_history()
            return result

    def clear_current_analysis(self) -> None:
        self.current_analysis = None
        self.analysis_error = None

    # History

    async def _refresh_history(self) -> None:
        self.analysis_summaries = await self.analyses.get_analysis_summaries()

    async def load_history(self) -> List[AnalysisSummary]:
        async with self._lock:
            await self._refresh_history()
            return self.analysis_summaries

    async def get_analysis(self, analysis_id: str) -> Optional[AnalysisResult]:
        async with self._lock:
            return await self.analyses.get_analysis_by_id(analysis_id)

    async def delete_analysis(self, analysis_id: str) -> bool:
        async with self._lock:
            deleted = await self.analyses.delete_analysis(analysis_id)
            if self.current_analysis is not None and self.current_analysis.id == analysis_id:
                self.current_analysis = None
            await self._refresh_history()
            return deleted

    async def rename_analysis(self, analysis_id: str, title: str) -> bool:
        async with self._lock:
            renamed = await self.analyses.rename_analysis(analysis_id, title)
            await self._refresh_history()
            return renamed

    async def duplicate_analysis(self, analysis_id: str) -> Optional[AnalysisResult]:
        async with self._lock:
            duplicate = await self.analyses.duplicate_analysis(analysis_id)
            await self._refresh_history()
            return duplicate

    async def add_takeaway(self, analysis_id: str, takeaway: str) -> bool:
        async with self._lock:
            return await self.analyses.add_takeaway(analysis_id, takeaway)

    # Insights

    async def load_insights(self) -> WeeklyInsights:
        async with self._lock:
            self.weekly_insights = await self.insights_service.calculate_weekly_insights(self.clock())
            return self.weekly_insights

    # Templates

    async def _refresh_templates(self) -> None:
        self.templates = await self.templates_repo.load_templates()
        self.template_summaries = [template.to_summary() for template in self.templates]
        self.recent_templates = await self.templates_repo.get_recent_templates(3)

    async def load_all_templates(self) -> List[AnalysisTemplate]:
        async with self._lock:
            await self._refresh_templates()
            return self.templates

    async def create_template(self, title: str, sides: List[TemplateSide],
                              commentator_style: CommentatorStyle = CommentatorStyle.NEUTRAL,
                              evidence_mode: EvidenceMode = EvidenceMode.LIGHT,
                              description: Optional[str] = None) -> AnalysisTemplate:
        created_at = self.clock()
        template = AnalysisTemplate(
            id=generate_template_id(created_at, self.rng),
            title=title,
            sides=list(sides),
            commentator_style=commentator_style,
            evidence_mode=evidence_mode,
            created_at=created_at,
            description=description
        )
        async with self._lock:
            await self.templates_repo.save_template(template)
            await self._refresh_templates()
        return template

    async def update_template(self, template_id: str, changes: Dict[str, Any]) -> Optional[AnalysisTemplate]:
        async with self._lock:
            updated = await self.templates_repo.update_template(template_id, changes)
            await self._refresh_templates()
            return updated

    async def delete_template(self, template_id: str) -> bool:
        async with self._lock:
            deleted = await self.templates_repo.delete_template(template_id)
            await self._refresh_templates()
            return deleted

    async def use_template(self, template_id: str) -> Optional[AnalysisTemplate]:
        """Record a use of the template and apply it to the current input."""
        async with self._lock:
            template = await self.templates_repo.mark_template_used(template_id)
            await self._refresh_templates()
        if template is not None:
            self.apply_template(template)
        return template

    def apply_template(self, template: AnalysisTemplate) -> None:
        self.current_sides = [
            Side(id=self._side_id(), label=template_side.label, content='')
            for template_side in template.sides
        ]
        self.current_commentator_style = template.commentator_style
        self.current_evidence_mode = template.evidence_mode
        self.current_context = ""

    # Import / export

    async def export_history(self, indent: Optional[int] = 2) -> str:
        async with self._lock:
            return await self.transfer.export_analyses(indent)

    async def import_history(self, json_text: str, mode: ImportMode = ImportMode.MERGE) -> ImportResult:
        async with self._lock:
            result = await self.transfer.import_analyses(json_text, mode)
            if result.success:
                await self._refresh_history()
            return result

    def describe_quota(self) -> str:
        remaining = self.remaining_analyses()
        if math.isinf(remaining):
            return "Unlimited analyses (Pro)"
        return f"{int(remaining)} of {self.quota.free_tier.analyses_per_week} analyses left this week"
