import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytz

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from verdict.analysis import ScoringStrategy, VerdictEngine  # noqa: E402
from verdict.drafts import DraftManager  # noqa: E402
from verdict.insights import InsightsService  # noqa: E402
from verdict.models import EvidenceMode, Side, SideScores  # noqa: E402
from verdict.quota import QuotaTracker  # noqa: E402
from verdict.session import AppSession  # noqa: E402
from verdict.storage import (  # noqa: E402
    AnalysisRepository, BoundedCollectionStore, SettingsStore, TemplateRepository
)
from verdict.storage.backends import MemoryBackend  # noqa: E402
from verdict.timeutils import to_ms  # noqa: E402
from verdict.transfer import TransferService  # noqa: E402

HOUR_MS = 60 * 60 * 1000

# Wednesday, mid-week, so "this week" started two days earlier
WEDNESDAY_NOON = to_ms(pytz.utc.localize(datetime(2024, 6, 12, 12, 0)))


class FakeClock:
    def __init__(self, now: int = WEDNESDAY_NOON) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, hours: float = 0, ms: int = 0) -> None:
        self.now += int(hours * HOUR_MS) + ms


class FixedScoringStrategy(ScoringStrategy):
    """Returns preset scores per side id; unknown sides get a flat 5."""

    def __init__(self, scores: Optional[Dict[str, SideScores]] = None) -> None:
        self.scores = scores or {}
        self.calls: List[str] = []

    def score(self, side: Side, evidence_mode: EvidenceMode) -> SideScores:
        self.calls.append(side.id)
        return self.scores.get(side.id, SideScores(5, 5, 5, 5, 5))


class ExplodingScoringStrategy(ScoringStrategy):
    def score(self, side: Side, evidence_mode: EvidenceMode) -> SideScores:
        raise RuntimeError("scorer unavailable")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend) -> BoundedCollectionStore:
    return BoundedCollectionStore(backend)


@pytest.fixture
def quota(clock) -> QuotaTracker:
    return QuotaTracker(clock=clock)


@pytest.fixture
def analyses(store, clock) -> AnalysisRepository:
    return AnalysisRepository(store, clock=clock)


@pytest.fixture
def templates(store, clock) -> TemplateRepository:
    return TemplateRepository(store, clock=clock)


@pytest.fixture
def settings_store(store, quota, clock) -> SettingsStore:
    return SettingsStore(store, quota, clock=clock)


@pytest.fixture
def drafts(store, clock) -> DraftManager:
    return DraftManager(store, clock=clock)


@pytest.fixture
def transfer(analyses, clock) -> TransferService:
    return TransferService(analyses, app_version="1.0.0", clock=clock)


@pytest.fixture
def insights(store, analyses, quota) -> InsightsService:
    return InsightsService(store, analyses, quota)


@pytest.fixture
def fixed_scoring() -> FixedScoringStrategy:
    return FixedScoringStrategy()


@pytest.fixture
def engine(fixed_scoring, clock) -> VerdictEngine:
    return VerdictEngine(scoring=fixed_scoring, clock=clock)


@pytest.fixture
def session_factory(settings_store, analyses, templates, drafts, quota, transfer, insights, clock):
    def _factory(engine: VerdictEngine) -> AppSession:
        return AppSession(
            settings_store=settings_store,
            analyses=analyses,
            templates=templates,
            drafts=drafts,
            quota=quota,
            engine=engine,
            transfer=transfer,
            insights=insights,
            clock=clock
        )

    return _factory


@pytest.fixture
def record_factory():
    """Current-version analysis records as they are stored."""
    def _factory(
        record_id: str,
        created_at: int,
        tags: Optional[List[str]] = None,
        style: str = "neutral",
        labels: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        labels = labels or ["Alice", "Bob"]
        sides = [
            {"id": f"side_{index + 1}", "label": label, "content": f"{label} has a point here."}
            for index, label in enumerate(labels)
        ]
        return {
            "version": 3,
            "id": record_id,
            "createdAt": created_at,
            "input": {"sides": sides, "commentatorStyle": style, "evidenceMode": "light"},
            "sideAnalyses": [
                {
                    "sideId": side["id"],
                    "label": side["label"],
                    "summary": f"{side['label']} argues a point.",
                    "claims": [side["content"]],
                    "evidenceProvided": ["Limited supporting details"],
                    "emotionalStatements": [],
                    "logicalStatements": [],
                    "scores": {
                        "clarity": 6.0,
                        "evidenceQuality": 5.5,
                        "logicalConsistency": 6.0,
                        "emotionalEscalation": 3.0,
                        "fairness": 6.0,
                    },
                }
                for side in sides
            ],
            "verdictHeadline": f"Verdict {record_id}",
            "verdictExplanation": "A close call.",
            "winAnalysis": {
                "winnerId": None,
                "winnerLabel": None,
                "confidence": 50,
                "reasoning": "Both sides present roughly equivalent arguments with different strengths.",
            },
            "outcomeChangers": [],
            "patternsDetected": [],
            "tags": tags if tags is not None else [style],
            "takeaway": None,
        }

    return _factory


@pytest.fixture
def legacy_record_factory():
    """Unversioned v1 records: raw numeric ids and no takeaway field."""
    def _factory(raw_id: str = "1700000000000", created_at: int = 1700000000000,
                 with_takeaway: bool = False) -> Dict[str, Any]:
        record = {
            "id": raw_id,
            "createdAt": created_at,
            "input": {
                "sides": [
                    {"id": "1", "label": "Alice", "content": "The dishes are your turn!"},
                    {"id": "2", "label": "Bob", "content": "I cooked dinner, so you wash up."},
                ],
                "commentatorStyle": "coach",
                "evidenceMode": "light",
            },
            "sideAnalyses": [
                {"sideId": "1", "label": "Alice", "summary": "", "claims": [], "evidenceProvided": [],
                 "emotionalStatements": [], "logicalStatements": [],
                 "scores": {"clarity": 6, "evidenceQuality": 4, "logicalConsistency": 6,
                            "emotionalEscalation": 7, "fairness": 5}},
                {"sideId": "2", "label": "Bob", "summary": "", "claims": [], "evidenceProvided": [],
                 "emotionalStatements": [], "logicalStatements": [],
                 "scores": {"clarity": 7, "evidenceQuality": 6, "logicalConsistency": 7,
                            "emotionalEscalation": 3, "fairness": 7}},
            ],
            "verdictHeadline": "Here's what I see: Bob presents a stronger case overall.",
            "verdictExplanation": "Based on analysis...",
            "winAnalysis": {"winnerId": "2", "winnerLabel": "Bob", "confidence": 70, "reasoning": "..."},
            "outcomeChangers": [],
            "patternsDetected": [
                {"name": "Emotional Escalation", "description": "...", "occurrences": [{"sideId": "1"}]}
            ],
            "tags": ["emotional", "coach"],
        }
        if with_takeaway:
            record["takeaway"] = "Take turns"
        return record

    return _factory
