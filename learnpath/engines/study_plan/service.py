"""
Study Plan Service - Entry points for building the curriculum and syncing progress.

GetStudyPlan is a pure function of the content store, so the assembled plan
is cached for a short TTL. SyncProgress always reconciles against a plan.
"""

import asyncio
import time
from typing import Callable, Optional, Sequence

from learnpath.config import Settings
from learnpath.engines.study_plan.aggregator import ContentAggregator
from learnpath.engines.study_plan.assembler import StudyPlanAssembler
from learnpath.engines.study_plan.phase_builder import PhaseBuilder
from learnpath.engines.study_plan.phase_definitions import WEB_DEVELOPMENT_PHASES
from learnpath.engines.study_plan.reconciler import ProgressReconciler
from learnpath.engines.study_plan.repositories import (
    ContentRepository,
    ProgressRepository,
    SkillTagger,
)
from learnpath.engines.study_plan.types import PhaseSpec, ProgressRecord, StudyPlan
from learnpath.logging_config import get_logger

logger = get_logger(__name__)


class StudyPlanService:
    """
    Facade over aggregation, assembly and reconciliation.

    Usage:
        service = StudyPlanService.from_settings(content_repo, progress_repo, tagger, settings)
        plan = await service.get_study_plan()
        record = await service.sync_progress("user-1", plan)
    """

    def __init__(
        self,
        content_repository: ContentRepository,
        progress_repository: ProgressRepository,
        skill_tagger: SkillTagger,
        *,
        plan_id: str,
        title: str,
        description: str = "",
        hours_per_week: int = 8,
        challenge_cap: int = 3,
        project_cap: int = 2,
        cache_ttl_seconds: float = 60.0,
        phase_specs: Sequence[PhaseSpec] = WEB_DEVELOPMENT_PHASES,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.progress_repository = progress_repository
        self.aggregator = ContentAggregator(content_repository)
        self.assembler = StudyPlanAssembler(
            PhaseBuilder(skill_tagger, challenge_cap=challenge_cap, project_cap=project_cap),
            phase_specs,
            plan_id=plan_id,
            title=title,
            description=description,
            hours_per_week=hours_per_week,
        )
        self.reconciler = ProgressReconciler(progress_repository)
        self.cache_ttl_seconds = cache_ttl_seconds
        self._monotonic = monotonic
        self._cached_plan: Optional[StudyPlan] = None
        self._cached_at = 0.0
        self._build_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        content_repository: ContentRepository,
        progress_repository: ProgressRepository,
        skill_tagger: SkillTagger,
        settings: Settings,
        **overrides,
    ) -> "StudyPlanService":
        params = dict(
            plan_id=settings.study_plan_id,
            title=settings.study_plan_title,
            description=settings.study_plan_description,
            hours_per_week=settings.hours_per_week,
            challenge_cap=settings.challenge_cap,
            project_cap=settings.project_cap,
            cache_ttl_seconds=settings.plan_cache_ttl_seconds,
        )
        params.update(overrides)
        return cls(content_repository, progress_repository, skill_tagger, **params)

    @property
    def plan_id(self) -> str:
        return self.assembler.plan_id

    def _cache_fresh(self) -> bool:
        if self._cached_plan is None or self.cache_ttl_seconds <= 0:
            return False
        return self._monotonic() - self._cached_at < self.cache_ttl_seconds

    def invalidate(self) -> None:
        """Drop the cached plan so the next call re-reads content."""
        self._cached_plan = None

    async def get_study_plan(self) -> StudyPlan:
        """
        Return the assembled study plan.

        Raises:
            AggregationFailure: if any content source fails.
        """
        if self._cache_fresh():
            return self._cached_plan  # type: ignore[return-value]

        async with self._build_lock:
            if self._cache_fresh():
                return self._cached_plan  # type: ignore[return-value]
            content = await self.aggregator.fetch_all()
            plan = self.assembler.assemble(content)
            self._cached_plan = plan
            self._cached_at = self._monotonic()
            return plan

    async def sync_progress(self, user_id: str, plan: Optional[StudyPlan] = None) -> ProgressRecord:
        """
        Reconcile and persist the user's progress.

        Raises:
            AggregationFailure: if ``plan`` is omitted and building it fails.
            ReconciliationFailure: if a progress read or the upsert fails.
        """
        if plan is None:
            plan = await self.get_study_plan()
        return await self.reconciler.sync(user_id, plan)

    async def get_progress(self, user_id: str) -> Optional[ProgressRecord]:
        """Stored record for the configured plan, or None before the first sync."""
        return await self.progress_repository.get_progress(user_id, self.plan_id)
