"""
Progress Reconciler - Merges per-content completion signals into one
consolidated ProgressRecord and persists it.

Completion rules:
- tutorial step: status COMPLETED or quiz passed (either signal suffices)
- quiz step: the owning tutorial's quiz-passed flag
- challenge / project step: own status COMPLETED
- ids completed by an earlier sync stay completed while the step exists

Only ids present in the current plan are ever recorded.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, FrozenSet, Optional, Sequence

from learnpath.engines.study_plan.errors import ReconciliationFailure
from learnpath.engines.study_plan.progress_utils import (
    completed_phase_ids,
    completion_percentage,
    find_current_pointer,
)
from learnpath.engines.study_plan.repositories import ProgressRepository
from learnpath.engines.study_plan.types import (
    ChallengeProgressView,
    ProgressRecord,
    ProjectProgressView,
    StepType,
    StudyPlan,
    TutorialProgressView,
)
from learnpath.kernel.models.progress import CompletionStatus
from learnpath.logging_config import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressReconciler:
    """Computes and upserts the consolidated progress of a user."""

    def __init__(
        self,
        progress_repository: ProgressRepository,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.progress_repository = progress_repository
        self.clock = clock

    @staticmethod
    def completed_steps(
        plan: StudyPlan,
        tutorials: Sequence[TutorialProgressView],
        challenges: Sequence[ChallengeProgressView],
        projects: Sequence[ProjectProgressView],
        previous: Optional[ProgressRecord] = None,
    ) -> FrozenSet[str]:
        """Evaluate every plan step against the progress signals."""
        tutorial_views: Dict[str, TutorialProgressView] = {v.tutorial_slug: v for v in tutorials}
        challenge_status = {v.challenge_slug: v.status for v in challenges}
        project_status = {v.project_slug: v.status for v in projects}

        quiz_passed_tutorials = {
            step.id
            for _, step in plan.iter_steps()
            if step.type == StepType.TUTORIAL
            and step.resource_slug in tutorial_views
            and tutorial_views[step.resource_slug].quiz_passed
        }

        completed = set()
        for _, step in plan.iter_steps():
            if step.type == StepType.TUTORIAL:
                view = tutorial_views.get(step.resource_slug)
                done = view is not None and (
                    view.status == CompletionStatus.COMPLETED or view.quiz_passed
                )
            elif step.type == StepType.QUIZ:
                done = step.parent_step_id in quiz_passed_tutorials
            elif step.type == StepType.CHALLENGE:
                done = challenge_status.get(step.resource_slug) == CompletionStatus.COMPLETED
            else:
                done = project_status.get(step.resource_slug) == CompletionStatus.COMPLETED
            if done:
                completed.add(step.id)

        if previous is not None:
            plan_ids = plan.step_ids
            carried = previous.completed_steps & plan_ids
            stale = previous.completed_steps - plan_ids
            if stale:
                logger.debug(
                    "Dropping progress for steps no longer in plan",
                    extra={"study_plan_id": plan.id, "stale_steps": sorted(stale)},
                )
            completed |= carried

        return frozenset(completed)

    async def sync(self, user_id: str, plan: StudyPlan) -> ProgressRecord:
        """
        Reconcile and persist the progress of ``user_id`` through ``plan``.

        Raises:
            ReconciliationFailure: if a progress read or the upsert fails.
                The stored record is left untouched.
        """
        repo = self.progress_repository
        try:
            tutorials, challenges, projects, previous = await asyncio.gather(
                repo.tutorial_progress(user_id),
                repo.challenge_progress(user_id),
                repo.project_progress(user_id),
                repo.get_progress(user_id, plan.id),
            )
        except Exception as exc:
            logger.exception(
                "Progress read failed",
                extra={"user_id": user_id, "study_plan_id": plan.id},
            )
            raise ReconciliationFailure(
                f"Failed to read progress for user {user_id}: {exc}",
                source="read",
            ) from exc

        completed = self.completed_steps(plan, tutorials, challenges, projects, previous)
        current_phase, current_step = find_current_pointer(plan, completed)
        now = self.clock()

        record = ProgressRecord(
            user_id=user_id,
            study_plan_id=plan.id,
            current_phase_id=current_phase.id if current_phase else None,
            current_step_id=current_step.id if current_step else None,
            completed_steps=completed,
            completed_phases=completed_phase_ids(plan, completed),
            total_progress_percentage=completion_percentage(plan, completed),
            hours_spent=0.0,
            started_at=now,
            last_activity_at=now,
            # Written on insert only; the plan length is the initial estimate
            estimated_completion_date=now + timedelta(weeks=max(plan.total_weeks, 1)),
        )

        try:
            stored = await repo.upsert_progress(record)
        except Exception as exc:
            logger.exception(
                "Progress upsert failed",
                extra={"user_id": user_id, "study_plan_id": plan.id},
            )
            raise ReconciliationFailure(
                f"Failed to save progress for user {user_id}: {exc}",
                source="upsert",
            ) from exc

        logger.info(
            "Progress synced",
            extra={
                "user_id": user_id,
                "study_plan_id": plan.id,
                "completed": len(stored.completed_steps),
                "percentage": stored.total_progress_percentage,
                "current_step_id": stored.current_step_id,
            },
        )
        return stored
