"""Unit tests for progress reconciliation."""

import math
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from learnpath.engines.study_plan.aggregator import link_quizzes
from learnpath.engines.study_plan.errors import ReconciliationFailure
from learnpath.engines.study_plan.phase_builder import PhaseBuilder
from learnpath.engines.study_plan.reconciler import ProgressReconciler
from learnpath.engines.study_plan.types import ContentBundle, PhaseSpec, StudyPlan
from learnpath.kernel.models.progress import CompletionStatus
from tests.fakes import (
    FIXED_NOW,
    EmptySkillTagger,
    fixed_clock,
    make_challenge,
    make_project,
    make_quiz,
    make_record,
    make_tutorial,
)

USER = "user-1"


def _build_plan(tutorials=(), challenges=(), projects=(), quizzes=()) -> StudyPlan:
    builder = PhaseBuilder(EmptySkillTagger())
    content = ContentBundle(
        tutorials=tuple(tutorials),
        challenges=tuple(challenges),
        projects=tuple(projects),
        quizzes=tuple(quizzes),
        quiz_by_tutorial=link_quizzes(list(tutorials), list(quizzes)),
    )
    spec = PhaseSpec(id="js", title="JS", category_slug="javascript", keywords=("loops",))
    phase = builder.build(spec, content)
    total_hours = sum(s.estimated_hours for s in phase.all_steps)
    return StudyPlan(
        id="plan",
        title="Plan",
        phases=(phase,),
        total_hours=total_hours,
        total_weeks=math.ceil(total_hours / 8),
    )


@pytest.fixture
def plan():
    return _build_plan(
        tutorials=[
            make_tutorial("js-intro", "javascript", order=1),
            make_tutorial("js-closures", "javascript", order=2),
        ],
        challenges=[make_challenge("loops", "Loops")],
        projects=[make_project("todo", "javascript")],
        quizzes=[make_quiz("js-intro-quiz", "js-intro")],
    )


@pytest.fixture
def reconciler(progress_repository):
    return ProgressReconciler(progress_repository, clock=fixed_clock)


class TestCompletion:
    @pytest.mark.asyncio
    async def test_quiz_passed_completes_in_progress_tutorial(self, reconciler, progress_repository, plan):
        progress_repository.complete_tutorial(
            USER, "js-intro", status=CompletionStatus.IN_PROGRESS, quiz_passed=True
        )

        record = await reconciler.sync(USER, plan)

        assert record.completed_steps == frozenset({"tutorial-js-intro", "quiz-js-intro-quiz"})
        assert record.current_step_id == "tutorial-js-closures"
        assert record.current_phase_id == "js"

    @pytest.mark.asyncio
    async def test_completed_tutorial_without_quiz_pass(self, reconciler, progress_repository, plan):
        progress_repository.complete_tutorial(USER, "js-intro")

        record = await reconciler.sync(USER, plan)

        assert record.completed_steps == frozenset({"tutorial-js-intro"})
        assert record.current_step_id == "quiz-js-intro-quiz"

    @pytest.mark.asyncio
    async def test_not_started_tutorial_is_incomplete(self, reconciler, progress_repository, plan):
        progress_repository.complete_tutorial(USER, "js-intro", status=CompletionStatus.NOT_STARTED)
        record = await reconciler.sync(USER, plan)
        assert record.completed_steps == frozenset()
        assert record.current_step_id == "tutorial-js-intro"
        assert record.total_progress_percentage == 0

    @pytest.mark.asyncio
    async def test_challenges_and_projects_need_completed_status(self, reconciler, progress_repository, plan):
        progress_repository.complete_challenge(USER, "loops")
        progress_repository.complete_project(USER, "todo")
        progress_repository.complete_challenge(USER, "not-in-plan")

        record = await reconciler.sync(USER, plan)

        assert record.completed_steps == frozenset({"challenge-loops", "project-todo"})

    @pytest.mark.asyncio
    async def test_everything_done_is_terminal(self, reconciler, progress_repository, plan):
        progress_repository.complete_tutorial(USER, "js-intro", quiz_passed=True)
        progress_repository.complete_tutorial(USER, "js-closures")
        progress_repository.complete_challenge(USER, "loops")
        progress_repository.complete_project(USER, "todo")

        record = await reconciler.sync(USER, plan)

        assert record.total_progress_percentage == 100
        assert record.is_complete
        assert record.completed_phases == frozenset({"js"})
        assert record.current_step_id == "project-todo"
        assert record.current_phase_id == "js"

    @pytest.mark.asyncio
    async def test_record_fields(self, reconciler, progress_repository, plan):
        progress_repository.complete_tutorial(USER, "js-intro", quiz_passed=True)

        record = await reconciler.sync(USER, plan)

        # 2 of 5 steps
        assert record.total_progress_percentage == 40
        assert not record.is_complete
        assert record.study_plan_id == "plan"
        assert record.hours_spent == 0.0
        assert record.started_at == FIXED_NOW
        assert record.last_activity_at == FIXED_NOW
        # 16.5h plan at 8h/week
        assert record.estimated_completion_date == FIXED_NOW + timedelta(weeks=3)

    @pytest.mark.asyncio
    async def test_completion_date_ignores_progress_made(self, reconciler, progress_repository, plan):
        for slug in ("js-intro", "js-closures"):
            progress_repository.complete_tutorial(USER, slug, quiz_passed=True)
        progress_repository.complete_challenge(USER, "loops")
        progress_repository.complete_project(USER, "todo")

        record = await reconciler.sync(USER, plan)

        assert record.estimated_completion_date == FIXED_NOW + timedelta(weeks=3)

    @pytest.mark.asyncio
    async def test_completion_date_for_empty_plan_is_one_week_out(self, reconciler):
        record = await reconciler.sync(USER, StudyPlan(id="plan", title="Empty"))
        assert record.estimated_completion_date == FIXED_NOW + timedelta(weeks=1)


class TestSyncSemantics:
    @pytest.mark.asyncio
    async def test_sync_is_idempotent(self, reconciler, progress_repository, plan):
        progress_repository.complete_tutorial(USER, "js-intro", quiz_passed=True)

        first = await reconciler.sync(USER, plan)
        second = await reconciler.sync(USER, plan)

        assert first == second
        assert len(progress_repository.records) == 1

    @pytest.mark.asyncio
    async def test_existing_record_keeps_start_and_hours(self, progress_repository, plan):
        progress_repository.records[(USER, "plan")] = make_record(
            USER,
            "plan",
            hours_spent=12.5,
            started_at=FIXED_NOW - timedelta(days=30),
        )
        reconciler = ProgressReconciler(progress_repository, clock=fixed_clock)

        record = await reconciler.sync(USER, plan)

        assert record.hours_spent == 12.5
        assert record.started_at == FIXED_NOW - timedelta(days=30)
        assert record.last_activity_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_previous_completions_are_kept(self, reconciler, progress_repository, plan):
        progress_repository.records[(USER, "plan")] = make_record(
            USER, "plan", completed_steps=frozenset({"challenge-loops"})
        )

        record = await reconciler.sync(USER, plan)

        assert "challenge-loops" in record.completed_steps

    @pytest.mark.asyncio
    async def test_stale_step_ids_are_dropped(self, reconciler, progress_repository, plan):
        progress_repository.records[(USER, "plan")] = make_record(
            USER, "plan", completed_steps=frozenset({"tutorial-removed", "challenge-loops"})
        )

        record = await reconciler.sync(USER, plan)

        assert record.completed_steps == frozenset({"challenge-loops"})

    @pytest.mark.asyncio
    async def test_sync_against_empty_plan(self, reconciler):
        plan = StudyPlan(id="plan", title="Empty")
        record = await reconciler.sync(USER, plan)
        assert record.current_step_id is None
        assert record.current_phase_id is None
        assert record.total_progress_percentage == 0


class TestFailures:
    @pytest.mark.asyncio
    async def test_read_failure_writes_nothing(self, reconciler, progress_repository, plan):
        error = TimeoutError("read timed out")
        progress_repository.challenge_progress = AsyncMock(side_effect=error)

        with pytest.raises(ReconciliationFailure) as exc_info:
            await reconciler.sync(USER, plan)

        assert exc_info.value.source == "read"
        assert exc_info.value.__cause__ is error
        assert progress_repository.upserts == 0
        assert progress_repository.records == {}

    @pytest.mark.asyncio
    async def test_upsert_failure(self, reconciler, progress_repository, plan):
        progress_repository.upsert_progress = AsyncMock(side_effect=RuntimeError("constraint"))

        with pytest.raises(ReconciliationFailure) as exc_info:
            await reconciler.sync(USER, plan)

        assert exc_info.value.source == "upsert"
        assert exc_info.value.user_message == "Progress not saved, please retry"
