"""Unit tests for study plan assembly over the default phase table."""

import math

import pytest

from learnpath.engines.study_plan.aggregator import ContentAggregator
from learnpath.engines.study_plan.assembler import StudyPlanAssembler
from learnpath.engines.study_plan.phase_builder import PhaseBuilder
from learnpath.engines.study_plan.phase_definitions import WEB_DEVELOPMENT_PHASES
from learnpath.engines.study_plan.types import ContentBundle, StepType
from tests.fakes import (
    EmptySkillTagger,
    FakeContentRepository,
    make_challenge,
    make_project,
    make_quiz,
    make_tutorial,
)


def _assembler(**kw):
    return StudyPlanAssembler(
        PhaseBuilder(EmptySkillTagger()),
        WEB_DEVELOPMENT_PHASES,
        plan_id="web-dev",
        title="Web Development",
        **kw,
    )


@pytest.fixture
def content_repository():
    return FakeContentRepository(
        tutorials=[
            make_tutorial("html-intro", "html", order=1),
            make_tutorial("css-selectors", "css", order=1, difficulty=2),
            make_tutorial("js-variables", "javascript", order=1, difficulty=3),
            make_tutorial("promises", "javascript-async", order=1, difficulty=4),
        ],
        challenges=[
            make_challenge("loops-and-dom", "Loops over DOM nodes"),
            make_challenge("binary-tree", "Invert a binary tree"),
        ],
        projects=[
            make_project("portfolio", "html", order=1),
            make_project("weather-app", "javascript-async", order=1, difficulty=3),
        ],
        quizzes=[make_quiz("js-variables-quiz", "js-variables")],
    )


@pytest.mark.asyncio
async def test_phases_follow_table_order(content_repository):
    plan = _assembler().assemble(await ContentAggregator(content_repository).fetch_all())
    assert [p.id for p in plan.phases] == [spec.id for spec in WEB_DEVELOPMENT_PHASES]


@pytest.mark.asyncio
async def test_totals_are_consistent(content_repository):
    plan = _assembler().assemble(await ContentAggregator(content_repository).fetch_all())

    all_steps = [s for p in plan.phases for s in p.all_steps]
    assert plan.total_step_count == len(all_steps) == 9
    assert plan.total_hours == sum(s.estimated_hours for s in all_steps)
    assert plan.total_weeks == math.ceil(plan.total_hours / 8)


@pytest.mark.asyncio
async def test_step_ids_unique_across_phases(content_repository):
    plan = _assembler().assemble(await ContentAggregator(content_repository).fetch_all())

    ids = [s.id for _, s in plan.iter_steps()]
    assert len(ids) == len(set(ids))
    # matches both the fundamentals ("loops") and DOM ("dom") phases
    by_phase = {p.id: [s.id for s in p.all_steps] for p in plan.phases}
    assert "challenge-loops-and-dom" in by_phase["javascript-fundamentals"]
    assert "challenge-loops-and-dom" not in by_phase["dom-interactivity"]


@pytest.mark.asyncio
async def test_phase_contents(content_repository):
    plan = _assembler().assemble(await ContentAggregator(content_repository).fetch_all())
    phases = {p.id: p for p in plan.phases}

    js = phases["javascript-fundamentals"]
    assert [s.type for s in js.steps] == [StepType.TUTORIAL, StepType.QUIZ, StepType.CHALLENGE]
    assert js.steps[2].prerequisites == ("quiz-js-variables-quiz",)

    async_phase = phases["async-programming"]
    assert [p.id for p in async_phase.projects] == ["project-weather-app"]
    assert async_phase.projects[0].estimated_hours == 24.0

    assert [s.id for s in phases["data-structures"].steps] == ["challenge-binary-tree"]
    assert phases["oop-concepts"].is_empty


def test_empty_content_gives_empty_phases():
    plan = _assembler().assemble(ContentBundle())
    assert len(plan.phases) == len(WEB_DEVELOPMENT_PHASES)
    assert all(p.is_empty for p in plan.phases)
    assert plan.total_step_count == 0
    assert plan.total_hours == 0
    assert plan.total_weeks == 0


@pytest.mark.asyncio
async def test_hours_per_week_drives_total_weeks(content_repository):
    content = await ContentAggregator(content_repository).fetch_all()
    plan = _assembler(hours_per_week=4).assemble(content)
    assert plan.total_weeks == math.ceil(plan.total_hours / 4)
    assert plan.id == "web-dev"
    assert plan.title == "Web Development"


def _phase_of(plan, step_id):
    return [p.id for p in plan.phases if step_id in {s.id for s in p.all_steps}]


def test_tutorial_stays_in_its_category_phase():
    # "random" contains the DOM phase keyword "dom"
    content = ContentBundle(tutorials=(
        make_tutorial("random-closures", "javascript-advanced", title="Random numbers with closures"),
    ))

    plan = _assembler().assemble(content)

    assert _phase_of(plan, "tutorial-random-closures") == ["advanced-concepts"]
    assert plan.phases[3].id == "dom-interactivity"
    assert plan.phases[3].is_empty


def test_project_stays_in_its_category_phase():
    # "arrays" is a fundamentals keyword, and that phase has no projects of its own
    content = ContentBundle(projects=(
        make_project("sort-visualizer", "data-structures", title="Sorting visualizer for arrays"),
    ))

    plan = _assembler().assemble(content)

    assert _phase_of(plan, "project-sort-visualizer") == ["data-structures"]
    fundamentals = next(p for p in plan.phases if p.id == "javascript-fundamentals")
    assert fundamentals.projects == ()


def test_uncategorised_project_still_found_by_keyword():
    content = ContentBundle(projects=(
        make_project("todo", "", title="Todo list with arrays"),
        make_project("sort-visualizer", "data-structures", title="Sorting visualizer for arrays"),
    ))

    plan = _assembler().assemble(content)

    assert _phase_of(plan, "project-todo") == ["javascript-fundamentals"]
    assert _phase_of(plan, "project-sort-visualizer") == ["data-structures"]
