"""
Pure progress calculations over a StudyPlan and a set of completed step ids.

Shared by the reconciler and by callers that render progress, so the
pointer, percentage and phase completion are computed one way everywhere.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import AbstractSet, List, NamedTuple, Optional, Tuple

from learnpath.engines.study_plan.types import Phase, Step, StudyPlan


class CurrentStepInfo(NamedTuple):
    current_phase: Optional[Phase]
    current_step: Optional[Step]
    next_step: Optional[Step]


def prerequisites_met(step: Step, completed: AbstractSet[str]) -> bool:
    return all(prereq in completed for prereq in step.prerequisites)


def completion_percentage(plan: StudyPlan, completed: AbstractSet[str]) -> int:
    """
    round(100 * done / total), rounding halves up.

    100 is reserved for a fully completed plan: 199 of 200 steps reports 99.
    An empty plan reports 0.
    """
    total = plan.total_step_count
    if total == 0:
        return 0
    done = len(plan.step_ids & set(completed))
    percentage = (200 * done + total) // (2 * total)
    if percentage == 100 and done < total:
        return 99
    return percentage


def completed_phase_ids(plan: StudyPlan, completed: AbstractSet[str]) -> frozenset:
    """Phases with at least one step where every step and project is done."""
    return frozenset(
        phase.id
        for phase in plan.phases
        if not phase.is_empty and all(step.id in completed for step in phase.all_steps)
    )


def _last_step(plan: StudyPlan) -> Tuple[Optional[Phase], Optional[Step]]:
    for phase in reversed(plan.phases):
        if not phase.is_empty:
            return phase, phase.all_steps[-1]
    return None, None


def find_current_pointer(
    plan: StudyPlan, completed: AbstractSet[str]
) -> Tuple[Optional[Phase], Optional[Step]]:
    """
    First incomplete step (phases in order, steps then projects) whose
    prerequisites are all completed.

    When nothing is left the pointer stays on the last phase's last step.
    Returns (None, None) only for a plan without steps.
    """
    for phase, step in plan.iter_steps():
        if step.id not in completed and prerequisites_met(step, completed):
            return phase, step
    return _last_step(plan)


def find_next_available_step(
    plan: StudyPlan,
    completed: AbstractSet[str],
    after: Optional[Step] = None,
) -> Optional[Step]:
    """Next startable step, optionally searching only past ``after``."""
    steps = [step for _, step in plan.iter_steps()]
    start = 0
    if after is not None:
        for index, step in enumerate(steps):
            if step.id == after.id:
                start = index + 1
                break
    for step in steps[start:]:
        if step.id not in completed and prerequisites_met(step, completed):
            return step
    return None


def find_phase_for_step(plan: StudyPlan, step_id: str) -> Optional[Phase]:
    for phase, step in plan.iter_steps():
        if step.id == step_id:
            return phase
    return None


def current_step_info(
    plan: StudyPlan,
    completed: AbstractSet[str],
    current_step_id: Optional[str] = None,
) -> CurrentStepInfo:
    """
    Resolve the phase, step and following step for display.

    A stored ``current_step_id`` that still exists in the plan is trusted;
    otherwise the first startable step is used.
    """
    if current_step_id:
        current = plan.get_step(current_step_id)
        if current is not None:
            return CurrentStepInfo(
                current_phase=find_phase_for_step(plan, current.id),
                current_step=current,
                next_step=find_next_available_step(plan, completed, after=current),
            )

    next_step = find_next_available_step(plan, completed)
    if next_step is None:
        phase = plan.phases[0] if plan.phases else None
    else:
        phase = find_phase_for_step(plan, next_step.id)
    return CurrentStepInfo(current_phase=phase, current_step=next_step, next_step=next_step)


def phase_progress(phase: Phase, completed: AbstractSet[str]) -> float:
    """Percentage (0-100, unrounded) of the phase's steps and projects done."""
    steps = phase.all_steps
    if not steps:
        return 0.0
    done = sum(1 for step in steps if step.id in completed)
    return done / len(steps) * 100


def skills_learned(plan: StudyPlan, completed: AbstractSet[str]) -> List[str]:
    skills = set()
    for _, step in plan.iter_steps():
        if step.id in completed:
            skills.update(step.skills)
    return sorted(skills)


def remaining_hours(plan: StudyPlan, completed: AbstractSet[str]) -> float:
    return sum(step.estimated_hours for _, step in plan.iter_steps() if step.id not in completed)


def estimate_completion_date(
    plan: StudyPlan,
    completed: AbstractSet[str],
    hours_per_week: int = 10,
    now: Optional[datetime] = None,
) -> datetime:
    """Date the remaining hours run out at ``hours_per_week``, whole weeks."""
    now = now or datetime.now(timezone.utc)
    weeks = math.ceil(remaining_hours(plan, completed) / hours_per_week)
    return now + timedelta(weeks=weeks)
