"""
Pydantic schemas for the study plan API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from learnpath.engines.study_plan.progress_utils import (
    current_step_info,
    phase_progress,
    skills_learned,
)
from learnpath.engines.study_plan.types import Phase, ProgressRecord, Step, StudyPlan


class StepSchema(BaseModel):
    """Step as rendered by the curriculum UI."""

    id: str
    title: str
    description: str
    type: str
    resource_slug: str
    estimated_hours: float
    difficulty: str
    category: Optional[str] = None
    prerequisites: List[str] = []
    skills: List[str] = []
    order: int
    is_premium: bool = False
    required_plan: str = "FREE"
    parent_step_id: Optional[str] = None

    @classmethod
    def from_step(cls, step: Step) -> "StepSchema":
        return cls(
            id=step.id,
            title=step.title,
            description=step.description,
            type=step.type.value,
            resource_slug=step.resource_slug,
            estimated_hours=step.estimated_hours,
            difficulty=step.difficulty.value,
            category=step.category,
            prerequisites=list(step.prerequisites),
            skills=sorted(step.skills),
            order=step.order,
            is_premium=step.is_premium,
            required_plan=step.required_plan,
            parent_step_id=step.parent_step_id,
        )


class PhaseSchema(BaseModel):
    id: str
    title: str
    description: str
    color: str
    icon: str
    estimated_weeks: int
    steps: List[StepSchema]
    projects: List[StepSchema]

    @classmethod
    def from_phase(cls, phase: Phase) -> "PhaseSchema":
        return cls(
            id=phase.id,
            title=phase.title,
            description=phase.description,
            color=phase.color_token,
            icon=phase.icon_token,
            estimated_weeks=phase.estimated_weeks,
            steps=[StepSchema.from_step(s) for s in phase.steps],
            projects=[StepSchema.from_step(s) for s in phase.projects],
        )


class StudyPlanResponse(BaseModel):
    """Assembled study plan."""

    id: str
    title: str
    description: str
    total_hours: float
    total_weeks: int
    total_steps: int
    phases: List[PhaseSchema]

    @classmethod
    def from_plan(cls, plan: StudyPlan) -> "StudyPlanResponse":
        return cls(
            id=plan.id,
            title=plan.title,
            description=plan.description,
            total_hours=plan.total_hours,
            total_weeks=plan.total_weeks,
            total_steps=plan.total_step_count,
            phases=[PhaseSchema.from_phase(p) for p in plan.phases],
        )


class PhaseProgressSchema(BaseModel):
    phase_id: str
    progress: float
    completed: bool


class ProgressResponse(BaseModel):
    """Consolidated progress plus derived display fields."""

    user_id: str
    study_plan_id: str
    current_phase_id: Optional[str] = None
    current_step_id: Optional[str] = None
    next_step_id: Optional[str] = None
    completed_steps: List[str]
    completed_phases: List[str]
    total_progress_percentage: int
    is_complete: bool
    hours_spent: float
    started_at: datetime
    last_activity_at: datetime
    estimated_completion_date: datetime
    skills_learned: List[str] = []
    phases: List[PhaseProgressSchema] = []

    @classmethod
    def from_record(
        cls, record: ProgressRecord, plan: Optional[StudyPlan] = None
    ) -> "ProgressResponse":
        next_step_id = None
        skills: List[str] = []
        phases: List[PhaseProgressSchema] = []
        if plan is not None:
            info = current_step_info(plan, record.completed_steps, record.current_step_id)
            if info.next_step is not None:
                next_step_id = info.next_step.id
            skills = skills_learned(plan, record.completed_steps)
            phases = [
                PhaseProgressSchema(
                    phase_id=phase.id,
                    progress=round(phase_progress(phase, record.completed_steps), 1),
                    completed=phase.id in record.completed_phases,
                )
                for phase in plan.phases
            ]
        return cls(
            user_id=record.user_id,
            study_plan_id=record.study_plan_id,
            current_phase_id=record.current_phase_id,
            current_step_id=record.current_step_id,
            next_step_id=next_step_id,
            completed_steps=sorted(record.completed_steps),
            completed_phases=sorted(record.completed_phases),
            total_progress_percentage=record.total_progress_percentage,
            is_complete=record.is_complete,
            hours_spent=record.hours_spent,
            started_at=record.started_at,
            last_activity_at=record.last_activity_at,
            estimated_completion_date=record.estimated_completion_date,
            skills_learned=skills,
            phases=phases,
        )
