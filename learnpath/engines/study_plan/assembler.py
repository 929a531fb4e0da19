"""
Study Plan Assembler - Runs the phase builder over the phase table.
"""

import math
from typing import List, Sequence, Set

from learnpath.engines.study_plan.phase_builder import PhaseBuilder
from learnpath.engines.study_plan.types import ContentBundle, Phase, PhaseSpec, StudyPlan
from learnpath.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_HOURS_PER_WEEK = 8


class StudyPlanAssembler:
    """
    Assembles a StudyPlan from a fixed, ordered list of PhaseSpecs.

    Phases are built strictly in table order. Step ids placed by an earlier
    phase are handed to later phases as claimed, so every id is unique in the
    plan and reconciliation can treat completed ids as a set. A project whose
    category belongs to some phase is only placed by that phase.
    """

    def __init__(
        self,
        phase_builder: PhaseBuilder,
        phase_specs: Sequence[PhaseSpec],
        *,
        plan_id: str,
        title: str,
        description: str = "",
        hours_per_week: int = DEFAULT_HOURS_PER_WEEK,
    ):
        self.phase_builder = phase_builder
        self.phase_specs = tuple(phase_specs)
        self.plan_id = plan_id
        self.title = title
        self.description = description
        self.hours_per_week = hours_per_week

    def assemble(self, content: ContentBundle) -> StudyPlan:
        phases: List[Phase] = []
        claimed: Set[str] = set()
        reserved = frozenset(spec.category_slug for spec in self.phase_specs)
        for spec in self.phase_specs:
            phase = self.phase_builder.build(spec, content, frozenset(claimed), reserved)
            claimed.update(step.id for step in phase.all_steps)
            phases.append(phase)

        total_hours = sum(step.estimated_hours for phase in phases for step in phase.all_steps)
        total_weeks = math.ceil(total_hours / self.hours_per_week)

        plan = StudyPlan(
            id=self.plan_id,
            title=self.title,
            description=self.description,
            total_hours=total_hours,
            total_weeks=total_weeks,
            phases=tuple(phases),
        )
        logger.info(
            "Study plan assembled",
            extra={
                "study_plan_id": plan.id,
                "phases": len(plan.phases),
                "steps": plan.total_step_count,
                "total_hours": total_hours,
            },
        )
        return plan
