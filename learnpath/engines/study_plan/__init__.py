"""
Study Plan Engine - Dynamic, database-driven curriculum.

Pipeline:
- Aggregate: fetch tutorials, challenges, projects and quizzes concurrently
- Assemble: walk the fixed phase table, matching content by category or keyword
- Reconcile: fold per-content completion into one progress record and upsert it

Phase order is fixed; content only decides what fills each phase.
"""

from learnpath.engines.study_plan.aggregator import ContentAggregator
from learnpath.engines.study_plan.assembler import StudyPlanAssembler
from learnpath.engines.study_plan.errors import (
    AggregationFailure,
    ReconciliationFailure,
    StudyPlanError,
)
from learnpath.engines.study_plan.phase_builder import PhaseBuilder, StepChain
from learnpath.engines.study_plan.phase_definitions import WEB_DEVELOPMENT_PHASES
from learnpath.engines.study_plan.reconciler import ProgressReconciler
from learnpath.engines.study_plan.service import StudyPlanService
from learnpath.engines.study_plan.skill_tagger import CatalogSkillTagger, SkillDefinition
from learnpath.engines.study_plan.types import (
    Phase,
    PhaseSpec,
    ProgressRecord,
    Step,
    StepType,
    StudyPlan,
)

__all__ = [
    "ContentAggregator",
    "StudyPlanAssembler",
    "AggregationFailure",
    "ReconciliationFailure",
    "StudyPlanError",
    "PhaseBuilder",
    "StepChain",
    "WEB_DEVELOPMENT_PHASES",
    "ProgressReconciler",
    "StudyPlanService",
    "CatalogSkillTagger",
    "SkillDefinition",
    "Phase",
    "PhaseSpec",
    "ProgressRecord",
    "Step",
    "StepType",
    "StudyPlan",
]
