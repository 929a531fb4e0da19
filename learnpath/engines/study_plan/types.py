"""
Value types for the curriculum engine.

Content items mirror what the content repository returns; Step, Phase and
StudyPlan are the immutable snapshot handed to callers; ProgressRecord is the
consolidated per-user state written by the reconciler.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from learnpath.kernel.models.content import ChallengeDifficulty
from learnpath.kernel.models.progress import CompletionStatus


class StepType(str, Enum):
    """Kinds of content a step can point at."""
    TUTORIAL = "tutorial"
    CHALLENGE = "challenge"
    QUIZ = "quiz"
    PROJECT = "project"


class DifficultyTier(str, Enum):
    """Three-level difficulty shown to learners."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Content items
# ---------------------------------------------------------------------------

class Tutorial(_Frozen):
    """Published tutorial."""

    slug: str
    title: str
    description: str = ""
    difficulty: int = Field(default=1, ge=1, le=5)
    order: int = 0
    category_slug: str
    quiz_slug: Optional[str] = None
    is_premium: bool = False
    required_plan: str = "FREE"


class Challenge(_Frozen):
    """Published coding challenge (no category)."""

    slug: str
    title: str
    description: str = ""
    difficulty: ChallengeDifficulty = ChallengeDifficulty.EASY
    is_premium: bool = False
    required_plan: str = "FREE"


class Project(_Frozen):
    """Published portfolio project."""

    slug: str
    title: str
    description: str = ""
    category: str = ""
    difficulty: int = Field(default=1, ge=1, le=5)
    order: int = 0
    estimated_hours: Optional[float] = None
    is_premium: bool = False
    required_plan: str = "FREE"


class Quiz(_Frozen):
    """Published quiz belonging to a tutorial."""

    slug: str
    title: str
    tutorial_slug: str
    is_premium: bool = False
    required_plan: str = "FREE"


class ContentBundle(_Frozen):
    """Everything the aggregator fetched, deduplicated and quiz-linked."""

    tutorials: Tuple[Tutorial, ...] = ()
    challenges: Tuple[Challenge, ...] = ()
    projects: Tuple[Project, ...] = ()
    quizzes: Tuple[Quiz, ...] = ()
    # tutorial slug -> quiz
    quiz_by_tutorial: Dict[str, Quiz] = Field(default_factory=dict)

    def quiz_for(self, tutorial: Tutorial) -> Optional[Quiz]:
        return self.quiz_by_tutorial.get(tutorial.slug)


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------

def make_step_id(step_type: StepType, resource_slug: str) -> str:
    """Stable step id, the join key between plan and progress."""
    return f"{step_type.value}-{resource_slug}"


class Step(_Frozen):
    """One unit of content placed in a phase."""

    id: str
    title: str
    description: str = ""
    type: StepType
    resource_slug: str
    estimated_hours: float = Field(gt=0)
    difficulty: DifficultyTier
    category: Optional[str] = None
    prerequisites: Tuple[str, ...] = ()
    skills: FrozenSet[str] = frozenset()
    order: int = Field(ge=1)
    is_premium: bool = False
    required_plan: str = "FREE"
    parent_step_id: Optional[str] = None  # quiz steps: the owning tutorial step


class Phase(_Frozen):
    """A fixed-order bucket of steps plus its independent projects."""

    id: str
    title: str
    description: str = ""
    color_token: str = ""
    icon_token: str = ""
    estimated_weeks: int = 0
    steps: Tuple[Step, ...] = ()
    projects: Tuple[Step, ...] = ()

    @property
    def all_steps(self) -> Tuple[Step, ...]:
        """Steps followed by projects, the order progress is scanned in."""
        return self.steps + self.projects

    @property
    def is_empty(self) -> bool:
        return not self.steps and not self.projects


class StudyPlan(_Frozen):
    """Immutable snapshot of the assembled curriculum."""

    id: str
    title: str
    description: str = ""
    total_hours: float = 0.0
    total_weeks: int = 0
    phases: Tuple[Phase, ...] = ()

    def iter_steps(self):
        """Yield (phase, step) pairs in scan order."""
        for phase in self.phases:
            for step in phase.all_steps:
                yield phase, step

    @property
    def step_ids(self) -> FrozenSet[str]:
        return frozenset(step.id for _, step in self.iter_steps())

    @property
    def total_step_count(self) -> int:
        return sum(len(p.steps) + len(p.projects) for p in self.phases)

    def get_step(self, step_id: str) -> Optional[Step]:
        for _, step in self.iter_steps():
            if step.id == step_id:
                return step
        return None


class PhaseSpec(_Frozen):
    """Static definition of a phase: presentation plus matching inputs."""

    id: str
    title: str
    description: str = ""
    color_token: str = ""
    icon_token: str = ""
    estimated_weeks: int = 0
    category_slug: str
    keywords: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

class TutorialProgressView(_Frozen):
    tutorial_slug: str
    status: CompletionStatus = CompletionStatus.NOT_STARTED
    quiz_passed: bool = False


class ChallengeProgressView(_Frozen):
    challenge_slug: str
    status: CompletionStatus = CompletionStatus.NOT_STARTED


class ProjectProgressView(_Frozen):
    project_slug: str
    status: CompletionStatus = CompletionStatus.NOT_STARTED


class ProgressRecord(_Frozen):
    """Consolidated progress of one user through one study plan."""

    user_id: str
    study_plan_id: str
    current_phase_id: Optional[str] = None
    current_step_id: Optional[str] = None
    completed_steps: FrozenSet[str] = frozenset()
    completed_phases: FrozenSet[str] = frozenset()
    total_progress_percentage: int = Field(default=0, ge=0, le=100)
    hours_spent: float = 0.0
    started_at: datetime
    last_activity_at: datetime
    estimated_completion_date: datetime

    @property
    def is_complete(self) -> bool:
        """Terminal state: every step in the plan is completed."""
        return self.total_progress_percentage == 100


__all__ = [
    "Challenge",
    "ChallengeProgressView",
    "ContentBundle",
    "DifficultyTier",
    "Phase",
    "PhaseSpec",
    "ProgressRecord",
    "Project",
    "ProjectProgressView",
    "Quiz",
    "Step",
    "StepType",
    "StudyPlan",
    "Tutorial",
    "TutorialProgressView",
    "make_step_id",
]
