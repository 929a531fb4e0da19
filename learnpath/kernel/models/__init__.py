"""
Kernel Data Models

SQLAlchemy models for learning content, per-content progress and the
consolidated study plan progress record.
"""

from learnpath.kernel.models.base import Base, TimestampMixin, PublishableMixin, generate_uuid
from learnpath.kernel.models.content import (
    Category,
    Challenge,
    ChallengeDifficulty,
    Project,
    Quiz,
    Tutorial,
)
from learnpath.kernel.models.progress import (
    ChallengeProgress,
    CompletionStatus,
    ProjectProgress,
    TutorialProgress,
    UserStudyProgress,
)
from learnpath.kernel.models.skill import Skill

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "PublishableMixin",
    "generate_uuid",
    # Content
    "Category",
    "Challenge",
    "ChallengeDifficulty",
    "Project",
    "Quiz",
    "Tutorial",
    # Progress
    "ChallengeProgress",
    "CompletionStatus",
    "ProjectProgress",
    "TutorialProgress",
    "UserStudyProgress",
    # Skills
    "Skill",
]
