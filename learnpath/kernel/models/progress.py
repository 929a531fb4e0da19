"""
Progress models - per-content-type completion records and the
consolidated study plan progress row.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from learnpath.kernel.models.base import Base, TimestampMixin, generate_uuid


class CompletionStatus(str, Enum):
    """Completion status shared by every per-content progress table."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TutorialProgress(Base, TimestampMixin):
    """Per-user tutorial status plus the quiz-passed flag."""

    __tablename__ = "tutorial_progress"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    tutorial_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tutorials.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[CompletionStatus] = mapped_column(
        String(20),
        default=CompletionStatus.NOT_STARTED,
        nullable=False,
    )
    quiz_passed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "tutorial_id", name="uq_tutorial_progress_user_tutorial"),)


class ChallengeProgress(Base, TimestampMixin):
    """Per-user challenge status."""

    __tablename__ = "challenge_progress"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    challenge_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[CompletionStatus] = mapped_column(
        String(20),
        default=CompletionStatus.NOT_STARTED,
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("user_id", "challenge_id", name="uq_challenge_progress_user_challenge"),)


class ProjectProgress(Base, TimestampMixin):
    """Per-user project status."""

    __tablename__ = "project_progress"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[CompletionStatus] = mapped_column(
        String(20),
        default=CompletionStatus.NOT_STARTED,
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("user_id", "project_id", name="uq_project_progress_user_project"),)


class UserStudyProgress(Base):
    """
    Consolidated progress of one user through one study plan.

    Written only through an upsert keyed by (user_id, study_plan_id).
    hours_spent and started_at belong to the time-tracking collaborator and
    are never overwritten by a sync.
    """

    __tablename__ = "user_study_progress"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    study_plan_id: Mapped[str] = mapped_column(String(120), nullable=False)

    current_phase_id: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    current_step_id: Mapped[Optional[str]] = mapped_column(String(250), nullable=True)
    # Sorted lists of ids; the engine treats them as sets
    completed_steps: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    completed_phases: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    total_progress_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    hours_spent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_activity_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    estimated_completion_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "study_plan_id", name="uq_user_study_progress_user_plan"),)
