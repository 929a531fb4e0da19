"""
Learning content models - categories, tutorials, quizzes, challenges, projects.

The curriculum engine only reads these tables; authoring happens elsewhere.
"""

import uuid
from enum import Enum
from typing import List, Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnpath.kernel.models.base import Base, PublishableMixin, TimestampMixin, generate_uuid


class ChallengeDifficulty(str, Enum):
    """Three-point difficulty scale used by coding challenges."""
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class Category(Base, TimestampMixin):
    """Tutorial category (html, css, javascript, ...)."""

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    tutorials: Mapped[List["Tutorial"]] = relationship(back_populates="category")


class Tutorial(Base, TimestampMixin, PublishableMixin):
    """A written tutorial, ordered within its category."""

    __tablename__ = "tutorials"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    difficulty: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    category: Mapped[Category] = relationship(back_populates="tutorials")
    quizzes: Mapped[List["Quiz"]] = relationship(back_populates="tutorial")


class Quiz(Base, TimestampMixin, PublishableMixin):
    """Quiz attached to a tutorial."""

    __tablename__ = "quizzes"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    tutorial_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tutorials.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    tutorial: Mapped[Tutorial] = relationship(back_populates="quizzes")


class Challenge(Base, TimestampMixin, PublishableMixin):
    """Coding challenge. Challenges carry no category."""

    __tablename__ = "challenges"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    difficulty: Mapped[ChallengeDifficulty] = mapped_column(
        String(20),
        default=ChallengeDifficulty.EASY,
        nullable=False,
    )


class Project(Base, TimestampMixin, PublishableMixin):
    """Portfolio project."""

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    category: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    difficulty: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    estimated_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
