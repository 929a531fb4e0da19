"""
SQLAlchemy implementations of the engine's repositories.

Every call opens its own session from the injected factory, so the engine
can run reads concurrently without sharing an AsyncSession.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learnpath.engines.study_plan.skill_tagger import SkillDefinition
from learnpath.engines.study_plan.types import (
    Challenge,
    ChallengeProgressView,
    ProgressRecord,
    Project,
    ProjectProgressView,
    Quiz,
    Tutorial,
    TutorialProgressView,
)
from learnpath.kernel.models.base import generate_uuid
from learnpath.kernel.models.content import Category
from learnpath.kernel.models.content import Challenge as ChallengeRow
from learnpath.kernel.models.content import ChallengeDifficulty
from learnpath.kernel.models.content import Project as ProjectRow
from learnpath.kernel.models.content import Quiz as QuizRow
from learnpath.kernel.models.content import Tutorial as TutorialRow
from learnpath.kernel.models.progress import (
    ChallengeProgress,
    CompletionStatus,
    ProjectProgress,
    TutorialProgress,
    UserStudyProgress,
)
from learnpath.kernel.models.skill import Skill

# Columns a repeated sync may overwrite. hours_spent, started_at and
# estimated_completion_date are only written on insert.
SYNC_COLUMNS = (
    "current_phase_id",
    "current_step_id",
    "completed_steps",
    "completed_phases",
    "total_progress_percentage",
    "last_activity_at",
)


class SqlContentRepository:
    """Published content read from the content tables."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def list_tutorials(self) -> List[Tutorial]:
        q = (
            select(TutorialRow, Category.slug)
            .join(Category, TutorialRow.category_id == Category.id)
            .where(TutorialRow.published.is_(True))
            .order_by(Category.slug, TutorialRow.order, TutorialRow.slug)
        )
        async with self.session_maker() as session:
            rows = (await session.execute(q)).all()
        return [
            Tutorial(
                slug=t.slug,
                title=t.title,
                description=t.description or "",
                difficulty=t.difficulty,
                order=t.order,
                category_slug=category_slug,
                is_premium=t.is_premium,
                required_plan=t.required_plan,
            )
            for t, category_slug in rows
        ]

    async def list_challenges(self) -> List[Challenge]:
        q = (
            select(ChallengeRow)
            .where(ChallengeRow.published.is_(True))
            .order_by(ChallengeRow.created_at, ChallengeRow.slug)
        )
        async with self.session_maker() as session:
            rows = (await session.execute(q)).scalars().all()
        return [
            Challenge(
                slug=c.slug,
                title=c.title,
                description=c.description or "",
                difficulty=ChallengeDifficulty(c.difficulty),
                is_premium=c.is_premium,
                required_plan=c.required_plan,
            )
            for c in rows
        ]

    async def list_projects(self) -> List[Project]:
        q = (
            select(ProjectRow)
            .where(ProjectRow.published.is_(True))
            .order_by(ProjectRow.order, ProjectRow.slug)
        )
        async with self.session_maker() as session:
            rows = (await session.execute(q)).scalars().all()
        return [
            Project(
                slug=p.slug,
                title=p.title,
                description=p.description or "",
                category=p.category or "",
                difficulty=p.difficulty,
                order=p.order,
                estimated_hours=p.estimated_hours,
                is_premium=p.is_premium,
                required_plan=p.required_plan,
            )
            for p in rows
        ]

    async def list_quizzes(self) -> List[Quiz]:
        q = (
            select(QuizRow, TutorialRow.slug)
            .join(TutorialRow, QuizRow.tutorial_id == TutorialRow.id)
            .where(QuizRow.published.is_(True))
            .order_by(QuizRow.slug)
        )
        async with self.session_maker() as session:
            rows = (await session.execute(q)).all()
        return [
            Quiz(
                slug=quiz.slug,
                title=quiz.title,
                tutorial_slug=tutorial_slug,
                is_premium=quiz.is_premium,
                required_plan=quiz.required_plan,
            )
            for quiz, tutorial_slug in rows
        ]


class SqlProgressRepository:
    """Per-content progress tables plus the user_study_progress upsert."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def tutorial_progress(self, user_id: str) -> List[TutorialProgressView]:
        q = (
            select(TutorialRow.slug, TutorialProgress.status, TutorialProgress.quiz_passed)
            .join(TutorialRow, TutorialProgress.tutorial_id == TutorialRow.id)
            .where(TutorialProgress.user_id == user_id)
        )
        async with self.session_maker() as session:
            rows = (await session.execute(q)).all()
        return [
            TutorialProgressView(
                tutorial_slug=slug,
                status=CompletionStatus(status),
                quiz_passed=bool(quiz_passed),
            )
            for slug, status, quiz_passed in rows
        ]

    async def challenge_progress(self, user_id: str) -> List[ChallengeProgressView]:
        q = (
            select(ChallengeRow.slug, ChallengeProgress.status)
            .join(ChallengeRow, ChallengeProgress.challenge_id == ChallengeRow.id)
            .where(ChallengeProgress.user_id == user_id)
        )
        async with self.session_maker() as session:
            rows = (await session.execute(q)).all()
        return [
            ChallengeProgressView(challenge_slug=slug, status=CompletionStatus(status))
            for slug, status in rows
        ]

    async def project_progress(self, user_id: str) -> List[ProjectProgressView]:
        q = (
            select(ProjectRow.slug, ProjectProgress.status)
            .join(ProjectRow, ProjectProgress.project_id == ProjectRow.id)
            .where(ProjectProgress.user_id == user_id)
        )
        async with self.session_maker() as session:
            rows = (await session.execute(q)).all()
        return [
            ProjectProgressView(project_slug=slug, status=CompletionStatus(status))
            for slug, status in rows
        ]

    @staticmethod
    def _row_to_record(row: UserStudyProgress) -> ProgressRecord:
        return ProgressRecord(
            user_id=row.user_id,
            study_plan_id=row.study_plan_id,
            current_phase_id=row.current_phase_id,
            current_step_id=row.current_step_id,
            completed_steps=frozenset(row.completed_steps or []),
            completed_phases=frozenset(row.completed_phases or []),
            total_progress_percentage=row.total_progress_percentage,
            hours_spent=row.hours_spent,
            started_at=row.started_at,
            last_activity_at=row.last_activity_at,
            estimated_completion_date=row.estimated_completion_date,
        )

    @staticmethod
    def _select_row(user_id: str, study_plan_id: str):
        return select(UserStudyProgress).where(
            UserStudyProgress.user_id == user_id,
            UserStudyProgress.study_plan_id == study_plan_id,
        )

    async def get_progress(self, user_id: str, study_plan_id: str) -> Optional[ProgressRecord]:
        async with self.session_maker() as session:
            result = await session.execute(self._select_row(user_id, study_plan_id))
            row = result.scalar_one_or_none()
        return self._row_to_record(row) if row else None

    async def upsert_progress(self, record: ProgressRecord) -> ProgressRecord:
        """
        INSERT ... ON CONFLICT (user_id, study_plan_id) DO UPDATE.

        One statement inside one transaction: concurrent syncs for the same
        user and plan converge on a single row, last writer wins.
        """
        values = {
            "id": generate_uuid(),
            "user_id": record.user_id,
            "study_plan_id": record.study_plan_id,
            "current_phase_id": record.current_phase_id,
            "current_step_id": record.current_step_id,
            "completed_steps": sorted(record.completed_steps),
            "completed_phases": sorted(record.completed_phases),
            "total_progress_percentage": record.total_progress_percentage,
            "hours_spent": record.hours_spent,
            "started_at": record.started_at,
            "last_activity_at": record.last_activity_at,
            "estimated_completion_date": record.estimated_completion_date,
        }

        async with self.session_maker() as session:
            async with session.begin():
                dialect = session.get_bind().dialect.name
                if dialect == "postgresql":
                    stmt = pg_insert(UserStudyProgress).values(**values)
                elif dialect == "sqlite":
                    stmt = sqlite_insert(UserStudyProgress).values(**values)
                else:
                    raise NotImplementedError(f"Progress upsert not supported on {dialect}")
                stmt = stmt.on_conflict_do_update(
                    index_elements=["user_id", "study_plan_id"],
                    set_={column: stmt.excluded[column] for column in SYNC_COLUMNS},
                )
                await session.execute(stmt)
                result = await session.execute(
                    self._select_row(record.user_id, record.study_plan_id)
                    .execution_options(populate_existing=True)
                )
                stored = self._row_to_record(result.scalar_one())
        return stored


async def load_skill_catalog(session_maker: async_sessionmaker[AsyncSession]) -> List[SkillDefinition]:
    """Snapshot of the skills table ordered by category, order, name."""
    q = select(Skill).order_by(Skill.category, Skill.order, Skill.name)
    async with session_maker() as session:
        rows = (await session.execute(q)).scalars().all()
    return [
        SkillDefinition(name=s.name, category=s.category, keywords=tuple(s.keywords or ()))
        for s in rows
    ]
