"""
Collaborator interfaces consumed by the curriculum engine.

The engine receives these as constructor arguments; production code wires
the SQLAlchemy implementations from sql_repositories, tests wire fakes.
"""

from typing import List, Optional, Protocol, Set

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


class ContentRepository(Protocol):
    """Read-only source of published content."""

    async def list_tutorials(self) -> List[Tutorial]:  # pragma: no cover - protocol definition
        ...

    async def list_challenges(self) -> List[Challenge]:  # pragma: no cover - protocol definition
        ...

    async def list_projects(self) -> List[Project]:  # pragma: no cover - protocol definition
        ...

    async def list_quizzes(self) -> List[Quiz]:  # pragma: no cover - protocol definition
        ...


class ProgressRepository(Protocol):
    """Per-content completion records plus the consolidated progress row."""

    async def tutorial_progress(self, user_id: str) -> List[TutorialProgressView]:  # pragma: no cover
        ...

    async def challenge_progress(self, user_id: str) -> List[ChallengeProgressView]:  # pragma: no cover
        ...

    async def project_progress(self, user_id: str) -> List[ProjectProgressView]:  # pragma: no cover
        ...

    async def get_progress(self, user_id: str, study_plan_id: str) -> Optional[ProgressRecord]:  # pragma: no cover
        ...

    async def upsert_progress(self, record: ProgressRecord) -> ProgressRecord:  # pragma: no cover
        """
        Atomically create or update the row keyed by (user_id, study_plan_id).

        On update only the pointer, completed sets, percentage and
        last_activity_at are written; the stored record is returned.
        """
        ...


class SkillTagger(Protocol):
    """Maps content text to skill labels. Must be a pure function."""

    def extract(self, title: str, description: str, category: Optional[str]) -> Set[str]:  # pragma: no cover
        ...
