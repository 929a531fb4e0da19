"""
Content Aggregator - Fetches every content kind in parallel and normalizes it.
"""

import asyncio
from typing import Dict, Iterable, List, TypeVar

from learnpath.engines.study_plan.errors import AggregationFailure
from learnpath.engines.study_plan.repositories import ContentRepository
from learnpath.engines.study_plan.types import ContentBundle, Quiz, Tutorial
from learnpath.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_SOURCES = ("tutorials", "challenges", "projects", "quizzes")


def dedupe_by_slug(items: Iterable[T]) -> List[T]:
    """Drop repeated slugs, keeping the first occurrence and natural order."""
    seen: set = set()
    unique: List[T] = []
    for item in items:
        slug = item.slug  # type: ignore[attr-defined]
        if slug in seen:
            continue
        seen.add(slug)
        unique.append(item)
    return unique


def link_quizzes(tutorials: List[Tutorial], quizzes: List[Quiz]) -> Dict[str, Quiz]:
    """
    Resolve each tutorial's quiz.

    The quiz named by ``quiz_slug`` wins; otherwise the first quiz whose
    ``tutorial_slug`` points back at the tutorial. A ``quiz_slug`` with no
    quiz row becomes a synthetic quiz so the step still appears.
    """
    by_slug = {q.slug: q for q in quizzes}
    by_tutorial: Dict[str, Quiz] = {}
    for quiz in quizzes:
        by_tutorial.setdefault(quiz.tutorial_slug, quiz)

    linked: Dict[str, Quiz] = {}
    for tutorial in tutorials:
        if tutorial.quiz_slug:
            linked[tutorial.slug] = by_slug.get(tutorial.quiz_slug) or Quiz(
                slug=tutorial.quiz_slug,
                title=f"{tutorial.title} Quiz",
                tutorial_slug=tutorial.slug,
                is_premium=tutorial.is_premium,
                required_plan=tutorial.required_plan,
            )
        elif tutorial.slug in by_tutorial:
            linked[tutorial.slug] = by_tutorial[tutorial.slug]
    return linked


class ContentAggregator:
    """Fan-out/fan-in over the content repository."""

    def __init__(self, content_repository: ContentRepository):
        self.content_repository = content_repository

    async def fetch_all(self) -> ContentBundle:
        """
        Fetch tutorials, challenges, projects and quizzes concurrently.

        Raises:
            AggregationFailure: if any fetch fails. A curriculum missing one
                content kind is never returned.
        """
        repo = self.content_repository
        results = await asyncio.gather(
            repo.list_tutorials(),
            repo.list_challenges(),
            repo.list_projects(),
            repo.list_quizzes(),
            return_exceptions=True,
        )

        for source, result in zip(_SOURCES, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                logger.error(
                    "Content fetch failed",
                    extra={"source": source, "error": repr(result)},
                )
                raise AggregationFailure(
                    f"Failed to fetch {source}: {result}",
                    source=source,
                ) from result

        tutorials, challenges, projects, quizzes = (dedupe_by_slug(r) for r in results)

        logger.info(
            "Content aggregated",
            extra={
                "tutorials": len(tutorials),
                "challenges": len(challenges),
                "projects": len(projects),
                "quizzes": len(quizzes),
            },
        )
        return ContentBundle(
            tutorials=tuple(tutorials),
            challenges=tuple(challenges),
            projects=tuple(projects),
            quizzes=tuple(quizzes),
            quiz_by_tutorial=link_quizzes(tutorials, quizzes),
        )
