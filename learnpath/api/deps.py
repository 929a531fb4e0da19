"""
FastAPI dependencies for database access and the study plan service.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learnpath.config import get_settings
from learnpath.database import get_session_maker
from learnpath.engines.study_plan.errors import AggregationFailure
from learnpath.engines.study_plan.service import StudyPlanService
from learnpath.engines.study_plan.skill_tagger import CatalogSkillTagger
from learnpath.engines.study_plan.sql_repositories import (
    SqlContentRepository,
    SqlProgressRepository,
    load_skill_catalog,
)
from learnpath.logging_config import get_logger

logger = get_logger(__name__)

SessionMaker = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)]


async def get_study_plan_service(request: Request, session_maker: SessionMaker) -> StudyPlanService:
    """
    One service per application so the plan cache is shared across requests.

    The skill catalog is read once, on first use.
    """
    service: Optional[StudyPlanService] = getattr(request.app.state, "study_plan_service", None)
    if service is not None:
        return service

    try:
        skills = await load_skill_catalog(session_maker)
    except Exception as exc:
        logger.exception("Skill catalog load failed")
        raise AggregationFailure(f"Failed to load skills: {exc}", source="skills") from exc

    service = StudyPlanService.from_settings(
        SqlContentRepository(session_maker),
        SqlProgressRepository(session_maker),
        CatalogSkillTagger(skills),
        get_settings(),
    )
    request.app.state.study_plan_service = service
    logger.info("Study plan service ready", extra={"skills": len(skills)})
    return service


StudyPlanServiceDep = Annotated[StudyPlanService, Depends(get_study_plan_service)]
