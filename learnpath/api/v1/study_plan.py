"""
Study plan endpoints - assembled curriculum and per-user progress.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status

from learnpath.api.deps import StudyPlanServiceDep
from learnpath.engines.study_plan.errors import StudyPlanError
from learnpath.schemas.study_plan import ProgressResponse, StudyPlanResponse

router = APIRouter()

UserId = Annotated[str, Path(min_length=1, max_length=64)]


def _unavailable(exc: StudyPlanError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=exc.user_message,
    )


@router.get("/study-plan", response_model=StudyPlanResponse)
async def get_study_plan(service: StudyPlanServiceDep):
    """Get the assembled study plan."""
    try:
        plan = await service.get_study_plan()
    except StudyPlanError as exc:
        raise _unavailable(exc) from exc
    return StudyPlanResponse.from_plan(plan)


@router.post("/users/{user_id}/study-plan/sync", response_model=ProgressResponse)
async def sync_study_plan_progress(user_id: UserId, service: StudyPlanServiceDep):
    """Recompute the user's progress from content completion and store it."""
    try:
        plan = await service.get_study_plan()
        record = await service.sync_progress(user_id, plan)
    except StudyPlanError as exc:
        raise _unavailable(exc) from exc
    return ProgressResponse.from_record(record, plan)


@router.get("/users/{user_id}/study-plan/progress", response_model=ProgressResponse)
async def get_study_plan_progress(user_id: UserId, service: StudyPlanServiceDep):
    """Get the stored progress without recomputing it."""
    try:
        record = await service.get_progress(user_id)
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No progress recorded for this study plan",
            )
        plan = await service.get_study_plan()
    except StudyPlanError as exc:
        raise _unavailable(exc) from exc
    return ProgressResponse.from_record(record, plan)
