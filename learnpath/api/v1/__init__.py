"""
API v1 routes.
"""

from fastapi import APIRouter

from learnpath.api.v1 import study_plan

router = APIRouter()

router.include_router(study_plan.router, tags=["Study Plan"])
