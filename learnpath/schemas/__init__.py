"""
Pydantic schemas for API request/response validation.
"""

from learnpath.schemas.common import ErrorResponse, HealthResponse
from learnpath.schemas.study_plan import (
    PhaseProgressSchema,
    PhaseSchema,
    ProgressResponse,
    StepSchema,
    StudyPlanResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "PhaseProgressSchema",
    "PhaseSchema",
    "ProgressResponse",
    "StepSchema",
    "StudyPlanResponse",
]
