"""
Errors raised by the curriculum engine.

Only failures that make a result unusable are exceptions. Thin phases and
progress for content that left the plan are logged and tolerated.
"""

from typing import Optional


class StudyPlanError(Exception):
    """Base class for curriculum engine failures."""

    #: Message the UI layer shows to learners.
    user_message: str = "Something went wrong with your study plan"

    def __init__(self, message: str, *, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class AggregationFailure(StudyPlanError):
    """A content fetch failed; no partial curriculum is returned."""

    user_message = "Curriculum temporarily unavailable"


class ReconciliationFailure(StudyPlanError):
    """A progress read or the progress upsert failed; nothing was written."""

    user_message = "Progress not saved, please retry"
