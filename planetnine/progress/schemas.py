"""Pydantic schemas for learner progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ModuleProgressSummary(BaseModel):
    """One module's status for the current learner."""

    module_id: UUID
    title: str
    order: int
    status: str = Field(description="LOCKED, UNLOCKED, IN_PROGRESS or COMPLETED")
    completed_at: datetime | None = None


class CourseProgressResponse(BaseModel):
    """Course progress for the current learner."""

    course_id: UUID
    modules: list[ModuleProgressSummary]
    completed_modules: int
    total_modules: int
    progress_percent: int = Field(ge=0, le=100)
