"""Pydantic schemas for the course catalog.

Request and response models for:
- Courses: creation, update, listing and detail
- Modules: creation and ordered listing within a course
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from planetnine.courses.models import CourseStatus


if TYPE_CHECKING:
    from planetnine.courses.models import Course, Module


# ==============================================================================
# Course Schemas
# ==============================================================================


class CreateCourseRequest(BaseModel):
    """Course creation request."""

    title: str = Field(..., min_length=3, max_length=200, description="Course title")
    description: str | None = Field(
        None, max_length=2000, description="Course description"
    )
    price: Decimal | None = Field(
        None, ge=0, le=1_000_000, description="Course price (None = free)"
    )
    status: CourseStatus = Field(
        CourseStatus.DRAFT, description="Initial publication status"
    )


class UpdateCourseRequest(BaseModel):
    """Course update request; omitted fields are left unchanged."""

    title: str | None = Field(
        None, min_length=3, max_length=200, description="Course title"
    )
    description: str | None = Field(
        None, max_length=2000, description="Course description"
    )
    price: Decimal | None = Field(None, ge=0, le=1_000_000, description="Course price")
    status: CourseStatus | None = Field(None, description="Publication status")


class CourseResponse(BaseModel):
    """Course response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None = None
    price: Decimal | None = None
    status: CourseStatus
    tutor_id: UUID | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_course(cls, course: "Course") -> "CourseResponse":
        return cls(
            id=course.id,
            title=course.title,
            description=course.description,
            price=course.price,
            status=CourseStatus(course.status),
            tutor_id=course.tutor_id,
            created_at=course.created_at,
            updated_at=course.updated_at,
        )


class CourseListResponse(BaseModel):
    """Course list response."""

    items: list[CourseResponse]
    total: int


# ==============================================================================
# Module Schemas
# ==============================================================================


class CreateModuleRequest(BaseModel):
    """Module creation request."""

    title: str = Field(..., min_length=3, max_length=200, description="Module title")
    description: str | None = Field(
        None, max_length=2000, description="Module description"
    )
    order: int = Field(..., ge=0, description="Sequence position within the course")


class ModuleResponse(BaseModel):
    """Module response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    order: int
    created_at: datetime

    @classmethod
    def from_module(cls, module: "Module") -> "ModuleResponse":
        return cls(
            id=module.id,
            course_id=module.course_id,
            title=module.title,
            description=module.description,
            order=module.order,
            created_at=module.created_at,
        )


class CourseDetailResponse(CourseResponse):
    """Course with its modules in sequence order."""

    modules: list[ModuleResponse] = []
