"""Pydantic schemas for enrollments, the tutor views and the admin dashboard."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from planetnine.auth.validators import validate_message, validate_name, validate_phone
from planetnine.courses.schemas import CourseResponse
from planetnine.enrollments.models import EnrollmentStatus, PaymentStatus


if TYPE_CHECKING:
    from planetnine.enrollments.models import Enrollment


class EnrollmentRequest(BaseModel):
    """Public enrollment request form."""

    course_id: UUID = Field(..., description="Course to enroll in")
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Contact email")
    phone: str | None = Field(None, description="Phone number (optional)")
    message: str | None = Field(None, description="Optional note to the school")
    preferred_contact: str = Field("email", max_length=20)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        result = validate_name(v)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        if not v or not v.strip():
            return None
        result = validate_phone(v)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted

    @field_validator("message")
    @classmethod
    def check_message(cls, v: str | None) -> str | None:
        if not v or not v.strip():
            return None
        result = validate_message(v)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted


class UpdateEnrollmentRequest(BaseModel):
    """Admin enrollment update."""

    status: EnrollmentStatus
    payment_status: PaymentStatus | None = None


class EnrollmentResponse(BaseModel):
    """Enrollment response."""

    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus
    payment_status: PaymentStatus
    created_at: datetime
    updated_at: datetime | None = None
    course_title: str | None = None

    @classmethod
    def from_enrollment(
        cls, enrollment: "Enrollment", course_title: str | None = None
    ) -> "EnrollmentResponse":
        return cls(
            user_id=enrollment.user_id,
            course_id=enrollment.course_id,
            status=EnrollmentStatus(enrollment.status),
            payment_status=PaymentStatus(enrollment.payment_status),
            created_at=enrollment.created_at,
            updated_at=enrollment.updated_at,
            course_title=course_title,
        )


class EnrollmentListResponse(BaseModel):
    """Enrollment list response."""

    items: list[EnrollmentResponse]
    total: int


class EnrollmentRequestResponse(BaseModel):
    """Result of a public enrollment request."""

    message: str = "Enrollment request submitted successfully"
    enrollment: EnrollmentResponse


# ==============================================================================
# Tutor Views
# ==============================================================================


class CourseEnrollmentResponse(BaseModel):
    """One learner's enrollment within a tutor's course."""

    user_id: UUID
    name: str
    email: str
    status: EnrollmentStatus
    created_at: datetime


class TutorCourseResponse(CourseResponse):
    """A tutor's course with the learners enrolled in it."""

    enrollments: list[CourseEnrollmentResponse] = []


class TutorCourseListResponse(BaseModel):
    """Courses authored by the current tutor, newest first."""

    items: list[TutorCourseResponse]
    total: int


class TutorStudentResponse(BaseModel):
    """A learner with access to one of the tutor's courses."""

    user_id: UUID
    name: str
    email: str
    course_id: UUID
    course_title: str
    status: EnrollmentStatus
    completed_modules: int
    total_modules: int
    progress_percent: int = Field(ge=0, le=100)
    last_activity: datetime


class TutorStudentListResponse(BaseModel):
    """Learners across the current tutor's courses."""

    items: list[TutorStudentResponse]
    total: int


# ==============================================================================
# Admin Dashboard
# ==============================================================================


class AdminStatsResponse(BaseModel):
    """Headline counts for the admin dashboard."""

    total_students: int
    total_courses: int
    active_courses: int
    pending_enquiries: int
    completed_enrollments: int
