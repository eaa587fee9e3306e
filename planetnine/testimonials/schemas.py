"""Pydantic schemas for testimonials."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from planetnine.auth.validators import validate_message, validate_name, validate_subject


if TYPE_CHECKING:
    from planetnine.testimonials.models import Testimonial


class CreateTestimonialRequest(BaseModel):
    """Admin testimonial creation."""

    name: str
    course: str
    rating: int = Field(..., ge=1, le=5)
    content: str
    image_url: str | None = Field(None, max_length=500)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        result = validate_name(v)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted

    @field_validator("course")
    @classmethod
    def check_course(cls, v: str) -> str:
        result = validate_subject(v)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        result = validate_message(v)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted


class UpdateTestimonialRequest(BaseModel):
    """Admin visibility toggle."""

    is_active: bool


class TestimonialResponse(BaseModel):
    """Testimonial response."""

    id: UUID
    name: str
    course: str
    rating: int
    content: str
    image_url: str | None = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_testimonial(cls, testimonial: "Testimonial") -> "TestimonialResponse":
        return cls(
            id=testimonial.id,
            name=testimonial.name,
            course=testimonial.course,
            rating=testimonial.rating,
            content=testimonial.content,
            image_url=testimonial.image_url,
            is_active=testimonial.is_active,
            created_at=testimonial.created_at,
        )


class TestimonialListResponse(BaseModel):
    items: list[TestimonialResponse]
    total: int
