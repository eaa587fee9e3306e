"""Pydantic schemas for enquiries and their conversion.

Public form fields are validated and HTML-escaped here, so services only
ever see sanitized text.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from planetnine.auth.schemas import UserSummary
from planetnine.auth.validators import (
    validate_message,
    validate_name,
    validate_phone,
    validate_subject,
)
from planetnine.enquiries.models import DEFAULT_SUBJECT, EnquiryStatus
from planetnine.enrollments.schemas import EnrollmentResponse


if TYPE_CHECKING:
    from planetnine.enquiries.models import Enquiry


class ContactRequest(BaseModel):
    """Public contact form."""

    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Contact email")
    phone: str | None = Field(None, description="Phone number (optional)")
    subject: str | None = Field(
        None, validate_default=True, description="Subject line"
    )
    message: str = Field(..., description="Message")

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

    @field_validator("subject")
    @classmethod
    def check_subject(cls, v: str | None) -> str:
        result = validate_subject(v or DEFAULT_SUBJECT)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted

    @field_validator("message")
    @classmethod
    def check_message(cls, v: str) -> str:
        result = validate_message(v)
        if not result.valid:
            raise ValueError(result.message)
        return result.formatted


class UpdateEnquiryRequest(BaseModel):
    """Admin enquiry status update (conversion has its own endpoint)."""

    status: EnquiryStatus

    @field_validator("status")
    @classmethod
    def check_status(cls, v: EnquiryStatus) -> EnquiryStatus:
        if v == EnquiryStatus.CONVERTED:
            raise ValueError("Use the convert endpoint to convert an enquiry")
        return v


class ConvertEnquiryRequest(BaseModel):
    """Admin request to convert an enquiry into an enrollment."""

    enquiry_id: UUID
    course_id: UUID
    action: str = Field("convert", description="Only 'convert' is supported")


class EnquiryResponse(BaseModel):
    """Enquiry response."""

    id: UUID
    name: str
    email: str
    phone: str | None = None
    course_interest: str | None = None
    message: str | None = None
    status: EnquiryStatus
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_enquiry(cls, enquiry: "Enquiry") -> "EnquiryResponse":
        return cls(
            id=enquiry.id,
            name=enquiry.name,
            email=enquiry.email,
            phone=enquiry.phone,
            course_interest=enquiry.course_interest,
            message=enquiry.message,
            status=EnquiryStatus(enquiry.status),
            created_at=enquiry.created_at,
            updated_at=enquiry.updated_at,
        )


class EnquiryListResponse(BaseModel):
    """Admin enquiry inbox."""

    items: list[EnquiryResponse]
    total: int


class ContactResponse(BaseModel):
    """Result of a contact form submission."""

    message: str = "Message sent successfully"
    enquiry: EnquiryResponse


class ConversionResponse(BaseModel):
    """Result of converting an enquiry."""

    message: str = "Enquiry converted to enrollment successfully"
    enrollment: EnrollmentResponse
    user: UserSummary
