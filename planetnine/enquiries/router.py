"""Enquiry API endpoints.

Provides routes for:
- Public contact form (rate limited per client IP)
- Admin inbox, status updates and conversion into enrollments
"""

from uuid import UUID

from fastapi import APIRouter, status

from planetnine.auth.dependencies import AdminUser
from planetnine.auth.schemas import UserSummary
from planetnine.config.settings import get_settings
from planetnine.core.exceptions import ValidationFailedError
from planetnine.enrollments.schemas import EnrollmentResponse

from .dependencies import (
    ClientIp,
    ConversionWorkflowDep,
    EnquiryServiceDep,
    RateLimiterDep,
)
from .schemas import (
    ContactRequest,
    ContactResponse,
    ConversionResponse,
    ConvertEnquiryRequest,
    EnquiryListResponse,
    EnquiryResponse,
    UpdateEnquiryRequest,
)


router = APIRouter(prefix="/v1/contact", tags=["enquiries"])
admin_router = APIRouter(prefix="/v1/admin/enquiries", tags=["admin"])


# ==============================================================================
# Public Endpoints
# ==============================================================================


@router.post(
    "",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit contact form",
)
async def submit_enquiry(
    data: ContactRequest,
    enquiry_service: EnquiryServiceDep,
    rate_limiter: RateLimiterDep,
    client_ip: ClientIp,
) -> ContactResponse:
    """Store a contact enquiry for the admin inbox."""
    await rate_limiter.hit(
        "contact_form",
        client_ip or "unknown",
        limit=get_settings().contact_rate_limit_per_minute,
    )

    enquiry = await enquiry_service.create_enquiry(
        name=data.name,
        email=data.email,
        phone=data.phone,
        course_interest=data.subject,
        message=data.message,
    )
    return ContactResponse(enquiry=EnquiryResponse.from_enquiry(enquiry))


# ==============================================================================
# Admin Endpoints
# ==============================================================================


@admin_router.get(
    "",
    response_model=EnquiryListResponse,
    summary="List enquiries",
)
async def list_enquiries(
    enquiry_service: EnquiryServiceDep,
    admin: AdminUser,
) -> EnquiryListResponse:
    """List enquiries, newest first (enrollment-form notes excluded)."""
    enquiries = await enquiry_service.list_enquiries()
    return EnquiryListResponse(
        items=[EnquiryResponse.from_enquiry(e) for e in enquiries],
        total=len(enquiries),
    )


@admin_router.patch(
    "/{enquiry_id}",
    response_model=EnquiryResponse,
    summary="Update enquiry status",
)
async def update_enquiry_status(
    enquiry_id: UUID,
    data: UpdateEnquiryRequest,
    enquiry_service: EnquiryServiceDep,
    admin: AdminUser,
) -> EnquiryResponse:
    """Resolve or reject an enquiry."""
    enquiry = await enquiry_service.update_status(enquiry_id, data.status)
    return EnquiryResponse.from_enquiry(enquiry)


@admin_router.post(
    "/convert",
    response_model=ConversionResponse,
    summary="Convert enquiry into enrollment",
)
async def convert_enquiry(
    data: ConvertEnquiryRequest,
    workflow: ConversionWorkflowDep,
    admin: AdminUser,
) -> ConversionResponse:
    """Create (or reuse) the student account and a PENDING enrollment."""
    if data.action != "convert":
        raise ValidationFailedError("Invalid action")

    result = await workflow.convert_enquiry(data.enquiry_id, data.course_id)
    return ConversionResponse(
        enrollment=EnrollmentResponse.from_enrollment(result.enrollment),
        user=UserSummary(
            id=result.user.id,
            email=result.user.email,
            name=result.user.name,
        ),
    )
