"""Testimonial API endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from planetnine.auth.dependencies import AdminUser

from .dependencies import TestimonialServiceDep
from .schemas import (
    CreateTestimonialRequest,
    TestimonialListResponse,
    TestimonialResponse,
    UpdateTestimonialRequest,
)


router = APIRouter(prefix="/v1/testimonials", tags=["testimonials"])
admin_router = APIRouter(prefix="/v1/admin/testimonials", tags=["admin"])


@router.get(
    "",
    response_model=TestimonialListResponse,
    summary="List testimonials",
)
async def list_testimonials(
    testimonial_service: TestimonialServiceDep,
) -> TestimonialListResponse:
    """Active testimonials, newest first."""
    testimonials = await testimonial_service.list_testimonials()
    return TestimonialListResponse(
        items=[TestimonialResponse.from_testimonial(t) for t in testimonials],
        total=len(testimonials),
    )


@admin_router.post(
    "",
    response_model=TestimonialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create testimonial",
)
async def create_testimonial(
    data: CreateTestimonialRequest,
    testimonial_service: TestimonialServiceDep,
    admin: AdminUser,
) -> TestimonialResponse:
    testimonial = await testimonial_service.create_testimonial(data)
    return TestimonialResponse.from_testimonial(testimonial)


@admin_router.patch(
    "/{testimonial_id}",
    response_model=TestimonialResponse,
    summary="Show or hide testimonial",
)
async def update_testimonial(
    testimonial_id: UUID,
    data: UpdateTestimonialRequest,
    testimonial_service: TestimonialServiceDep,
    admin: AdminUser,
) -> TestimonialResponse:
    testimonial = await testimonial_service.set_active(testimonial_id, data.is_active)
    return TestimonialResponse.from_testimonial(testimonial)
