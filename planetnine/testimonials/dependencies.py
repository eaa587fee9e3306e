"""FastAPI dependencies for testimonials."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import TestimonialService


async def get_testimonial_service(request: Request) -> TestimonialService:
    """Get testimonial service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "testimonial_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Testimonial service unavailable",
        )
    return app_state.testimonial_service


TestimonialServiceDep = Annotated[TestimonialService, Depends(get_testimonial_service)]
