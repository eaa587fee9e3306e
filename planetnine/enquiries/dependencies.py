"""FastAPI dependencies for enquiries.

Provides dependency injection for:
- Enquiry service
- Conversion workflow
- Per-IP rate limiting of public forms
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from planetnine.core.middleware import get_client_ip
from planetnine.core.redis import RateLimiter, get_redis

from .service import EnquiryService
from .workflow import EnquiryConversionWorkflow


async def get_enquiry_service(request: Request) -> EnquiryService:
    """Get enquiry service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "enquiry_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enquiry service unavailable",
        )
    return app_state.enquiry_service


async def get_conversion_workflow(request: Request) -> EnquiryConversionWorkflow:
    """Get conversion workflow from app state."""
    app_state = request.app.state
    if not getattr(app_state, "conversion_workflow", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enrollment workflow unavailable",
        )
    return app_state.conversion_workflow


def get_rate_limiter() -> RateLimiter:
    """Rate limiter over the shared Redis client (no-op without Redis)."""
    return RateLimiter(get_redis())


EnquiryServiceDep = Annotated[EnquiryService, Depends(get_enquiry_service)]
ConversionWorkflowDep = Annotated[
    EnquiryConversionWorkflow, Depends(get_conversion_workflow)
]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]
ClientIp = Annotated[str | None, Depends(get_client_ip)]
