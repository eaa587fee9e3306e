"""Certificate API endpoints.

Provides routes for:
- On-demand STUDENT certificate generation
- Listing the current user's certificates
- Public certificate verification
- Admin listing of every issued certificate
"""

from fastapi import APIRouter, Query, Response, status

from planetnine.auth.dependencies import AdminUser, CurrentUser
from planetnine.certificates.dependencies import CertificateServiceDep
from planetnine.certificates.schemas import (
    AdminCertificateListResponse,
    CertificateListResponse,
    CertificateResponse,
    CertificateVerificationResponse,
    GenerateCertificateRequest,
)


router = APIRouter(prefix="/v1/certificates", tags=["certificates"])
admin_router = APIRouter(prefix="/v1/admin/certificates", tags=["admin"])


@router.post(
    "/generate",
    response_model=CertificateResponse,
    summary="Generate certificate for a completed course",
)
async def generate_certificate(
    data: GenerateCertificateRequest,
    response: Response,
    certificate_service: CertificateServiceDep,
    user: CurrentUser,
) -> CertificateResponse:
    """Generate (or return the existing) STUDENT certificate.

    Responds 201 when a new certificate was issued, 200 when it already existed.
    """
    certificate, created = await certificate_service.generate_student_certificate(
        user.id, data.course_id
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return CertificateResponse.from_certificate(certificate)


@router.get(
    "/me",
    response_model=CertificateListResponse,
    summary="List my certificates",
)
async def list_my_certificates(
    certificate_service: CertificateServiceDep,
    user: CurrentUser,
) -> CertificateListResponse:
    """List certificates held by the current user."""
    certificates = await certificate_service.list_user_certificates(user.id)
    return CertificateListResponse(
        items=[CertificateResponse.from_certificate(c) for c in certificates],
        total=len(certificates),
    )


@router.get(
    "/verify/{certificate_id}",
    response_model=CertificateVerificationResponse,
    summary="Verify certificate",
)
async def verify_certificate(
    certificate_id: str,
    certificate_service: CertificateServiceDep,
) -> CertificateVerificationResponse:
    """Public lookup of a certificate by id."""
    return await certificate_service.verify_certificate(certificate_id)


# ==============================================================================
# Admin Endpoints
# ==============================================================================


@admin_router.get(
    "",
    response_model=AdminCertificateListResponse,
    summary="List all certificates",
)
async def list_certificates(
    certificate_service: CertificateServiceDep,
    admin: AdminUser,
    limit: int = Query(500, ge=1, le=1000),
) -> AdminCertificateListResponse:
    """Admin overview of issued certificates, newest first."""
    items = await certificate_service.list_certificates(limit=limit)
    return AdminCertificateListResponse(items=items, total=len(items))
