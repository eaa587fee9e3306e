"""Pydantic schemas for certificates."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, Field

from planetnine.certificates.models import CertificateType


if TYPE_CHECKING:
    from planetnine.certificates.models import Certificate


class GenerateCertificateRequest(BaseModel):
    """On-demand certificate request."""

    course_id: UUID = Field(..., description="Completed course")


class CertificateResponse(BaseModel):
    """Certificate response."""

    certificate_id: str
    user_id: UUID
    course_id: UUID
    type: CertificateType
    certificate_url: str
    issued_at: datetime

    @classmethod
    def from_certificate(cls, certificate: "Certificate") -> "CertificateResponse":
        return cls(
            certificate_id=certificate.certificate_id,
            user_id=certificate.user_id,
            course_id=certificate.course_id,
            type=CertificateType(certificate.type),
            certificate_url=certificate.certificate_url,
            issued_at=certificate.issued_at,
        )


class CertificateListResponse(BaseModel):
    """Certificates held by the current user."""

    items: list[CertificateResponse]
    total: int


class CertificateVerificationResponse(BaseModel):
    """Public verification result."""

    valid: bool = True
    certificate: CertificateResponse
    student_name: str
    course_title: str


class AdminCertificateResponse(CertificateResponse):
    """Certificate with its holder and course, for the admin overview."""

    student_name: str
    student_email: str
    course_title: str


class AdminCertificateListResponse(BaseModel):
    """All issued certificates, newest first."""

    items: list[AdminCertificateResponse]
    total: int
