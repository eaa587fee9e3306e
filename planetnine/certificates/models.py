"""Database models for certificates.

Cassandra table definitions for:
- Certificates: keyed by the public certificate id (verification lookups)
- Certificates by user: one row per (user, course, type), claimed with a
  lightweight transaction so a certificate is issued at most once
"""

import secrets
import string
import time
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from planetnine.core.timeutils import ensure_utc_aware, utcnow


class CertificateType(str, Enum):
    """Certificate kind."""

    COMPLETION = "COMPLETION"  # Issued automatically after the final quiz
    STUDENT = "STUDENT"  # Generated on demand for a completed enrollment


CERTIFICATE_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
CERTIFICATE_SUFFIX_LENGTH = 9


def generate_certificate_id(prefix: str = "CERT", now_ms: int | None = None) -> str:
    """Generate a URL-safe certificate id: ``<prefix>-<epoch ms>-<9 base36 chars>``.

    Example:
        >>> generate_certificate_id(now_ms=1700000000000)[:19]
        'CERT-1700000000000-'
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(
        secrets.choice(CERTIFICATE_SUFFIX_ALPHABET)
        for _ in range(CERTIFICATE_SUFFIX_LENGTH)
    )
    return f"{prefix}-{now_ms}-{suffix}"


def completion_certificate_url(user_id: UUID, course_id: UUID) -> str:
    """Display URL stored on COMPLETION certificates."""
    return f"/certificates/{user_id}-{course_id}.pdf"


def student_certificate_url(certificate_id: str) -> str:
    """Display URL stored on STUDENT certificates (rendered on demand)."""
    return f"/api/certificate/generate-pdf/{certificate_id}"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

CERTIFICATES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.certificates (
    certificate_id TEXT PRIMARY KEY,
    user_id UUID,
    course_id UUID,
    type TEXT,
    certificate_url TEXT,
    issued_at TIMESTAMP
)
"""

CERTIFICATES_BY_USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.certificates_by_user (
    user_id UUID,
    course_id UUID,
    type TEXT,
    certificate_id TEXT,
    certificate_url TEXT,
    issued_at TIMESTAMP,
    PRIMARY KEY (user_id, course_id, type)
)
"""

CERTIFICATES_TABLES_CQL = [
    CERTIFICATES_TABLE_CQL,
    CERTIFICATES_BY_USER_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Certificate:
    """Immutable certificate record.

    Attributes:
        certificate_id: Public, URL-safe identifier
        user_id: Certificate holder
        course_id: Completed course
        type: COMPLETION or STUDENT
        certificate_url: Display URL
        issued_at: Issue timestamp
    """

    def __init__(
        self,
        certificate_id: str,
        user_id: UUID,
        course_id: UUID,
        type: str = CertificateType.COMPLETION.value,
        certificate_url: str = "",
        issued_at: datetime | None = None,
    ):
        self.certificate_id = certificate_id
        self.user_id = user_id
        self.course_id = course_id
        self.type = type
        self.certificate_url = certificate_url
        self.issued_at = ensure_utc_aware(issued_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "Certificate":
        """Create Certificate instance from either certificate table row."""
        return cls(
            certificate_id=row.certificate_id,
            user_id=row.user_id,
            course_id=row.course_id,
            type=row.type,
            certificate_url=row.certificate_url or "",
            issued_at=row.issued_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "certificate_id": self.certificate_id,
            "user_id": self.user_id,
            "course_id": self.course_id,
            "type": self.type,
            "certificate_url": self.certificate_url,
            "issued_at": self.issued_at,
        }

    def __repr__(self) -> str:
        return f"<Certificate {self.certificate_id} ({self.type})>"
