"""Certificate issuance and verification.

Note: Router is not exported here to avoid circular imports.
Import directly from planetnine.certificates.router when needed.
"""

from .models import (
    CERTIFICATES_TABLES_CQL,
    Certificate,
    CertificateType,
    generate_certificate_id,
)
from .service import CertificateService


__all__ = [
    "CERTIFICATES_TABLES_CQL",
    "Certificate",
    "CertificateService",
    "CertificateType",
    "generate_certificate_id",
]
