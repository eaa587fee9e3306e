"""Tests for EnquiryService dashboard counts."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from planetnine.enquiries.models import ENROLLMENT_REQUEST_PREFIX
from planetnine.enquiries.service import EnquiryService


@pytest.fixture
def enquiry_service(mock_session) -> EnquiryService:
    return EnquiryService(session=mock_session, keyspace="test_keyspace")


def enquiry_row(message: str | None) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        name="Vera Rubin",
        email="vera@planetnine.io",
        phone=None,
        course_interest=None,
        message=message,
        status="PENDING",
        created_at=None,
        updated_at=None,
    )


class TestCountPendingEnquiries:
    @pytest.mark.asyncio
    async def test_skips_enrollment_notes(self, enquiry_service, mock_session) -> None:
        mock_session.aexecute.return_value = [
            enquiry_row("When does the next cohort start?"),
            enquiry_row(None),
            enquiry_row(f"{ENROLLMENT_REQUEST_PREFIX}: Planetary Science"),
        ]

        assert await enquiry_service.count_pending_enquiries() == 2
        statement, params = mock_session.aexecute.await_args.args
        assert statement.endswith("ALLOW FILTERING")
        assert params == ["PENDING"]
