"""Tests for certificate ids, one-per-(user, course, type) issuance and listing."""

import re
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import UUID, uuid4

import pytest

from planetnine.certificates.models import (
    CertificateType,
    completion_certificate_url,
    generate_certificate_id,
)
from planetnine.auth.models import User
from planetnine.certificates.service import CertificateService, CourseNotCompletedError
from planetnine.courses.models import Course
from planetnine.enrollments.models import Enrollment


CERTIFICATE_ID_PATTERN = re.compile(r"^CERT-\d+-[0-9a-z]{9}$")


def certificate_row(user_id: UUID, course_id: UUID, certificate_id: str):
    return SimpleNamespace(
        certificate_id=certificate_id,
        user_id=user_id,
        course_id=course_id,
        type=CertificateType.COMPLETION.value,
        certificate_url=completion_certificate_url(user_id, course_id),
        issued_at=datetime.now(UTC),
    )


class TestGenerateCertificateId:
    def test_format(self) -> None:
        certificate_id = generate_certificate_id(now_ms=1700000000000)
        assert CERTIFICATE_ID_PATTERN.match(certificate_id)
        assert certificate_id.startswith("CERT-1700000000000-")

    def test_prefix(self) -> None:
        assert generate_certificate_id("PN").startswith("PN-")

    def test_unique(self) -> None:
        ids = {generate_certificate_id(now_ms=1) for _ in range(50)}
        assert len(ids) == 50


@pytest.fixture
def enrollment_service() -> Mock:
    service = Mock()
    service.get_enrollment = AsyncMock(return_value=None)
    return service


@pytest.fixture
def auth_service() -> Mock:
    service = Mock()
    service.get_user_by_id = AsyncMock(return_value=None)
    return service


@pytest.fixture
def course_service() -> Mock:
    service = Mock()
    service.get_course = AsyncMock(return_value=None)
    return service


@pytest.fixture
def certificate_service(
    mock_session, auth_service, course_service, enrollment_service
) -> CertificateService:
    return CertificateService(
        session=mock_session,
        keyspace="test_keyspace",
        auth_service=auth_service,
        course_service=course_service,
        enrollment_service=enrollment_service,
    )


class TestIssueCompletionCertificate:
    @pytest.mark.asyncio
    async def test_new_certificate(
        self, certificate_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.side_effect = [
            make_result(None),  # existing lookup
            make_result(was_applied=True),  # certificates insert
            make_result(was_applied=True),  # certificates_by_user claim
        ]

        certificate, created = await certificate_service.issue_completion_certificate(
            user_id, course_id
        )

        assert created is True
        assert CERTIFICATE_ID_PATTERN.match(certificate.certificate_id)
        assert certificate.certificate_url == f"/certificates/{user_id}-{course_id}.pdf"
        assert certificate.type == "COMPLETION"

    @pytest.mark.asyncio
    async def test_existing_certificate_reused(
        self, certificate_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.return_value = make_result(
            certificate_row(user_id, course_id, "CERT-1-abcdefghi")
        )

        certificate, created = await certificate_service.issue_completion_certificate(
            user_id, course_id
        )

        assert created is False
        assert certificate.certificate_id == "CERT-1-abcdefghi"
        assert mock_session.aexecute.await_count == 1

    @pytest.mark.asyncio
    async def test_lost_race_returns_winner(
        self, certificate_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.side_effect = [
            make_result(None),
            make_result(was_applied=True),
            make_result(was_applied=False),  # someone else claimed first
            Mock(),  # delete our orphan
            make_result(certificate_row(user_id, course_id, "CERT-2-winnerxyz")),
        ]

        certificate, created = await certificate_service.issue_completion_certificate(
            user_id, course_id
        )

        assert created is False
        assert certificate.certificate_id == "CERT-2-winnerxyz"
        delete_call = mock_session.aexecute.await_args_list[3]
        assert delete_call.args[0].startswith("DELETE FROM test_keyspace.certificates")
        assert delete_call.args[0].endswith("IF EXISTS")

    @pytest.mark.asyncio
    async def test_id_collision_retried(
        self, certificate_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.side_effect = [
            make_result(None),
            make_result(was_applied=False),  # id taken
            make_result(was_applied=True),
            make_result(was_applied=True),
        ]

        _, created = await certificate_service.issue_completion_certificate(
            uuid4(), uuid4()
        )

        assert created is True
        first_id = mock_session.aexecute.await_args_list[1].args[1][0]
        second_id = mock_session.aexecute.await_args_list[2].args[1][0]
        assert first_id != second_id


class TestGenerateStudentCertificate:
    @pytest.mark.asyncio
    async def test_requires_completed_enrollment(
        self, certificate_service, enrollment_service
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        enrollment_service.get_enrollment.return_value = Enrollment(
            user_id=user_id, course_id=course_id, status="ACTIVE"
        )

        with pytest.raises(CourseNotCompletedError):
            await certificate_service.generate_student_certificate(user_id, course_id)

    @pytest.mark.asyncio
    async def test_missing_enrollment(self, certificate_service) -> None:
        with pytest.raises(CourseNotCompletedError):
            await certificate_service.generate_student_certificate(uuid4(), uuid4())

    @pytest.mark.asyncio
    async def test_completed_enrollment(
        self, certificate_service, enrollment_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        enrollment_service.get_enrollment.return_value = Enrollment(
            user_id=user_id, course_id=course_id, status="COMPLETED"
        )
        mock_session.aexecute.side_effect = [
            make_result(None),
            make_result(was_applied=True),
            make_result(was_applied=True),
        ]

        certificate, created = await certificate_service.generate_student_certificate(
            user_id, course_id
        )

        assert created is True
        assert certificate.type == "STUDENT"
        assert certificate.certificate_url == (
            f"/api/certificate/generate-pdf/{certificate.certificate_id}"
        )


class TestListCertificates:
    @pytest.mark.asyncio
    async def test_newest_first_with_holder_and_course(
        self, certificate_service, auth_service, course_service, mock_session
    ) -> None:
        user = User(email="vera@planetnine.io", name="Vera Rubin")
        course = Course(title="Planetary Science")
        older = certificate_row(user.id, course.id, "CERT-1-olderxxxx")
        older.issued_at = datetime(2026, 2, 1, tzinfo=UTC)
        newer = certificate_row(user.id, course.id, "CERT-2-newerxxxx")
        newer.issued_at = datetime(2026, 6, 1, tzinfo=UTC)
        mock_session.aexecute.return_value = [older, newer]
        auth_service.get_user_by_id.return_value = user
        course_service.get_course.return_value = course

        items = await certificate_service.list_certificates(limit=10)

        assert [c.certificate_id for c in items] == [
            "CERT-2-newerxxxx",
            "CERT-1-olderxxxx",
        ]
        assert items[0].student_name == "Vera Rubin"
        assert items[0].student_email == "vera@planetnine.io"
        assert items[0].course_title == "Planetary Science"
        auth_service.get_user_by_id.assert_awaited_once_with(user.id)
        course_service.get_course.assert_awaited_once_with(course.id)
        assert mock_session.aexecute.await_args.args[1] == [10]

    @pytest.mark.asyncio
    async def test_missing_holder_and_course(
        self, certificate_service, mock_session
    ) -> None:
        mock_session.aexecute.return_value = [
            certificate_row(uuid4(), uuid4(), "CERT-3-orphanxxx")
        ]

        [item] = await certificate_service.list_certificates()

        assert item.student_name == ""
        assert item.student_email == ""
        assert item.course_title == ""
