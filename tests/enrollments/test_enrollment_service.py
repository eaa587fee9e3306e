"""Tests for enrollment creation, status transitions and course listings."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import UUID, uuid4

import pytest

from planetnine.enrollments.models import (
    EnrollmentStatus,
    PaymentStatus,
    can_transition,
)
from planetnine.enrollments.service import (
    EnrollmentNotFoundError,
    EnrollmentService,
    InvalidEnrollmentTransitionError,
)


@pytest.fixture
def progress_service() -> Mock:
    service = Mock()
    service.unlock_first_module = AsyncMock()
    return service


@pytest.fixture
def enrollment_service(mock_session, progress_service) -> EnrollmentService:
    return EnrollmentService(
        session=mock_session,
        keyspace="test_keyspace",
        progress_service=progress_service,
    )


def enrollment_row(user_id: UUID, course_id: UUID, status: str):
    return SimpleNamespace(
        user_id=user_id,
        course_id=course_id,
        status=status,
        payment_status="PENDING",
        created_at=datetime.now(UTC),
        updated_at=None,
    )


class TestCanTransition:
    @pytest.mark.parametrize(
        "current,new",
        [
            ("PENDING", "APPROVED"),
            ("PENDING", "REJECTED"),
            ("APPROVED", "ACTIVE"),
            ("ACTIVE", "COMPLETED"),
            ("ACTIVE", "CANCELLED"),
        ],
    )
    def test_allowed(self, current: str, new: str) -> None:
        assert can_transition(current, new) is True

    @pytest.mark.parametrize(
        "current,new",
        [
            ("COMPLETED", "PENDING"),
            ("REJECTED", "APPROVED"),
            ("CANCELLED", "ACTIVE"),
            ("PENDING", "COMPLETED"),
        ],
    )
    def test_rejected(self, current: str, new: str) -> None:
        assert can_transition(current, new) is False


class TestCreateEnrollment:
    @pytest.mark.asyncio
    async def test_new_enrollment_is_pending(
        self, enrollment_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.return_value = make_result(was_applied=True)

        enrollment, created = await enrollment_service.create_enrollment(
            user_id, course_id
        )

        assert created is True
        assert enrollment.status == EnrollmentStatus.PENDING.value
        assert enrollment.payment_status == PaymentStatus.PENDING.value
        # enrollments + enrollments_by_course
        assert mock_session.aexecute.await_count == 2

    @pytest.mark.asyncio
    async def test_existing_enrollment_returned(
        self, enrollment_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.side_effect = [
            make_result(was_applied=False),
            make_result(enrollment_row(user_id, course_id, "APPROVED")),
        ]

        enrollment, created = await enrollment_service.create_enrollment(
            user_id, course_id
        )

        assert created is False
        assert enrollment.status == "APPROVED"


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_missing_enrollment(
        self, enrollment_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.return_value = make_result(None)

        with pytest.raises(EnrollmentNotFoundError):
            await enrollment_service.update_status(
                uuid4(), uuid4(), EnrollmentStatus.APPROVED
            )

    @pytest.mark.asyncio
    async def test_approval_unlocks_first_module(
        self, enrollment_service, progress_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.return_value = make_result(
            enrollment_row(user_id, course_id, "PENDING")
        )

        enrollment = await enrollment_service.update_status(
            user_id, course_id, EnrollmentStatus.APPROVED, PaymentStatus.PAID
        )

        assert enrollment.status == "APPROVED"
        assert enrollment.payment_status == "PAID"
        progress_service.unlock_first_module.assert_awaited_once_with(
            user_id, course_id
        )

    @pytest.mark.asyncio
    async def test_reapproval_does_not_unlock_again(
        self, enrollment_service, progress_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.return_value = make_result(
            enrollment_row(user_id, course_id, "APPROVED")
        )

        await enrollment_service.update_status(
            user_id, course_id, EnrollmentStatus.APPROVED
        )

        progress_service.unlock_first_module.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_transition(
        self, enrollment_service, mock_session, make_result
    ) -> None:
        user_id, course_id = uuid4(), uuid4()
        mock_session.aexecute.return_value = make_result(
            enrollment_row(user_id, course_id, "COMPLETED")
        )

        with pytest.raises(InvalidEnrollmentTransitionError):
            await enrollment_service.update_status(
                user_id, course_id, EnrollmentStatus.PENDING
            )

        assert mock_session.aexecute.await_count == 1


class TestCourseEnrollments:
    @pytest.mark.asyncio
    async def test_reads_course_lookup_newest_first(
        self, enrollment_service, mock_session
    ) -> None:
        course_id = uuid4()
        first, second = uuid4(), uuid4()
        mock_session.aexecute.return_value = [
            SimpleNamespace(
                course_id=course_id,
                user_id=first,
                status="APPROVED",
                created_at=datetime(2026, 1, 5, tzinfo=UTC),
            ),
            SimpleNamespace(
                course_id=course_id,
                user_id=second,
                status=None,
                created_at=datetime(2026, 3, 1, tzinfo=UTC),
            ),
        ]

        enrollments = await enrollment_service.list_course_enrollments(course_id)

        assert [e.user_id for e in enrollments] == [second, first]
        assert enrollments[0].status == EnrollmentStatus.PENDING.value
        assert enrollments[1].payment_status == PaymentStatus.PENDING.value
        statement, params = mock_session.aexecute.await_args.args
        assert "FROM test_keyspace.enrollments_by_course" in statement
        assert params == [course_id]


class TestCountByStatus:
    @pytest.mark.asyncio
    async def test_counts_completed(
        self, enrollment_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.return_value = make_result(SimpleNamespace(count=12))

        count = await enrollment_service.count_by_status(EnrollmentStatus.COMPLETED)

        assert count == 12
        statement, params = mock_session.aexecute.await_args.args
        assert statement.endswith("ALLOW FILTERING")
        assert params == ["COMPLETED"]

    @pytest.mark.asyncio
    async def test_no_row(self, enrollment_service, mock_session, make_result) -> None:
        mock_session.aexecute.return_value = make_result(None)
        assert await enrollment_service.count_by_status(EnrollmentStatus.COMPLETED) == 0
