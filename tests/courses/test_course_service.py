"""Tests for course authoring and module sequencing in CourseService."""

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest

from planetnine.courses.models import Course, CourseStatus
from planetnine.courses.schemas import (
    CreateCourseRequest,
    CreateModuleRequest,
    UpdateCourseRequest,
)
from planetnine.courses.service import (
    CourseNotFoundError,
    CourseService,
    ModuleOrderConflictError,
)


@pytest.fixture
def course_service(mock_session) -> CourseService:
    return CourseService(session=mock_session, keyspace="test_keyspace")


def course_row(course: Course) -> SimpleNamespace:
    return SimpleNamespace(**course.to_dict())


class TestAddModule:
    @pytest.mark.asyncio
    async def test_claims_position_then_inserts(
        self, course_service, mock_session, make_result
    ) -> None:
        course = Course(title="Planetary Science")
        mock_session.aexecute.side_effect = [
            make_result(course_row(course)),
            make_result(was_applied=True),
            make_result(),
        ]

        module = await course_service.add_module(
            course.id, CreateModuleRequest(title="Orbits", order=3)
        )

        assert module.order == 3
        claim = mock_session.aexecute.await_args_list[1]
        assert "IF NOT EXISTS" in claim.args[0]
        assert claim.args[1][:3] == [course.id, 3, module.id]

    @pytest.mark.asyncio
    async def test_taken_position(
        self, course_service, mock_session, make_result
    ) -> None:
        course = Course(title="Planetary Science")
        mock_session.aexecute.side_effect = [
            make_result(course_row(course)),
            make_result(was_applied=False),
        ]

        with pytest.raises(ModuleOrderConflictError):
            await course_service.add_module(
                course.id, CreateModuleRequest(title="Orbits", order=0)
            )

        assert mock_session.aexecute.await_count == 2

    @pytest.mark.asyncio
    async def test_unknown_course(
        self, course_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.return_value = make_result(None)

        with pytest.raises(CourseNotFoundError):
            await course_service.add_module(
                uuid4(), CreateModuleRequest(title="Orbits", order=0)
            )


class TestFindNextModule:
    @pytest.mark.asyncio
    async def test_next_by_position(
        self, course_service, mock_session, make_result
    ) -> None:
        course_id, module_id = uuid4(), uuid4()
        mock_session.aexecute.return_value = make_result(
            SimpleNamespace(
                course_id=course_id,
                position=5,
                module_id=module_id,
                title="Rings",
                description=None,
                created_at=datetime.now(UTC),
            )
        )

        module = await course_service.find_next_module(course_id, 2)

        assert module.id == module_id
        assert module.order == 5
        statement, params = mock_session.aexecute.await_args.args
        assert "position > ?" in statement
        assert params == [course_id, 2]

    @pytest.mark.asyncio
    async def test_last_module(
        self, course_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.return_value = make_result(None)
        assert await course_service.find_next_module(uuid4(), 9) is None


class TestCreateCourse:
    @pytest.mark.asyncio
    async def test_writes_status_and_tutor_lookups(
        self, course_service, mock_session
    ) -> None:
        tutor_id = uuid4()

        course = await course_service.create_course(
            CreateCourseRequest(title="Planetary Science"), tutor_id=tutor_id
        )

        statements = [c.args[0] for c in mock_session.aexecute.await_args_list]
        assert len(statements) == 3
        assert "courses_by_status" in statements[1]
        assert "courses_by_tutor" in statements[2]
        assert mock_session.aexecute.await_args_list[2].args[1] == [
            tutor_id,
            course.created_at,
            course.id,
        ]


class TestUpdateCourse:
    @pytest.mark.asyncio
    async def test_status_change_moves_catalog_row(
        self, course_service, mock_session, make_result
    ) -> None:
        course = Course(title="Planetary Science", status="DRAFT", tutor_id=uuid4())
        mock_session.aexecute.side_effect = [
            make_result(course_row(course)),
            make_result(),
            make_result(),
            make_result(),
        ]

        updated = await course_service.update_course(
            course.id, UpdateCourseRequest(status=CourseStatus.PUBLISHED)
        )

        assert updated.status == "PUBLISHED"
        assert updated.title == "Planetary Science"
        assert updated.updated_at is not None
        calls = mock_session.aexecute.await_args_list
        assert calls[1].args[0].startswith("UPDATE test_keyspace.courses SET")
        assert calls[2].args[0].startswith("DELETE FROM test_keyspace.courses_by_status")
        assert calls[2].args[1] == ["DRAFT", course.created_at, course.id]
        assert calls[3].args[0].startswith("INSERT INTO test_keyspace.courses_by_status")
        assert calls[3].args[1] == ["PUBLISHED", course.created_at, course.id]

    @pytest.mark.asyncio
    async def test_same_status_keeps_catalog_row(
        self, course_service, mock_session, make_result
    ) -> None:
        course = Course(title="Planetary Science", status="PUBLISHED")
        mock_session.aexecute.side_effect = [
            make_result(course_row(course)),
            make_result(),
        ]

        updated = await course_service.update_course(
            course.id,
            UpdateCourseRequest(title="  Outer Planets ", status=CourseStatus.PUBLISHED),
        )

        assert updated.title == "Outer Planets"
        assert mock_session.aexecute.await_count == 2

    @pytest.mark.asyncio
    async def test_unknown_course(
        self, course_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.return_value = make_result(None)

        with pytest.raises(CourseNotFoundError):
            await course_service.update_course(
                uuid4(), UpdateCourseRequest(status=CourseStatus.PUBLISHED)
            )


class TestDeleteCourse:
    @pytest.mark.asyncio
    async def test_removes_modules_and_lookups(
        self, course_service, mock_session, make_result
    ) -> None:
        tutor_id = uuid4()
        course = Course(
            title="Planetary Science", status="PUBLISHED", tutor_id=tutor_id
        )
        module_id = uuid4()
        mock_session.aexecute.side_effect = [
            make_result(course_row(course)),
            [
                SimpleNamespace(
                    course_id=course.id,
                    position=0,
                    module_id=module_id,
                    title="Orbits",
                    description=None,
                    created_at=datetime.now(UTC),
                )
            ],
            make_result(),
            make_result(),
            make_result(),
            make_result(),
            make_result(),
        ]

        await course_service.delete_course(course.id)

        calls = mock_session.aexecute.await_args_list
        assert calls[2].args == (
            "DELETE FROM test_keyspace.modules WHERE id = ?",
            [module_id],
        )
        assert "modules_by_course" in calls[3].args[0]
        assert calls[4].args[1] == ["PUBLISHED", course.created_at, course.id]
        assert calls[5].args[1] == [tutor_id, course.created_at, course.id]
        assert calls[6].args == (
            "DELETE FROM test_keyspace.courses WHERE id = ?",
            [course.id],
        )


class TestTutorCourses:
    @pytest.mark.asyncio
    async def test_lists_drafts_newest_first(
        self, course_service, mock_session, make_result
    ) -> None:
        tutor_id = uuid4()
        newer = Course(title="Outer Planets", status="DRAFT", tutor_id=tutor_id)
        older = Course(title="Inner Planets", status="PUBLISHED", tutor_id=tutor_id)
        mock_session.aexecute.side_effect = [
            [SimpleNamespace(course_id=newer.id), SimpleNamespace(course_id=older.id)],
            make_result(course_row(newer)),
            make_result(course_row(older)),
        ]

        courses = await course_service.list_tutor_courses(tutor_id)

        assert [c.title for c in courses] == ["Outer Planets", "Inner Planets"]
        statement, params = mock_session.aexecute.await_args_list[0].args
        assert "courses_by_tutor" in statement
        assert params == [tutor_id, 100]


class TestCountCourses:
    @pytest.mark.asyncio
    async def test_all_courses(
        self, course_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.return_value = make_result(SimpleNamespace(count=7))

        assert await course_service.count_courses() == 7
        statement, params = mock_session.aexecute.await_args.args
        assert statement == "SELECT COUNT(*) FROM test_keyspace.courses"
        assert params == []

    @pytest.mark.asyncio
    async def test_by_status(
        self, course_service, mock_session, make_result
    ) -> None:
        mock_session.aexecute.return_value = make_result(SimpleNamespace(count=4))

        assert await course_service.count_courses(CourseStatus.PUBLISHED) == 4
        statement, params = mock_session.aexecute.await_args.args
        assert "courses_by_status WHERE status = ?" in statement
        assert params == ["PUBLISHED"]
