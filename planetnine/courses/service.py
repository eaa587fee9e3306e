"""Course catalog service layer.

Business logic for:
- Course creation, update, deletion and the published catalog
- Tutor course listings and catalog counts
- Module creation with unique, ordered positions
- Module sequencing (first module, next module after a position)
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.core.exceptions import ConflictError, NotFoundError
from planetnine.core.timeutils import utcnow
from planetnine.courses.models import Course, CourseStatus, Module
from planetnine.courses.schemas import (
    CreateCourseRequest,
    CreateModuleRequest,
    UpdateCourseRequest,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CourseNotFoundError(NotFoundError):
    """Course not found."""

    default_message = "Course not found"
    default_code = "course_not_found"


class ModuleNotFoundError(NotFoundError):
    """Module not found."""

    default_message = "Module not found"
    default_code = "module_not_found"


class ModuleOrderConflictError(ConflictError):
    """Another module already holds this position in the course."""

    default_message = "A module with this order already exists in the course"
    default_code = "module_order_conflict"


# ==============================================================================
# Course Service
# ==============================================================================


class CourseService:
    """Service for courses and their ordered modules."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        # Courses
        self._get_course_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses WHERE id = ?"
        )
        self._insert_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses
            (id, title, description, price, status, tutor_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._insert_course_by_status = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses_by_status
            (status, created_at, course_id)
            VALUES (?, ?, ?)
        """)
        self._get_courses_by_status = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses_by_status WHERE status = ? LIMIT ?"
        )
        self._update_course = self.session.prepare(f"""
            UPDATE {self.keyspace}.courses
            SET title = ?, description = ?, price = ?, status = ?, updated_at = ?
            WHERE id = ?
        """)
        self._delete_course = self.session.prepare(
            f"DELETE FROM {self.keyspace}.courses WHERE id = ?"
        )
        self._delete_course_by_status = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.courses_by_status
            WHERE status = ? AND created_at = ? AND course_id = ?
        """)
        self._insert_course_by_tutor = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses_by_tutor
            (tutor_id, created_at, course_id)
            VALUES (?, ?, ?)
        """)
        self._delete_course_by_tutor = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.courses_by_tutor
            WHERE tutor_id = ? AND created_at = ? AND course_id = ?
        """)
        self._get_courses_by_tutor = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses_by_tutor WHERE tutor_id = ? LIMIT ?"
        )
        self._count_courses = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.courses"
        )
        self._count_courses_by_status = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.courses_by_status WHERE status = ?"
        )

        # Modules
        self._get_module_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.modules WHERE id = ?"
        )
        self._insert_module = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.modules
            (id, course_id, title, description, position, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """)
        self._claim_module_position = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.modules_by_course
            (course_id, position, module_id, title, description, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self._delete_module = self.session.prepare(
            f"DELETE FROM {self.keyspace}.modules WHERE id = ?"
        )
        self._delete_course_modules = self.session.prepare(
            f"DELETE FROM {self.keyspace}.modules_by_course WHERE course_id = ?"
        )
        self._get_course_modules = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.modules_by_course WHERE course_id = ?"
        )
        self._get_first_module = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.modules_by_course WHERE course_id = ? LIMIT 1"
        )
        self._get_next_module = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.modules_by_course
            WHERE course_id = ? AND position > ?
            LIMIT 1
        """)

    # ==========================================================================
    # Course Operations
    # ==========================================================================

    async def create_course(self, data: CreateCourseRequest, tutor_id: UUID) -> Course:
        """Create a new course owned by ``tutor_id``."""
        course = Course(
            title=data.title,
            description=data.description,
            price=data.price,
            status=data.status.value,
            tutor_id=tutor_id,
        )

        await self.session.aexecute(
            self._insert_course,
            [
                course.id,
                course.title,
                course.description,
                course.price,
                course.status,
                course.tutor_id,
                course.created_at,
                course.updated_at,
            ],
        )
        await self.session.aexecute(
            self._insert_course_by_status,
            [course.status, course.created_at, course.id],
        )
        if course.tutor_id:
            await self.session.aexecute(
                self._insert_course_by_tutor,
                [course.tutor_id, course.created_at, course.id],
            )

        logger.info("course_created", course_id=str(course.id), status=course.status)
        return course

    async def update_course(self, course_id: UUID, data: UpdateCourseRequest) -> Course:
        """Update course fields, moving its catalog row when the status changes.

        Raises:
            CourseNotFoundError: If the course does not exist
        """
        course = await self.require_course(course_id)
        old_status = course.status

        if data.title is not None:
            course.title = data.title.strip()
        if data.description is not None:
            course.description = data.description
        if data.price is not None:
            course.price = data.price
        if data.status is not None:
            course.status = data.status.value

        course.updated_at = utcnow()

        await self.session.aexecute(
            self._update_course,
            [
                course.title,
                course.description,
                course.price,
                course.status,
                course.updated_at,
                course.id,
            ],
        )

        if old_status != course.status:
            await self.session.aexecute(
                self._delete_course_by_status,
                [old_status, course.created_at, course.id],
            )
            await self.session.aexecute(
                self._insert_course_by_status,
                [course.status, course.created_at, course.id],
            )
            logger.info(
                "course_status_changed",
                course_id=str(course.id),
                old_status=old_status,
                new_status=course.status,
            )

        logger.info("course_updated", course_id=str(course.id))
        return course

    async def delete_course(self, course_id: UUID) -> None:
        """Delete a course, its lookup rows and its modules.

        Raises:
            CourseNotFoundError: If the course does not exist
        """
        course = await self.require_course(course_id)

        for module in await self.list_course_modules(course_id):
            await self.session.aexecute(self._delete_module, [module.id])
        await self.session.aexecute(self._delete_course_modules, [course.id])

        await self.session.aexecute(
            self._delete_course_by_status,
            [course.status, course.created_at, course.id],
        )
        if course.tutor_id:
            await self.session.aexecute(
                self._delete_course_by_tutor,
                [course.tutor_id, course.created_at, course.id],
            )
        await self.session.aexecute(self._delete_course, [course.id])

        logger.info("course_deleted", course_id=str(course.id))

    async def get_course(self, course_id: UUID) -> Course | None:
        """Get course by ID."""
        result = await self.session.aexecute(self._get_course_by_id, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def require_course(self, course_id: UUID) -> Course:
        """Get course by ID or raise CourseNotFoundError."""
        course = await self.get_course(course_id)
        if course is None:
            raise CourseNotFoundError
        return course

    async def list_published_courses(self, limit: int = 50) -> list[Course]:
        """List published courses, newest first."""
        rows = await self.session.aexecute(
            self._get_courses_by_status, [CourseStatus.PUBLISHED.value, limit]
        )
        courses = []
        for row in rows:
            course = await self.get_course(row.course_id)
            if course and course.is_published:
                courses.append(course)
        return courses

    async def list_tutor_courses(self, tutor_id: UUID, limit: int = 100) -> list[Course]:
        """List courses authored by a tutor, newest first, in any status."""
        rows = await self.session.aexecute(self._get_courses_by_tutor, [tutor_id, limit])
        courses = []
        for row in rows:
            course = await self.get_course(row.course_id)
            if course:
                courses.append(course)
        return courses

    async def count_courses(self, status: CourseStatus | None = None) -> int:
        """Count all courses, or those in one status."""
        if status is None:
            result = await self.session.aexecute(self._count_courses, [])
        else:
            result = await self.session.aexecute(
                self._count_courses_by_status, [status.value]
            )
        row = result.one()
        return row.count if row else 0

    # ==========================================================================
    # Module Operations
    # ==========================================================================

    async def add_module(self, course_id: UUID, data: CreateModuleRequest) -> Module:
        """Append a module to a course at the requested position.

        Raises:
            CourseNotFoundError: If the course does not exist
            ModuleOrderConflictError: If the position is already taken
        """
        await self.require_course(course_id)

        module = Module(
            course_id=course_id,
            title=data.title,
            description=data.description,
            order=data.order,
        )

        result = await self.session.aexecute(
            self._claim_module_position,
            [
                module.course_id,
                module.order,
                module.id,
                module.title,
                module.description,
                module.created_at,
            ],
        )
        if not result.was_applied:
            raise ModuleOrderConflictError

        await self.session.aexecute(
            self._insert_module,
            [
                module.id,
                module.course_id,
                module.title,
                module.description,
                module.order,
                module.created_at,
            ],
        )

        logger.info(
            "module_created",
            course_id=str(course_id),
            module_id=str(module.id),
            order=module.order,
        )
        return module

    async def get_module(self, module_id: UUID) -> Module | None:
        """Get module by ID."""
        result = await self.session.aexecute(self._get_module_by_id, [module_id])
        row = result.one()
        return Module.from_row(row) if row else None

    async def list_course_modules(self, course_id: UUID) -> list[Module]:
        """List a course's modules in ascending order."""
        rows = await self.session.aexecute(self._get_course_modules, [course_id])
        return [Module.from_course_row(row) for row in rows]

    async def get_first_module(self, course_id: UUID) -> Module | None:
        """Get the module with the smallest order in the course."""
        result = await self.session.aexecute(self._get_first_module, [course_id])
        row = result.one()
        return Module.from_course_row(row) if row else None

    async def find_next_module(self, course_id: UUID, after_order: int) -> Module | None:
        """Get the module with the smallest order strictly greater than ``after_order``.

        Returns:
            The next module, or None when ``after_order`` is the last position
        """
        result = await self.session.aexecute(
            self._get_next_module, [course_id, after_order]
        )
        row = result.one()
        return Module.from_course_row(row) if row else None
