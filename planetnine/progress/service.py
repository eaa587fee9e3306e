"""Learner progress service layer.

Business logic for:
- Unlocking, starting and completing modules through the progress state
  machine (``advance``)
- Unlocking a course's first module when an enrollment is approved
- Course progress aggregation
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from planetnine.core.exceptions import PermissionDeniedError
from planetnine.core.mathutils import percent_rounded
from planetnine.core.timeutils import utcnow
from planetnine.progress.models import ModuleProgress, ProgressEvent, ProgressStatus
from planetnine.progress.schemas import CourseProgressResponse, ModuleProgressSummary


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from planetnine.courses.service import CourseService

logger = structlog.get_logger(__name__)

LOCKED = "LOCKED"


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class ModuleLockedError(PermissionDeniedError):
    """Learner has not unlocked the module yet."""

    default_message = "Module is locked. Complete the previous module first."
    default_code = "module_locked"


# ==============================================================================
# Progress Service
# ==============================================================================


class ProgressService:
    """Service for per-module learner progress."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        course_service: "CourseService",
    ):
        """Initialize with Cassandra session.

        Args:
            session: Cassandra session with aexecute() support
            keyspace: Keyspace name for queries
            course_service: Module sequencing lookups
        """
        self.session = session
        self.keyspace = keyspace
        self.course_service = course_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_module_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.module_progress
            WHERE user_id = ? AND course_id = ? AND module_id = ?
        """)
        self._get_course_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.module_progress
            WHERE user_id = ? AND course_id = ?
        """)
        self._upsert_module_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.module_progress
            (user_id, course_id, module_id, status, unlocked_at, started_at,
             completed_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

    async def _save(self, progress: ModuleProgress) -> None:
        await self.session.aexecute(
            self._upsert_module_progress,
            [
                progress.user_id,
                progress.course_id,
                progress.module_id,
                progress.status,
                progress.unlocked_at,
                progress.started_at,
                progress.completed_at,
                progress.updated_at,
            ],
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_module_progress(
        self, user_id: UUID, course_id: UUID, module_id: UUID
    ) -> ModuleProgress | None:
        """Get a learner's progress row for a module (None = locked)."""
        result = await self.session.aexecute(
            self._get_module_progress, [user_id, course_id, module_id]
        )
        row = result.one()
        return ModuleProgress.from_row(row) if row else None

    async def list_course_progress(
        self, user_id: UUID, course_id: UUID
    ) -> list[ModuleProgress]:
        """Get all of a learner's progress rows for a course."""
        rows = await self.session.aexecute(
            self._get_course_progress, [user_id, course_id]
        )
        return [ModuleProgress.from_row(row) for row in rows]

    async def get_course_progress(
        self, user_id: UUID, course_id: UUID
    ) -> CourseProgressResponse:
        """Summarize a learner's progress across every module of a course."""
        modules = await self.course_service.list_course_modules(course_id)
        by_module = {
            p.module_id: p for p in await self.list_course_progress(user_id, course_id)
        }

        summaries = []
        for module in modules:
            progress = by_module.get(module.id)
            summaries.append(
                ModuleProgressSummary(
                    module_id=module.id,
                    title=module.title,
                    order=module.order,
                    status=progress.status if progress else LOCKED,
                    completed_at=progress.completed_at if progress else None,
                )
            )

        completed = sum(1 for s in summaries if s.status == ProgressStatus.COMPLETED)
        total = len(summaries)
        return CourseProgressResponse(
            course_id=course_id,
            modules=summaries,
            completed_modules=completed,
            total_modules=total,
            progress_percent=percent_rounded(completed, total) if total else 0,
        )

    # ==========================================================================
    # Transitions
    # ==========================================================================

    async def unlock_module(
        self, user_id: UUID, course_id: UUID, module_id: UUID
    ) -> ModuleProgress:
        """Make a module available, creating its progress row if absent.

        Already started or completed modules keep their status.
        """
        progress = await self.get_module_progress(user_id, course_id, module_id)
        if progress is None:
            progress = ModuleProgress(
                user_id=user_id,
                course_id=course_id,
                module_id=module_id,
                status=ProgressStatus.UNLOCKED.value,
                unlocked_at=utcnow(),
            )
            await self._save(progress)
        elif progress.apply(ProgressEvent.UNLOCK):
            await self._save(progress)
        else:
            return progress

        logger.info(
            "module_unlocked",
            user_id=str(user_id),
            course_id=str(course_id),
            module_id=str(module_id),
        )
        return progress

    async def start_module(
        self, user_id: UUID, course_id: UUID, module_id: UUID
    ) -> ModuleProgress:
        """Mark an unlocked module as in progress.

        Raises:
            ModuleLockedError: If the learner has no progress row for the module
        """
        progress = await self.get_module_progress(user_id, course_id, module_id)
        if progress is None:
            raise ModuleLockedError

        if progress.apply(ProgressEvent.START):
            await self._save(progress)
            logger.info(
                "module_started",
                user_id=str(user_id),
                module_id=str(module_id),
            )
        return progress

    async def complete_module(
        self, user_id: UUID, course_id: UUID, module_id: UUID
    ) -> int:
        """Mark the learner's existing progress row for a module COMPLETED.

        No row is created when the learner has none.

        Returns:
            Number of progress rows matched (0 or 1)
        """
        progress = await self.get_module_progress(user_id, course_id, module_id)
        if progress is None:
            logger.warning(
                "module_progress_missing",
                user_id=str(user_id),
                course_id=str(course_id),
                module_id=str(module_id),
            )
            return 0

        if progress.apply(ProgressEvent.COMPLETE):
            await self._save(progress)
            logger.info(
                "module_completed",
                user_id=str(user_id),
                course_id=str(course_id),
                module_id=str(module_id),
            )
        return 1

    async def unlock_first_module(
        self, user_id: UUID, course_id: UUID
    ) -> ModuleProgress | None:
        """Unlock the lowest-order module of a course for a learner.

        Returns:
            The progress row, or None if the course has no modules
        """
        first = await self.course_service.get_first_module(course_id)
        if first is None:
            logger.warning("course_has_no_modules", course_id=str(course_id))
            return None
        return await self.unlock_module(user_id, course_id, first.id)
