"""Database models for learner progress.

Cassandra table definitions for per-learner, per-module progress, plus the
module progress state machine.

A module with no progress row is LOCKED for that learner. Rows only move
forward: UNLOCKED -> IN_PROGRESS -> COMPLETED.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from planetnine.core.timeutils import ensure_utc_aware, utcnow


class ProgressStatus(str, Enum):
    """Module progress status (LOCKED is implicit: no row)."""

    UNLOCKED = "UNLOCKED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ProgressEvent(str, Enum):
    """Events that move a module's progress forward."""

    UNLOCK = "UNLOCK"
    START = "START"
    COMPLETE = "COMPLETE"


# ==============================================================================
# State Machine
# ==============================================================================

_RANK: dict[ProgressStatus, int] = {
    ProgressStatus.UNLOCKED: 0,
    ProgressStatus.IN_PROGRESS: 1,
    ProgressStatus.COMPLETED: 2,
}

_EVENT_TARGET: dict[ProgressEvent, ProgressStatus] = {
    ProgressEvent.UNLOCK: ProgressStatus.UNLOCKED,
    ProgressEvent.START: ProgressStatus.IN_PROGRESS,
    ProgressEvent.COMPLETE: ProgressStatus.COMPLETED,
}


def advance(
    current: ProgressStatus | str | None, event: ProgressEvent
) -> ProgressStatus:
    """Apply an event to a module's progress status.

    Transitions are monotonic: an event never moves a status backwards, so
    unlocking an already started or completed module is a no-op.

    Examples:
        >>> advance(None, ProgressEvent.UNLOCK)
        <ProgressStatus.UNLOCKED: 'UNLOCKED'>
        >>> advance(ProgressStatus.COMPLETED, ProgressEvent.UNLOCK)
        <ProgressStatus.COMPLETED: 'COMPLETED'>
    """
    target = _EVENT_TARGET[event]
    if current is None:
        return target

    current = ProgressStatus(current)
    return target if _RANK[target] > _RANK[current] else current


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partition key: (user_id, course_id) so a learner's whole course is one read
MODULE_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.module_progress (
    user_id UUID,
    course_id UUID,
    module_id UUID,
    status TEXT,
    unlocked_at TIMESTAMP,
    started_at TIMESTAMP,
    completed_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((user_id, course_id), module_id)
)
"""

PROGRESS_TABLES_CQL = [
    MODULE_PROGRESS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class ModuleProgress:
    """A learner's progress on one module.

    Attributes:
        user_id: Learner
        course_id: Course the module belongs to
        module_id: Module
        status: UNLOCKED, IN_PROGRESS or COMPLETED
        unlocked_at: When the module became available
        started_at: When the learner opened it
        completed_at: When its quiz was submitted
        updated_at: Last transition timestamp
    """

    def __init__(
        self,
        user_id: UUID,
        course_id: UUID,
        module_id: UUID,
        status: str = ProgressStatus.UNLOCKED.value,
        unlocked_at: datetime | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.course_id = course_id
        self.module_id = module_id
        self.status = status
        self.unlocked_at = ensure_utc_aware(unlocked_at)
        self.started_at = ensure_utc_aware(started_at)
        self.completed_at = ensure_utc_aware(completed_at)
        self.updated_at = ensure_utc_aware(updated_at) or utcnow()

    @property
    def is_completed(self) -> bool:
        return self.status == ProgressStatus.COMPLETED.value

    def apply(self, event: ProgressEvent, at: datetime | None = None) -> bool:
        """Advance this row in place.

        Completing an already completed module restamps ``completed_at``, so
        the row records the latest quiz submission.

        Returns:
            True if the row changed and must be saved
        """
        new_status = advance(self.status, event)
        now = at or utcnow()
        if new_status.value == self.status:
            if event != ProgressEvent.COMPLETE:
                return False
            self.completed_at = now
            self.updated_at = now
            return True

        self.status = new_status.value
        self.updated_at = now
        if new_status == ProgressStatus.UNLOCKED:
            self.unlocked_at = self.unlocked_at or now
        elif new_status == ProgressStatus.IN_PROGRESS:
            self.started_at = self.started_at or now
        else:
            self.completed_at = now
        return True

    @classmethod
    def from_row(cls, row: Any) -> "ModuleProgress":
        """Create ModuleProgress instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            module_id=row.module_id,
            status=row.status or ProgressStatus.UNLOCKED.value,
            unlocked_at=row.unlocked_at,
            started_at=row.started_at,
            completed_at=row.completed_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "course_id": self.course_id,
            "module_id": self.module_id,
            "status": self.status,
            "unlocked_at": self.unlocked_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<ModuleProgress {self.module_id} ({self.status})>"
