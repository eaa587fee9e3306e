"""Learner progress tracking module.

Provides:
- The monotonic module progress state machine
- Module unlock, start and completion per learner
- Course progress aggregation
"""

from .models import (
    PROGRESS_TABLES_CQL,
    ModuleProgress,
    ProgressEvent,
    ProgressStatus,
    advance,
)


__all__ = [
    "PROGRESS_TABLES_CQL",
    "ModuleProgress",
    "ProgressEvent",
    "ProgressStatus",
    "advance",
]
