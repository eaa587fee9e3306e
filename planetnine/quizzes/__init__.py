"""Module quizzes, scoring and the submission workflow.

Note: Router is not exported here to avoid circular imports.
Import directly from planetnine.quizzes.router when needed.
"""

from .models import QUIZZES_TABLES_CQL, AttemptStatus, Question, Quiz, QuizAttempt
from .scoring import ScoreResult, percent_rounded, score_answers
from .service import QuizService
from .workflow import QuizWorkflow


__all__ = [
    "QUIZZES_TABLES_CQL",
    "AttemptStatus",
    "Question",
    "Quiz",
    "QuizAttempt",
    "QuizService",
    "QuizWorkflow",
    "ScoreResult",
    "percent_rounded",
    "score_answers",
]
