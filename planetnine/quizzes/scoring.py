"""Quiz scoring.

Pure functions: no I/O, no settings lookups beyond the caller-supplied
threshold. Scores use ``percent_rounded`` (round half up).
"""

from collections.abc import Iterable, Mapping
from typing import NamedTuple

from planetnine.core.mathutils import percent_rounded
from planetnine.quizzes.models import Question


DEFAULT_PASS_THRESHOLD = 80


class ScoreResult(NamedTuple):
    """Outcome of scoring one submission."""

    correct: int
    total: int
    score: int
    passed: bool


def score_answers(
    questions: Iterable[Question],
    answers: Mapping[str, str],
    pass_threshold: int = DEFAULT_PASS_THRESHOLD,
) -> ScoreResult:
    """Score a submission against a quiz's questions.

    An answer counts only when it exactly equals the question's correct
    answer. Unanswered questions and answers to unknown question ids are
    simply not counted.

    Args:
        questions: The quiz's questions (at least one)
        answers: Submitted answers keyed by question id (string form)
        pass_threshold: Minimum score that passes

    Returns:
        ScoreResult with the rounded score and pass flag
    """
    questions = list(questions)
    correct = sum(1 for q in questions if answers.get(str(q.id)) == q.correct_answer)
    score = percent_rounded(correct, len(questions))
    return ScoreResult(
        correct=correct,
        total=len(questions),
        score=score,
        passed=score >= pass_threshold,
    )
