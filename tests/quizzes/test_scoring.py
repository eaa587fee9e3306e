"""Tests for quiz scoring."""

from uuid import uuid4

import pytest

from planetnine.quizzes.models import Question
from planetnine.quizzes.scoring import percent_rounded, score_answers


def make_questions(count: int) -> list[Question]:
    quiz_id = uuid4()
    return [
        Question(
            quiz_id=quiz_id,
            text=f"Question {i}",
            options=["a", "b", "c"],
            correct_answer="a",
            order=i,
        )
        for i in range(count)
    ]


class TestPercentRounded:
    """Tests for half-up percentage rounding."""

    @pytest.mark.parametrize(
        "correct,total,expected",
        [
            (0, 4, 0),
            (4, 4, 100),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),  # 12.5 rounds up
            (5, 8, 63),  # 62.5 rounds up, not to even
            (4, 5, 80),
            (159, 200, 80),  # 79.5 rounds up to the pass mark
        ],
    )
    def test_values(self, correct: int, total: int, expected: int) -> None:
        assert percent_rounded(correct, total) == expected

    def test_zero_total_rejected(self) -> None:
        with pytest.raises(ValueError):
            percent_rounded(0, 0)


class TestScoreAnswers:
    """Tests for scoring a submission."""

    def test_all_correct_passes(self) -> None:
        questions = make_questions(5)
        answers = {str(q.id): "a" for q in questions}

        result = score_answers(questions, answers)

        assert result.correct == 5
        assert result.total == 5
        assert result.score == 100
        assert result.passed is True

    def test_threshold_is_inclusive(self) -> None:
        questions = make_questions(5)
        answers = {str(q.id): "a" for q in questions[:4]}

        result = score_answers(questions, answers, pass_threshold=80)

        assert result.score == 80
        assert result.passed is True

    def test_below_threshold_fails(self) -> None:
        questions = make_questions(4)
        answers = {str(q.id): "a" for q in questions[:3]}

        result = score_answers(questions, answers, pass_threshold=80)

        assert result.score == 75
        assert result.passed is False

    def test_empty_answers_score_zero(self) -> None:
        result = score_answers(make_questions(3), {})
        assert result.score == 0
        assert result.passed is False

    def test_wrong_and_unknown_answers_do_not_count(self) -> None:
        questions = make_questions(2)
        answers = {
            str(questions[0].id): "b",
            str(uuid4()): "a",
        }

        result = score_answers(questions, answers)

        assert result.correct == 0

    def test_answers_must_match_exactly(self) -> None:
        questions = make_questions(1)
        result = score_answers(questions, {str(questions[0].id): "A"})
        assert result.correct == 0
