# app/services/scoring.py
from typing import List, Optional, Sequence

from app.core.exceptions import ValidationFailed

UNANSWERED = -1


def normalize_answers(answers: Sequence[Optional[int]]) -> List[int]:
    """Stored form of a user's answers: null and negative entries become UNANSWERED."""
    return [UNANSWERED if a is None or a < 0 else a for a in answers]


def count_correct(answers: Sequence[Optional[int]], questions: Sequence[dict]) -> int:
    """
    Count answers matching each question's ``correct_answer``.

    Only the first ``len(questions)`` answers are considered. Missing,
    unanswered and out-of-range entries count as incorrect.
    """
    correct = 0
    for index, question in enumerate(questions):
        if index >= len(answers):
            break
        selected = answers[index]
        if selected is None or selected < 0:
            continue
        if selected == question.get("correct_answer"):
            correct += 1
    return correct


def compute_score(correct_answers: int, total_questions: int) -> int:
    """Percentage of correct answers, rounded half up, in [0, 100]."""
    if total_questions < 1:
        raise ValidationFailed("Quiz has no questions")
    if correct_answers < 0 or correct_answers > total_questions:
        raise ValidationFailed(
            f"correct_answers must be between 0 and {total_questions}"
        )
    # Integer form of floor(correct * 100 / total + 0.5)
    return (200 * correct_answers + total_questions) // (2 * total_questions)


def fit_answers(answers: Sequence[Optional[int]], total_questions: int) -> List[int]:
    """
    Stored form of answers to a quiz with ``total_questions`` questions:
    exactly one entry per question, UNANSWERED where nothing was given.
    """
    answers = list(answers[:total_questions])
    answers.extend([None] * (total_questions - len(answers)))
    return normalize_answers(answers)
