import pytest

from app.core.exceptions import ValidationFailed
from app.services.scoring import (
    UNANSWERED,
    compute_score,
    count_correct,
    fit_answers,
    normalize_answers,
)
from tests.factories import sample_questions


@pytest.mark.parametrize(
    "correct, total, expected",
    [
        (4, 5, 80),
        (0, 5, 0),
        (5, 5, 100),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),  # 12.5 rounds up
        (1, 200, 1),  # 0.5 rounds up
        (7, 9, 78),
    ],
)
def test_compute_score_rounds_half_up(correct, total, expected):
    assert compute_score(correct, total) == expected


def test_compute_score_bounds_and_extremes():
    for total in range(1, 200):
        assert compute_score(0, total) == 0
        assert compute_score(total, total) == 100
        for correct in range(0, total):
            assert 0 <= compute_score(correct, total) < 100


def test_compute_score_is_monotonic_in_correct_answers():
    for total in (1, 7, 13, 50):
        scores = [compute_score(c, total) for c in range(total + 1)]
        assert scores == sorted(scores)


@pytest.mark.parametrize("correct, total", [(0, 0), (-1, 5), (6, 5)])
def test_compute_score_rejects_impossible_counts(correct, total):
    with pytest.raises(ValidationFailed):
        compute_score(correct, total)


def test_count_correct_matches_answer_key():
    questions = sample_questions([0, 1, 2, 3, 1])
    assert count_correct([0, 1, 2, 3, 0], questions) == 4
    assert count_correct([0, 1, 2, 3, 1], questions) == 5


def test_count_correct_treats_missing_and_invalid_answers_as_incorrect():
    questions = sample_questions([0, 1, 2])
    # short list: missing trailing answers are unanswered
    assert count_correct([0], questions) == 1
    # None, negative and out-of-range indices never match
    assert count_correct([None, -1, 99], questions) == 0
    assert count_correct([], questions) == 0


def test_count_correct_ignores_extra_answers():
    questions = sample_questions([1, 1])
    assert count_correct([1, 1, 1, 1, 1], questions) == 2


def test_normalize_answers():
    assert normalize_answers([0, None, -5, 3]) == [0, UNANSWERED, UNANSWERED, 3]
    assert normalize_answers([]) == []


def test_fit_answers_pads_and_truncates_to_question_count():
    assert fit_answers([0, None, 7], 5) == [0, UNANSWERED, 7, UNANSWERED, UNANSWERED]
    assert fit_answers([1, 2, 3, 0, 1, 2], 4) == [1, 2, 3, 0]
    assert fit_answers([], 2) == [UNANSWERED, UNANSWERED]
