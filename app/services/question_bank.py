# app/services/question_bank.py
"""
Client for the third-party question bank (quizapi.io).

Questions are passed to the browser together with their answer key; the
browser scores the attempt and posts the result to ``/quizzes/results``.
Nothing fetched here is stored on the server.
"""

import logging
from typing import List, Optional, Tuple

import requests

from app.core.cache import QuestionSetCache
from app.core.config import settings
from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

ANSWER_KEYS = ["answer_a", "answer_b", "answer_c", "answer_d", "answer_e", "answer_f"]


def normalize_question(item: dict) -> Optional[dict]:
    """
    Convert one quizapi.io item to {question, options, correct_answer, points}.
    Items without exactly one correct option are dropped.
    """
    answers = item.get("answers") or {}
    flags = item.get("correct_answers") or {}

    options = []
    correct_indices = []
    for key in ANSWER_KEYS:
        text = answers.get(key)
        if text is None or text == "":
            continue
        if str(flags.get(f"{key}_correct", "false")).lower() == "true":
            correct_indices.append(len(options))
        options.append(text)

    question = (item.get("question") or "").strip()
    if not question or len(options) < 2 or len(correct_indices) != 1:
        return None

    return {
        "question": question,
        "options": options,
        "correct_answer": correct_indices[0],
        "points": 1,
        "explanation": item.get("explanation"),
    }


class QuestionBankClient:
    def __init__(
        self,
        cache: QuestionSetCache,
        base_url: str = settings.question_bank_url,
        api_key: str = settings.question_bank_api_key,
        difficulty: str = settings.question_bank_difficulty,
        timeout: int = settings.question_bank_timeout,
    ):
        self.cache = cache
        self.base_url = base_url
        self.api_key = api_key
        self.difficulty = difficulty
        self.timeout = timeout

    def available_subjects(self) -> List[str]:
        return list(settings.question_bank_subjects)

    def fetch_questions(
        self, subject: str, limit: int = 10, fresh: bool = False
    ) -> Tuple[List[dict], bool]:
        """
        Questions for a subject. Returns (questions, served_from_cache).
        ``fresh`` skips the cache lookup but still refreshes the entry.
        """
        if not fresh:
            cached = self.cache.get(subject, limit)
            if cached is not None:
                logger.debug(f"Question bank cache hit: {subject} x{limit}")
                return cached, True

        params = {
            "apiKey": self.api_key,
            "limit": str(limit),
            "category": subject.lower(),
            "difficulty": self.difficulty,
        }

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout:
            logger.warning(f"Question bank timed out for subject '{subject}'")
            raise UpstreamError(
                "Quiz API request timeout. Please try again.", status_code=504
            )
        except ValueError:
            logger.error(f"Question bank returned invalid JSON for '{subject}'")
            raise UpstreamError("Question bank returned an invalid response")
        except requests.RequestException as e:
            logger.error(f"Question bank request failed for '{subject}': {e}")
            raise UpstreamError("Failed to fetch quiz questions")

        if not isinstance(payload, list):
            logger.error(f"Unexpected question bank payload for '{subject}': {type(payload).__name__}")
            raise UpstreamError("Question bank returned an invalid response")

        questions = [q for q in (normalize_question(item) for item in payload) if q]
        skipped = len(payload) - len(questions)
        if skipped:
            logger.info(f"Skipped {skipped} question bank items without a single correct answer")

        self.cache.set(subject, limit, questions)
        return questions, False
