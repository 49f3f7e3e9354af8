from fastapi import APIRouter, Depends, Query

from app.core.cache import QuestionSetCache, get_question_cache
from app.core.config import settings
from app.core.dependencies import get_current_admin, get_current_user
from app.models.user import User
from app.schemas.question_bank import (
    BankSubjectsResponse,
    CacheInvalidateResponse,
    QuestionSetResponse,
)
from app.services.question_bank import QuestionBankClient

router = APIRouter(prefix="/question-bank", tags=["Question Bank"])


def get_question_bank(
    cache: QuestionSetCache = Depends(get_question_cache),
) -> QuestionBankClient:
    return QuestionBankClient(cache)


@router.get("/subjects", response_model=BankSubjectsResponse)
def list_bank_subjects(
    client: QuestionBankClient = Depends(get_question_bank),
    current_user: User = Depends(get_current_user),
):
    return {"subjects": client.available_subjects()}


@router.get("/questions", response_model=QuestionSetResponse)
def get_bank_questions(
    subject: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(10, ge=1, le=settings.question_bank_max_limit),
    fresh: bool = Query(False, description="Bypass the cached question set"),
    client: QuestionBankClient = Depends(get_question_bank),
    current_user: User = Depends(get_current_user),
):
    """
    Fetch questions from the external question bank, answer key included.
    Score the attempt client-side and post it to /quizzes/results.
    """
    questions, cached = client.fetch_questions(subject, limit, fresh=fresh)
    return {"subject": subject, "cached": cached, "questions": questions}


@router.delete("/cache/{subject}", response_model=CacheInvalidateResponse)
def invalidate_bank_cache(
    subject: str,
    cache: QuestionSetCache = Depends(get_question_cache),
    current_admin: User = Depends(get_current_admin),
):
    """Drop cached question sets for a subject. Admin only."""
    return {"subject": subject, "removed": cache.invalidate(subject)}
