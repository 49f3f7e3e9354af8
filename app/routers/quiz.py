# app/routers/quiz.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import (
    get_current_student,
    get_current_teacher,
    get_current_user,
)
from app.core.limiter import limiter
from app.models.user import User
from app.schemas.quiz import (
    QuizCreate,
    QuizListResponse,
    QuizPublicResponse,
    QuizResponse,
    SubjectListResponse,
)
from app.schemas.quiz_result import (
    AuthoredSubmission,
    ExternalSubmission,
    QuizResultListResponse,
    QuizResultResponse,
    UserResultStats,
)
from app.services.quiz import QuizService
from app.services.quiz_result import QuizResultService

router = APIRouter(
    prefix="/quizzes",
    tags=["Quizzes"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=QuizListResponse)
def list_quizzes(
    subject: Optional[str] = Query(None),
    difficulty: Optional[Literal["easy", "medium", "hard"]] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get active quizzes, newest first."""
    service = QuizService(db)
    quizzes, pagination = service.get_quizzes(subject, difficulty, page, size)
    return {"quizzes": quizzes, **pagination}


@router.post("/", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
def create_quiz(
    quiz_in: QuizCreate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    """
    Create a quiz.
    Teacher only.
    """
    service = QuizService(db)
    return service.create_quiz(quiz_in, current_teacher)


@router.get("/subjects", response_model=SubjectListResponse)
def list_subjects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get all subjects that have active quizzes."""
    service = QuizService(db)
    return {"subjects": service.get_subjects()}


@router.get("/results", response_model=QuizResultListResponse)
def list_my_results(
    subject: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's quiz results, newest first."""
    service = QuizResultService(db)
    results, pagination = service.list_user_results(current_user.id, subject, page, size)
    return {"results": results, **pagination}


@router.get("/results/stats", response_model=UserResultStats)
def get_my_result_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Totals and averages of the current user's results, overall and per subject."""
    service = QuizResultService(db)
    return service.get_user_stats(current_user.id)


@router.post(
    "/results",
    response_model=QuizResultResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.submission_rate_limit)
def save_external_result(
    request: Request,
    submission: ExternalSubmission,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    """
    Save the result of a quiz served by the external question bank.
    The client scored it; the reported numbers are stored as-is.
    Student only.
    """
    service = QuizResultService(db)
    return service.record_external(current_student, submission)


@router.get("/{quiz_id}", response_model=None)
def get_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get a quiz by ID.
    Students get the questions without the answer key.
    """
    service = QuizService(db)
    quiz = service.get_quiz(quiz_id)
    if current_user.role == "student":
        return QuizPublicResponse.model_validate(quiz)
    return QuizResponse.model_validate(quiz)


@router.delete("/{quiz_id}", response_model=QuizResponse)
def deactivate_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    """
    Deactivate a quiz. Existing results are kept.
    Quiz author or admin only.
    """
    service = QuizService(db)
    return service.deactivate_quiz(quiz_id, current_teacher)


@router.post(
    "/{quiz_id}/submit",
    response_model=QuizResultResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.submission_rate_limit)
def submit_quiz(
    request: Request,
    quiz_id: int,
    submission: AuthoredSubmission,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    """
    Submit answers to a quiz. The server scores them against the stored
    answer key. Each student can submit a quiz once.
    Student only.
    """
    service = QuizResultService(db)
    return service.submit_authored(current_student, quiz_id, submission)
