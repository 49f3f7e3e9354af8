from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.config import settings


class QuestionSnapshot(BaseModel):
    """Question as it looked when the attempt was submitted"""

    question: str
    options: List[str]
    correct_answer: int
    points: int = 1


# ==================== Submissions ====================


class AuthoredSubmission(BaseModel):
    """Answers to a quiz stored on this server; the server scores them"""

    answers: List[Optional[int]] = Field(
        default_factory=list,
        max_length=settings.quiz_max_questions,
        description="Selected option index per question; null or -1 if unanswered",
    )
    time_spent: int = Field(..., ge=0, description="Time spent in seconds")


class ExternalSubmission(BaseModel):
    """
    Result of a quiz served by the external question bank.
    The client scored it against an answer key this server never stores,
    so the numbers are recorded as reported.
    """

    subject: str = Field(..., min_length=1, max_length=100)
    total_questions: int = Field(..., ge=1)
    correct_answers: int = Field(..., ge=0)
    score: int = Field(..., ge=0, le=100)
    time_spent: int = Field(..., ge=0, description="Time spent in seconds")
    answers: List[Optional[int]] = Field(
        default_factory=list, max_length=settings.quiz_max_questions
    )
    questions: Optional[List[QuestionSnapshot]] = None
    completed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_counts(self):
        if self.correct_answers > self.total_questions:
            raise ValueError("correct_answers cannot exceed total_questions")
        return self


# ==================== Responses ====================


class QuizResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    quiz_id: Optional[int] = None
    source: Literal["authored", "external"]
    subject: str
    score: int
    total_questions: int
    correct_answers: int
    time_spent: int
    user_answers: List[int]
    questions: Optional[List[QuestionSnapshot]] = None
    completed_at: datetime


class QuizResultListResponse(BaseModel):
    results: List[QuizResultResponse]
    total: int
    page: int
    size: int
    total_pages: int


class SubjectStats(BaseModel):
    total_quizzes: int
    average_score: float
    best_score: int
    total_time_spent: int


class UserResultStats(BaseModel):
    user_id: int
    total_quizzes: int
    average_score: Optional[float] = None
    best_score: Optional[int] = None
    total_time_spent: int
    last_quiz_at: Optional[datetime] = None
    subjects: Dict[str, SubjectStats]


class PurgeResponse(BaseModel):
    deleted: int
