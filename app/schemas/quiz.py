from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.config import settings


class QuizQuestion(BaseModel):
    """Single multiple-choice question with its answer key"""

    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0, description="Index into options")
    explanation: Optional[str] = None
    points: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def check_correct_answer(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("Correct answer index must be valid")
        return self


class QuizQuestionPublic(BaseModel):
    """Question as served to students: no answer key, no explanation"""

    question: str
    options: List[str]
    points: int = 1


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    subject: str
    questions: List[QuizQuestion] = Field(..., min_length=1)
    time_limit: int = Field(..., ge=60, le=7200, description="Seconds")
    difficulty: Literal["easy", "medium", "hard"] = "medium"

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, value: str) -> str:
        value = value.strip()
        if value not in settings.quiz_subjects:
            raise ValueError(f"Subject must be one of: {', '.join(settings.quiz_subjects)}")
        return value

    @field_validator("questions")
    @classmethod
    def validate_question_count(cls, value: List[QuizQuestion]) -> List[QuizQuestion]:
        if len(value) > settings.quiz_max_questions:
            raise ValueError(
                f"Quiz must have between 1 and {settings.quiz_max_questions} questions"
            )
        return value


class QuizSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    subject: str
    time_limit: int
    difficulty: str
    is_active: bool
    created_by: int
    question_count: int
    created_at: datetime


class QuizPublicResponse(QuizSummary):
    questions: List[QuizQuestionPublic]


class QuizResponse(QuizSummary):
    questions: List[QuizQuestion]


class QuizListResponse(BaseModel):
    quizzes: List[QuizSummary]
    total: int
    page: int
    size: int
    total_pages: int


class SubjectListResponse(BaseModel):
    subjects: List[str]
