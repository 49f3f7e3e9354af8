from typing import List, Optional

from pydantic import BaseModel


class BankQuestion(BaseModel):
    """Question normalized from the external bank, answer key included"""

    question: str
    options: List[str]
    correct_answer: int
    points: int = 1
    explanation: Optional[str] = None


class QuestionSetResponse(BaseModel):
    subject: str
    cached: bool
    questions: List[BankQuestion]


class BankSubjectsResponse(BaseModel):
    subjects: List[str]


class CacheInvalidateResponse(BaseModel):
    subject: str
    removed: int
