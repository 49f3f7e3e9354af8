# app/models/quiz.py
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.core.database import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    subject = Column(String(100), nullable=False)

    # [{"question": str, "options": [str], "correct_answer": int,
    #   "explanation": str | None, "points": int}, ...]
    questions = Column(JSONType, nullable=False)

    time_limit = Column(Integer, nullable=False)  # Seconds
    difficulty = Column(String(10), nullable=False, default="medium")
    is_active = Column(Boolean, nullable=False, default=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (Index("ix_quizzes_subject_active", "subject", "is_active"),)

    @property
    def question_count(self) -> int:
        return len(self.questions or [])

    def __repr__(self):
        return f"<Quiz(id={self.id}, title='{self.title}', subject='{self.subject}')>"
