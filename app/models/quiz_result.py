# app/models/quiz_result.py
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from app.core.database import Base
from app.models.quiz import JSONType

RESULT_SOURCE_AUTHORED = "authored"
RESULT_SOURCE_EXTERNAL = "external"


class QuizResult(Base):
    """One completed attempt. Rows are inserted once and never updated."""

    __tablename__ = "quiz_results"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    quiz_id = Column(
        Integer, ForeignKey("quizzes.id"), nullable=True
    )  # Null for quizzes served by the external question bank

    source = Column(String(10), nullable=False)  # authored | external
    subject = Column(String(100), nullable=False)

    # Attempt data
    score = Column(Integer, nullable=False)  # 0-100
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    time_spent = Column(Integer, nullable=False)  # Seconds

    user_answers = Column(JSONType, nullable=False)  # [int], -1 = unanswered
    questions = Column(JSONType, nullable=True)  # Snapshot at submission time

    completed_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # NULL quiz ids never collide, so external results are unconstrained
        UniqueConstraint("user_id", "quiz_id", name="uq_quiz_results_user_quiz"),
        CheckConstraint("score >= 0 AND score <= 100", name="ck_quiz_results_score"),
        CheckConstraint("total_questions >= 1", name="ck_quiz_results_total"),
        CheckConstraint(
            "correct_answers >= 0 AND correct_answers <= total_questions",
            name="ck_quiz_results_correct",
        ),
        CheckConstraint("time_spent >= 0", name="ck_quiz_results_time"),
        Index("ix_quiz_results_user_completed", "user_id", "completed_at"),
        Index("ix_quiz_results_subject_user", "subject", "user_id", "completed_at"),
    )

    def __repr__(self):
        return (
            f"<QuizResult(id={self.id}, user_id={self.user_id}, "
            f"subject='{self.subject}', score={self.score})>"
        )
