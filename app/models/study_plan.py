from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base
from app.models.quiz import JSONType


class StudyPlan(Base):
    __tablename__ = "study_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    subject = Column(String(100), nullable=False)
    score = Column(Integer, nullable=False)

    # {"text_plan": str, "videos": [...], "notes": [...], "documents": [...]}
    plan = Column(JSONType, nullable=False)

    is_customized = Column(Boolean, nullable=False, default=False)
    customized_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (Index("ix_study_plans_user_subject", "user_id", "subject"),)

    def __repr__(self):
        return f"<StudyPlan(id={self.id}, user_id={self.user_id}, subject='{self.subject}')>"
