# app/models/relations.py

from sqlalchemy.orm import relationship

# Import all relevant models
from .quiz import Quiz
from .quiz_result import QuizResult
from .study_plan import StudyPlan
from .user import User


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Quiz Relationships ---

    # 1. Teacher to authored Quizzes (One-to-Many)
    User.quizzes = relationship(
        "Quiz", back_populates="creator", foreign_keys=[Quiz.created_by]
    )
    Quiz.creator = relationship(
        "User", back_populates="quizzes", foreign_keys=[Quiz.created_by]
    )

    # 2. Quiz to Results (One-to-Many). Results outlive quiz deactivation.
    Quiz.results = relationship("QuizResult", back_populates="quiz")
    QuizResult.quiz = relationship("Quiz", back_populates="results")

    # --- Result Relationships ---

    # 3. User to QuizResults (One-to-Many)
    User.quiz_results = relationship("QuizResult", back_populates="user")
    QuizResult.user = relationship("User", back_populates="quiz_results")

    # --- Study Plan Relationships ---

    # 4. User to StudyPlans (One-to-Many)
    User.study_plans = relationship(
        "StudyPlan",
        back_populates="user",
        foreign_keys=[StudyPlan.user_id],
        cascade="all, delete-orphan",
    )
    StudyPlan.user = relationship(
        "User", back_populates="study_plans", foreign_keys=[StudyPlan.user_id]
    )
    StudyPlan.customizer = relationship("User", foreign_keys=[StudyPlan.customized_by])
