"""
Models package initialization
Import all models and setup relationships
"""

from .quiz import Quiz
from .quiz_result import QuizResult

# Import and setup relationships
from .relations import setup_relationships
from .study_plan import StudyPlan
from .user import User

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Quiz",
    "QuizResult",
    "StudyPlan",
    "User",
]
