# app/services/quiz.py
import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.quiz import Quiz
from app.models.user import User
from app.schemas.quiz import QuizCreate

logger = logging.getLogger(__name__)


class QuizService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def create_quiz(self, quiz_in: QuizCreate, creator: User) -> Quiz:
        """Create a quiz authored by a teacher"""
        quiz = Quiz(
            title=quiz_in.title.strip(),
            description=quiz_in.description,
            subject=quiz_in.subject,
            questions=[q.model_dump() for q in quiz_in.questions],
            time_limit=quiz_in.time_limit,
            difficulty=quiz_in.difficulty,
            is_active=True,
            created_by=creator.id,
        )
        self.db.add(quiz)
        self.db.commit()
        self.db.refresh(quiz)

        logger.info(
            f"Quiz {quiz.id} '{quiz.title}' created by user {creator.id} "
            f"({len(quiz.questions)} questions)"
        )
        return quiz

    def get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFoundError("Quiz not found")
        return quiz

    def get_quizzes(
        self,
        subject: Optional[str] = None,
        difficulty: Optional[str] = None,
        page: int = 1,
        size: int = 10,
    ) -> Tuple[List[Quiz], dict]:
        """Get active quizzes, newest first, with pagination"""
        query = self.db.query(Quiz).filter(Quiz.is_active.is_(True))
        if subject:
            query = query.filter(Quiz.subject == subject)
        if difficulty:
            query = query.filter(Quiz.difficulty == difficulty)

        total = query.count()
        offset = (page - 1) * size
        quizzes = (
            query.order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .offset(offset)
            .limit(size)
            .all()
        )

        total_pages = math.ceil(total / size) if size > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }

        return quizzes, pagination

    def get_subjects(self) -> List[str]:
        """Subjects with at least one active quiz, else the configured list"""
        rows = (
            self.db.query(Quiz.subject)
            .filter(Quiz.is_active.is_(True))
            .distinct()
            .order_by(Quiz.subject)
            .all()
        )
        subjects = [row.subject for row in rows]
        return subjects or list(settings.quiz_subjects)

    @db_exception
    def deactivate_quiz(self, quiz_id: int, user: User) -> Quiz:
        """Hide a quiz from listing and submission; its results are kept"""
        quiz = self.get_quiz(quiz_id)
        if user.role != "admin" and quiz.created_by != user.id:
            raise ForbiddenError("Only the quiz author can deactivate it")

        quiz.is_active = False
        self.db.commit()
        self.db.refresh(quiz)

        logger.info(f"Quiz {quiz.id} deactivated by user {user.id}")
        return quiz
