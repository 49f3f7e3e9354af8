# app/services/quiz_result.py
import logging
import math
from collections import defaultdict
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.quiz import Quiz
from app.models.quiz_result import (
    RESULT_SOURCE_AUTHORED,
    RESULT_SOURCE_EXTERNAL,
    QuizResult,
)
from app.models.user import User
from app.schemas.quiz_result import (
    AuthoredSubmission,
    ExternalSubmission,
    SubjectStats,
    UserResultStats,
)
from app.services.scoring import (
    compute_score,
    count_correct,
    fit_answers,
    normalize_answers,
)

logger = logging.getLogger(__name__)


def get_utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def snapshot_questions(questions: List[dict]) -> List[dict]:
    """Copy of the answer-relevant part of each question"""
    return [
        {
            "question": q.get("question", ""),
            "options": list(q.get("options", [])),
            "correct_answer": q.get("correct_answer"),
            "points": q.get("points", 1),
        }
        for q in questions
    ]


class QuizResultService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def submit_authored(
        self, user: User, quiz_id: int, submission: AuthoredSubmission
    ) -> QuizResult:
        """
        Score answers to a locally stored quiz and record the result.

        Duplicate submissions for the same quiz are refused by the
        (user_id, quiz_id) unique constraint at insert time.
        """
        if user.role != "student":
            raise ForbiddenError("Only students can submit quizzes")

        quiz = (
            self.db.query(Quiz)
            .filter(Quiz.id == quiz_id, Quiz.is_active.is_(True))
            .first()
        )
        if not quiz:
            raise NotFoundError("Quiz not found")

        questions = quiz.questions or []
        total_questions = len(questions)
        correct_answers = count_correct(submission.answers, questions)
        score = compute_score(correct_answers, total_questions)

        result = QuizResult(
            user_id=user.id,
            quiz_id=quiz.id,
            source=RESULT_SOURCE_AUTHORED,
            subject=quiz.subject,
            score=score,
            total_questions=total_questions,
            correct_answers=correct_answers,
            time_spent=submission.time_spent,
            user_answers=fit_answers(submission.answers, total_questions),
            questions=snapshot_questions(questions),
            completed_at=get_utc_now(),
        )
        self.db.add(result)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Duplicate submission refused: user={user.id} quiz={quiz.id}")
            raise ConflictError("You have already submitted this quiz")

        self.db.refresh(result)
        logger.info(
            f"Quiz {quiz.id} submitted by user {user.id}: "
            f"{correct_answers}/{total_questions} ({score}%)"
        )
        return result

    @db_exception
    def record_external(self, user: User, submission: ExternalSubmission) -> QuizResult:
        """
        Record a result for a quiz served by the external question bank.
        Counts and score are stored as reported by the client.
        """
        if user.role != "student":
            raise ForbiddenError("Only students can submit quizzes")

        result = QuizResult(
            user_id=user.id,
            quiz_id=None,
            source=RESULT_SOURCE_EXTERNAL,
            subject=submission.subject.strip(),
            score=submission.score,
            total_questions=submission.total_questions,
            correct_answers=submission.correct_answers,
            time_spent=submission.time_spent,
            user_answers=normalize_answers(submission.answers),
            questions=(
                [q.model_dump() for q in submission.questions]
                if submission.questions is not None
                else None
            ),
            completed_at=(
                as_utc(submission.completed_at)
                if submission.completed_at
                else get_utc_now()
            ),
        )
        self.db.add(result)
        self.db.commit()
        self.db.refresh(result)

        logger.info(
            f"External result recorded for user {user.id} in {result.subject}: {result.score}%"
        )
        return result

    def list_user_results(
        self,
        user_id: int,
        subject: Optional[str] = None,
        page: int = 1,
        size: int = 10,
    ) -> Tuple[List[QuizResult], dict]:
        """Get a user's results, newest first"""
        query = self.db.query(QuizResult).filter(QuizResult.user_id == user_id)
        if subject:
            query = query.filter(QuizResult.subject == subject)

        total = query.count()
        offset = (page - 1) * size
        results = (
            query.order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
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

        return results, pagination

    def get_user_stats(self, user_id: int) -> UserResultStats:
        """Totals and averages for a user, overall and per subject"""
        results = self.db.query(QuizResult).filter(QuizResult.user_id == user_id).all()

        by_subject = defaultdict(list)
        for result in results:
            by_subject[result.subject].append(result)

        subjects = {
            subject: SubjectStats(
                total_quizzes=len(items),
                average_score=round(sum(r.score for r in items) / len(items), 1),
                best_score=max(r.score for r in items),
                total_time_spent=sum(r.time_spent for r in items),
            )
            for subject, items in sorted(by_subject.items())
        }

        if not results:
            return UserResultStats(
                user_id=user_id, total_quizzes=0, total_time_spent=0, subjects={}
            )

        return UserResultStats(
            user_id=user_id,
            total_quizzes=len(results),
            average_score=round(sum(r.score for r in results) / len(results), 1),
            best_score=max(r.score for r in results),
            total_time_spent=sum(r.time_spent for r in results),
            last_quiz_at=max(r.completed_at for r in results),
            subjects=subjects,
        )

    @db_exception
    def purge_results(
        self,
        subject: Optional[str] = None,
        before: Optional[datetime] = None,
        user_id: Optional[int] = None,
    ) -> int:
        """Bulk delete results matching every given filter. Returns the count."""
        query = self.db.query(QuizResult)
        if subject is not None:
            query = query.filter(QuizResult.subject == subject)
        if before is not None:
            query = query.filter(QuizResult.completed_at < as_utc(before))
        if user_id is not None:
            query = query.filter(QuizResult.user_id == user_id)

        deleted = query.delete(synchronize_session=False)
        self.db.commit()

        logger.warning(
            f"Purged {deleted} quiz results (subject={subject}, before={before}, user_id={user_id})"
        )
        return deleted
