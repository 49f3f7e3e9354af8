# app/services/leaderboard.py
import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.quiz_result import QuizResult
from app.models.user import User, avatar_for
from app.schemas.leaderboard import LeaderboardEntry, OverallLeaderboardEntry

logger = logging.getLogger(__name__)


class LeaderboardService:
    """
    Rankings derived on read from the full QuizResult history.

    Results are joined to ``users`` with an inner join, so results whose
    user no longer exists are left out instead of failing the ranking.
    Ties that survive the documented sort keys are broken by ``user_id``
    so the output does not depend on insertion order.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_subject_leaderboard(self, subject: str, limit: int) -> List[LeaderboardEntry]:
        """
        Top ``limit`` users in a subject, ranked by their latest score
        (desc), then by when that latest result was completed (desc).
        """
        if limit <= 0:
            return []

        per_user = {"partition_by": QuizResult.user_id}
        ranked = (
            self.db.query(
                QuizResult.user_id.label("user_id"),
                QuizResult.score.label("latest_score"),
                QuizResult.completed_at.label("latest_completed_at"),
                QuizResult.quiz_id.label("quiz_id"),
                func.row_number()
                .over(
                    order_by=(QuizResult.completed_at.desc(), QuizResult.id.desc()),
                    **per_user,
                )
                .label("recency"),
                func.avg(QuizResult.score).over(**per_user).label("average_score"),
                func.max(QuizResult.score).over(**per_user).label("best_score"),
                func.count(QuizResult.id).over(**per_user).label("total_quizzes"),
            )
            .filter(QuizResult.subject == subject)
            .subquery()
        )

        rows = (
            self.db.query(
                ranked.c.user_id,
                ranked.c.latest_score,
                ranked.c.latest_completed_at,
                ranked.c.quiz_id,
                ranked.c.average_score,
                ranked.c.best_score,
                ranked.c.total_quizzes,
                User.full_name,
                User.avatar_url,
            )
            .join(User, User.id == ranked.c.user_id)
            .filter(ranked.c.recency == 1)
            .order_by(
                ranked.c.latest_score.desc(),
                ranked.c.latest_completed_at.desc(),
                ranked.c.user_id.asc(),
            )
            .limit(limit)
            .all()
        )

        logger.debug(f"Subject leaderboard '{subject}': {len(rows)} entries")

        return [
            LeaderboardEntry(
                rank=position,
                user_id=row.user_id,
                user_name=row.full_name,
                avatar=avatar_for(row.full_name, row.avatar_url),
                latest_score=row.latest_score,
                latest_completed_at=row.latest_completed_at,
                quiz_id=row.quiz_id,
                average_score=round(float(row.average_score), 1),
                best_score=row.best_score,
                total_quizzes=row.total_quizzes,
            )
            for position, row in enumerate(rows, start=1)
        ]

    def get_overall_leaderboard(self, limit: int) -> List[OverallLeaderboardEntry]:
        """
        Top ``limit`` users across all subjects, ranked by average score
        (rounded to one decimal, desc), then by number of quizzes (desc).
        """
        if limit <= 0:
            return []

        average_score = func.round(func.avg(QuizResult.score), 1).label("average_score")
        total_quizzes = func.count(QuizResult.id).label("total_quizzes")

        rows = (
            self.db.query(
                QuizResult.user_id,
                func.sum(QuizResult.score).label("total_score"),
                total_quizzes,
                average_score,
                func.max(QuizResult.completed_at).label("last_quiz"),
                User.full_name,
                User.avatar_url,
            )
            .join(User, User.id == QuizResult.user_id)
            .group_by(QuizResult.user_id, User.full_name, User.avatar_url)
            .order_by(
                average_score.desc(),
                total_quizzes.desc(),
                QuizResult.user_id.asc(),
            )
            .limit(limit)
            .all()
        )

        logger.debug(f"Overall leaderboard: {len(rows)} entries")

        return [
            OverallLeaderboardEntry(
                rank=position,
                user_id=row.user_id,
                user_name=row.full_name,
                avatar=avatar_for(row.full_name, row.avatar_url),
                total_score=int(row.total_score),
                total_quizzes=row.total_quizzes,
                average_score=float(row.average_score),
                last_quiz=row.last_quiz,
            )
            for position, row in enumerate(rows, start=1)
        ]
