from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.leaderboard import (
    OverallLeaderboardResponse,
    SubjectLeaderboardResponse,
)
from app.services.leaderboard import LeaderboardService

router = APIRouter(prefix="/leaderboards", tags=["Leaderboards"])


@router.get("/", response_model=OverallLeaderboardResponse)
def get_overall_leaderboard(
    limit: int = Query(settings.leaderboard_default_limit, le=settings.leaderboard_max_limit),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rank users across all subjects by average score, then quizzes taken."""
    service = LeaderboardService(db)
    return {"leaderboard": service.get_overall_leaderboard(limit)}


@router.get("/{subject}", response_model=SubjectLeaderboardResponse)
def get_subject_leaderboard(
    subject: str = Path(..., min_length=1, max_length=100),
    limit: int = Query(settings.leaderboard_default_limit, le=settings.leaderboard_max_limit),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rank users in a subject by latest score, most recent first on ties."""
    service = LeaderboardService(db)
    return {
        "subject": subject,
        "leaderboard": service.get_subject_leaderboard(subject, limit),
    }
