from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    """Per-user standing within one subject"""

    rank: int
    user_id: int
    user_name: str
    avatar: Optional[str] = None
    latest_score: int
    latest_completed_at: datetime
    quiz_id: Optional[int] = None
    average_score: float
    best_score: int
    total_quizzes: int


class OverallLeaderboardEntry(BaseModel):
    """Per-user standing across all subjects"""

    rank: int
    user_id: int
    user_name: str
    avatar: Optional[str] = None
    total_score: int
    total_quizzes: int
    average_score: float
    last_quiz: datetime


class SubjectLeaderboardResponse(BaseModel):
    subject: str
    leaderboard: List[LeaderboardEntry]


class OverallLeaderboardResponse(BaseModel):
    leaderboard: List[OverallLeaderboardEntry]
