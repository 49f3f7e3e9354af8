# app/services/study_plan.py
import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.core.exceptions import NotFoundError
from app.models.quiz_result import QuizResult
from app.models.study_plan import StudyPlan
from app.models.user import User
from app.schemas.study_plan import StudyPlanUpdate

logger = logging.getLogger(__name__)

RECENT_RESULTS_WINDOW = 5
ADVANCED_THRESHOLD = 80

VIDEO_LIBRARY = {
    "Mathematics": [
        {"title": "Algebra Fundamentals", "url": "https://youtube.com/watch?v=example1", "duration": "45 mins"},
        {"title": "Calculus Basics", "url": "https://youtube.com/watch?v=example2", "duration": "60 mins"},
        {"title": "Geometry Principles", "url": "https://youtube.com/watch?v=example3", "duration": "35 mins"},
        {"title": "Advanced Problem Solving", "url": "https://youtube.com/watch?v=example4", "duration": "50 mins"},
    ],
    "Science": [
        {"title": "Chemistry Basics", "url": "https://youtube.com/watch?v=example1", "duration": "40 mins"},
        {"title": "Physics Principles", "url": "https://youtube.com/watch?v=example2", "duration": "55 mins"},
        {"title": "Biology Overview", "url": "https://youtube.com/watch?v=example3", "duration": "45 mins"},
        {"title": "Scientific Method", "url": "https://youtube.com/watch?v=example4", "duration": "30 mins"},
    ],
}

NOTE_LIBRARY = {
    "Mathematics": [
        {"title": "Formula Reference Sheet", "content": "Key formulas and equations", "type": "PDF"},
        {"title": "Problem-Solving Strategies", "content": "Step-by-step approaches", "type": "Notes"},
        {"title": "Common Mistakes Guide", "content": "Avoid these pitfalls", "type": "Guide"},
    ],
    "Science": [
        {"title": "Scientific Concepts Summary", "content": "Core principles explained", "type": "PDF"},
        {"title": "Lab Procedures Guide", "content": "Experimental methods", "type": "Manual"},
        {"title": "Key Terms Glossary", "content": "Important vocabulary", "type": "Reference"},
    ],
}

DOCUMENT_LIBRARY = {
    "Mathematics": [
        {"title": "Practice Problem Set", "url": "https://example.com/math-problems.pdf", "type": "Worksheet"},
        {"title": "Advanced Exercises", "url": "https://example.com/advanced-math.pdf", "type": "PDF"},
        {"title": "Study Guide", "url": "https://example.com/math-guide.pdf", "type": "Guide"},
    ],
    "Science": [
        {"title": "Lab Experiments", "url": "https://example.com/lab-experiments.pdf", "type": "Manual"},
        {"title": "Research Papers", "url": "https://example.com/science-papers.pdf", "type": "PDF"},
        {"title": "Study Materials", "url": "https://example.com/science-study.pdf", "type": "Guide"},
    ],
}

DEFAULT_LIBRARY_SUBJECT = "Mathematics"


def build_text_plan(subject: str, score: int) -> str:
    if score >= 90:
        return (
            f"Excellent work in {subject}! You're performing at an advanced level. "
            "Focus on challenging problems and real-world applications to maintain your expertise. "
            "Consider exploring interdisciplinary connections and advanced topics."
        )
    if score >= 80:
        return (
            f"Great job in {subject}! You have a solid understanding. "
            "Focus on strengthening any weak areas and practicing more complex problems. "
            "Regular review will help maintain your strong performance."
        )
    if score >= 70:
        return (
            f"Good progress in {subject}! You're on the right track. "
            "Focus on reviewing fundamental concepts and practicing regularly. "
            "Identify specific areas that need improvement and dedicate extra time to them."
        )
    return (
        f"Keep working hard in {subject}! Focus on building strong foundations with the basics. "
        "Break down complex topics into smaller parts and practice regularly. "
        "Don't hesitate to ask for help when needed."
    )


def _library(library: dict, subject: str) -> List[dict]:
    return [dict(item) for item in library.get(subject, library[DEFAULT_LIBRARY_SUBJECT])]


def build_plan(subject: str, score: int) -> dict:
    """Template plan: stronger scores get the advanced end of each library"""
    videos = _library(VIDEO_LIBRARY, subject)
    notes = _library(NOTE_LIBRARY, subject)
    documents = _library(DOCUMENT_LIBRARY, subject)
    advanced = score >= ADVANCED_THRESHOLD

    return {
        "text_plan": build_text_plan(subject, score),
        "videos": videos[2:] if advanced else videos[:3],
        "notes": notes[1:] if advanced else notes,
        "documents": documents[1:] if advanced else documents[:2],
    }


class StudyPlanService:
    def __init__(self, db: Session):
        self.db = db

    def recent_average(self, user_id: int, subject: str) -> Optional[int]:
        """Rounded mean of the user's latest results in a subject"""
        scores = [
            row.score
            for row in self.db.query(QuizResult.score)
            .filter(QuizResult.user_id == user_id, QuizResult.subject == subject)
            .order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
            .limit(RECENT_RESULTS_WINDOW)
            .all()
        ]
        if not scores:
            return None
        return int(sum(scores) / len(scores) + 0.5)

    @db_exception
    def generate_plan(
        self, user: User, subject: str, score: Optional[int] = None
    ) -> StudyPlan:
        subject = subject.strip()
        if score is None:
            score = self.recent_average(user.id, subject)
            if score is None:
                raise NotFoundError(f"No quiz results found for {subject}")

        study_plan = StudyPlan(
            user_id=user.id,
            subject=subject,
            score=score,
            plan=build_plan(subject, score),
            is_customized=False,
        )
        self.db.add(study_plan)
        self.db.commit()
        self.db.refresh(study_plan)

        logger.info(f"Study plan {study_plan.id} generated for user {user.id} in {subject} ({score}%)")
        return study_plan

    def get_plans(
        self,
        user: User,
        subject: Optional[str] = None,
        page: int = 1,
        size: int = 10,
    ) -> Tuple[List[StudyPlan], dict]:
        """Students see their own plans; teachers and admins see all of them"""
        query = self.db.query(StudyPlan)
        if user.role == "student":
            query = query.filter(StudyPlan.user_id == user.id)
        if subject:
            query = query.filter(StudyPlan.subject == subject)

        total = query.count()
        offset = (page - 1) * size
        plans = (
            query.order_by(StudyPlan.created_at.desc(), StudyPlan.id.desc())
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

        return plans, pagination

    @db_exception
    def customize_plan(
        self, plan_id: int, editor: User, plan_in: StudyPlanUpdate
    ) -> StudyPlan:
        study_plan = self.db.query(StudyPlan).filter(StudyPlan.id == plan_id).first()
        if not study_plan:
            raise NotFoundError("Study plan not found")

        # Reassign the JSON value so the change is flushed
        plan = dict(study_plan.plan)
        for field, value in plan_in.model_dump(exclude_unset=True).items():
            if value is not None:
                plan[field] = value

        study_plan.plan = plan
        study_plan.is_customized = True
        study_plan.customized_by = editor.id
        self.db.commit()
        self.db.refresh(study_plan)

        logger.info(f"Study plan {study_plan.id} customized by user {editor.id}")
        return study_plan
