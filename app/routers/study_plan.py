from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_teacher, get_current_user
from app.models.user import User
from app.schemas.study_plan import (
    StudyPlanGenerateRequest,
    StudyPlanListResponse,
    StudyPlanResponse,
    StudyPlanUpdate,
)
from app.services.study_plan import StudyPlanService

router = APIRouter(
    prefix="/study-plans",
    tags=["Study Plans"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=StudyPlanListResponse)
def list_study_plans(
    subject: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get study plans.
    Students see their own; teachers see everyone's.
    """
    service = StudyPlanService(db)
    plans, pagination = service.get_plans(current_user, subject, page, size)
    return {"study_plans": plans, **pagination}


@router.post(
    "/generate",
    response_model=StudyPlanResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_study_plan(
    request_in: StudyPlanGenerateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Generate a template study plan from a score or from recent results."""
    service = StudyPlanService(db)
    return service.generate_plan(current_user, request_in.subject, request_in.score)


@router.put("/{plan_id}", response_model=StudyPlanResponse)
def customize_study_plan(
    plan_id: int,
    plan_in: StudyPlanUpdate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    """
    Edit a study plan.
    Teacher only.
    """
    service = StudyPlanService(db)
    return service.customize_plan(plan_id, current_teacher, plan_in)
