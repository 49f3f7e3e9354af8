from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.core.exceptions import ValidationFailed
from app.models.user import User
from app.schemas.quiz_result import PurgeResponse
from app.services.quiz_result import QuizResultService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={404: {"description": "Not found"}},
)


@router.delete(
    "/quiz-results",
    response_model=PurgeResponse,
    description="Bulk delete quiz results (requires admin)",
)
def purge_quiz_results(
    subject: Optional[str] = Query(None),
    before: Optional[datetime] = Query(None, description="Delete results completed before this time"),
    user_id: Optional[int] = Query(None),
    confirm_all: bool = Query(False, description="Required when no filter is given"),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Delete quiz results matching every given filter.
    Deleting everything needs confirm_all=true.
    """
    if subject is None and before is None and user_id is None and not confirm_all:
        raise ValidationFailed(
            "Refusing to delete all results without confirm_all=true",
            details=["subject", "before", "user_id"],
        )

    service = QuizResultService(db)
    deleted = service.purge_results(subject=subject, before=before, user_id=user_id)
    return {"deleted": deleted}
