from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VideoResource(BaseModel):
    title: str
    url: str
    duration: str
    thumbnail: Optional[str] = None


class NoteResource(BaseModel):
    title: str
    content: str
    type: str
    url: Optional[str] = None


class DocumentResource(BaseModel):
    title: str
    url: str
    type: str
    size: Optional[int] = Field(None, ge=0)


class PlanContent(BaseModel):
    text_plan: str = Field(..., min_length=1, max_length=2000)
    videos: List[VideoResource] = []
    notes: List[NoteResource] = []
    documents: List[DocumentResource] = []


class StudyPlanGenerateRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=100)
    score: Optional[int] = Field(
        None,
        ge=0,
        le=100,
        description="Defaults to the mean of the five latest results in the subject",
    )


class StudyPlanUpdate(BaseModel):
    text_plan: Optional[str] = Field(None, min_length=1, max_length=2000)
    videos: Optional[List[VideoResource]] = None
    notes: Optional[List[NoteResource]] = None
    documents: Optional[List[DocumentResource]] = None


class StudyPlanResponse(BaseModel):
    id: int
    user_id: int
    subject: str
    score: int
    plan: PlanContent
    is_customized: bool
    customized_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudyPlanListResponse(BaseModel):
    study_plans: List[StudyPlanResponse]
    total: int
    page: int
    size: int
    total_pages: int
