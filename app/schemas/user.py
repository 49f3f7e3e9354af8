from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    avatar: str
    bio: Optional[str] = None
    role: str
    is_active: bool
    created_at: datetime
