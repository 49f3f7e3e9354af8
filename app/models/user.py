from typing import Optional
from urllib.parse import quote

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.core.config import settings
from app.core.database import Base


def avatar_for(full_name: str, avatar_url: Optional[str] = None) -> str:
    """Stored avatar, or a generated initials avatar"""
    if avatar_url:
        return avatar_url
    return (
        f"https://ui-avatars.com/api/?name={quote(full_name or '')}"
        "&background=8b5cf6&color=fff&size=150"
    )


class User(Base):
    __tablename__ = "users"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(100), unique=True, index=True, nullable=False)

    # Profile information
    full_name = Column(String(100), nullable=False)
    avatar_url = Column(Text, nullable=True)
    bio = Column(String(500), nullable=True)

    # Account status
    is_active = Column(Boolean, default=True, nullable=False)
    role = Column(
        String(20), default=settings.authorization_default_role, nullable=False
    )  # student, teacher, admin

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def display_name(self) -> str:
        return self.full_name

    @property
    def avatar(self) -> str:
        return avatar_for(self.full_name, self.avatar_url)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
