from typing import Optional, List
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    password: str  # bcrypt hash, never the plain text
    created_at: datetime = Field(default_factory=_utcnow)


class UserPreferences(SQLModel, table=True):
    """One onboarding submission. The newest row per user is the current one."""

    __tablename__ = "user_preferences"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    interested_assets: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    investor_type: str
    content_types: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=_utcnow)


class Feedback(SQLModel, table=True):
    __tablename__ = "feedback"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    content_type: str  # prices | news | insight | meme | ...
    content_id: str
    vote: int  # +1 | -1
    created_at: datetime = Field(default_factory=_utcnow)
