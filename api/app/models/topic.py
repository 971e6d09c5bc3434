"""
Topic model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from app.core.store import utc_now


class Topic(SQLModel, table=True):
    """Topic table for grouping a user's cards."""
    __tablename__ = "topic"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)  # Owner
    name: str
    description: str = Field(default="")
    card_count: int = Field(default=0)  # Only changed through atomic increments
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
