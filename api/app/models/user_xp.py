"""
UserXP model.
"""
from sqlmodel import SQLModel, Field
from datetime import datetime
from app.core.store import utc_now


class UserXP(SQLModel, table=True):
    """Cumulative experience points per user."""
    __tablename__ = "user_xp"

    user_id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    total_xp: int = Field(default=0)  # Only changed through atomic increments
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
