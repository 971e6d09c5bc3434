"""
Friendship model - one row per unordered pair of friends.
"""
from sqlmodel import SQLModel, Field
from typing import Optional, Tuple
from datetime import datetime
from app.core.store import utc_now
from sqlalchemy import UniqueConstraint


class Friendship(SQLModel, table=True):
    """Bilateral friendship; the smaller user id is always stored first."""
    __tablename__ = "friendship"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_friendship_pair"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_low_id: int = Field(index=True)
    user_high_id: int = Field(index=True)
    request_id: Optional[int] = None
    created_at: datetime = Field(default_factory=utc_now)

    @staticmethod
    def pair(user_id: int, other_user_id: int) -> Tuple[int, int]:
        return (min(user_id, other_user_id), max(user_id, other_user_id))

    def other(self, user_id: int) -> int:
        return self.user_high_id if self.user_low_id == user_id else self.user_low_id
