"""
FriendRequest model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from app.core.store import utc_now
from sqlalchemy import Column, String as SAString
from app.models.enums import FriendRequestStatus


class FriendRequest(SQLModel, table=True):
    """Directional friend request; an accepted request means both users are friends."""
    __tablename__ = "friend_request"

    id: Optional[int] = Field(default=None, primary_key=True)
    from_user_id: int = Field(index=True)
    to_user_id: int = Field(index=True)
    from_display_name: str = Field(default="")
    to_display_name: str = Field(default="")
    status: FriendRequestStatus = Field(
        default=FriendRequestStatus.PENDING,
        sa_column=Column(SAString, nullable=False, index=True, default=FriendRequestStatus.PENDING.value)
    )
    created_at: datetime = Field(default_factory=utc_now)
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
