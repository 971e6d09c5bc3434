"""
Friendship schemas.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.models.enums import FriendRequestStatus


class SendFriendRequestRequest(BaseModel):
    """Request schema for sending a friend request."""
    to_user_id: int
    from_display_name: str = ""
    to_display_name: str = ""


class FriendRequestResponse(BaseModel):
    """Friend request response schema."""
    id: int
    from_user_id: int
    to_user_id: int
    from_display_name: str = ""
    to_display_name: str = ""
    status: FriendRequestStatus
    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FriendRequestsResponse(BaseModel):
    """Response schema for friend request lists."""
    requests: List[FriendRequestResponse]


class FriendResponse(BaseModel):
    """A friend of the current user."""
    friend_id: int
    name: str
    request_id: Optional[int] = None
    added_at: Optional[datetime] = None


class FriendsResponse(BaseModel):
    """Response schema for the friends list."""
    friends: List[FriendResponse]


class FriendshipUpdateResponse(BaseModel):
    """Outcome of accepting a friend request.

    ``partial`` is True when the request was accepted but the friendship link
    could not be recorded for both users.
    """
    request: FriendRequestResponse
    partial: bool = False
    message: str = ""


class RemoveFriendResponse(BaseModel):
    """Outcome of removing a friend."""
    friend_id: int
    requests_deleted: int
    friendship_deleted: bool
