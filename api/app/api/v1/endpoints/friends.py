"""
Friends endpoint.
"""
from fastapi import APIRouter, Depends, status
from typing import Optional
from app.core.database import get_store
from app.core.identity import get_current_user_id
from app.core.store import DocumentStore
from app.schemas.friend import (
    FriendRequestResponse,
    FriendRequestsResponse,
    FriendsResponse,
    FriendshipUpdateResponse,
    RemoveFriendResponse,
    SendFriendRequestRequest
)
from app.services import friend_service

router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("", response_model=FriendsResponse)
async def get_friends(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    if user_id is None:
        return FriendsResponse(friends=[])
    return FriendsResponse(friends=friend_service.get_friends(store, user_id))


@router.get("/requests", response_model=FriendRequestsResponse)
async def get_friend_requests(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Pending friend requests addressed to the current user."""
    requests = friend_service.get_friend_requests(store, user_id)
    return FriendRequestsResponse(
        requests=[FriendRequestResponse.model_validate(req) for req in requests]
    )


@router.post("/requests", response_model=FriendRequestResponse, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request: SendFriendRequestRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    friend_request = friend_service.send_friend_request(
        store, user_id, request.to_user_id,
        from_display_name=request.from_display_name,
        to_display_name=request.to_display_name
    )
    return FriendRequestResponse.model_validate(friend_request)


@router.post("/requests/{request_id}/accept", response_model=FriendshipUpdateResponse)
async def accept_friend_request(
    request_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return friend_service.accept_friend_request(store, request_id, user_id)


@router.post("/requests/{request_id}/reject", response_model=FriendRequestResponse)
async def reject_friend_request(
    request_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    friend_request = friend_service.reject_friend_request(store, request_id, user_id)
    return FriendRequestResponse.model_validate(friend_request)


@router.delete("/{friend_id}", response_model=RemoveFriendResponse)
async def remove_friend(
    friend_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Remove a friend for both users."""
    return friend_service.remove_friend(store, user_id, friend_id)
