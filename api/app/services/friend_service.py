"""
Friend service - friend requests and the friendship relation.
"""
import logging
from typing import Dict, List, Optional

from app.core import signals
from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from app.core.identity import require_user
from app.core.store import DocumentStore, as_utc
from app.models.models import FriendRequest, FriendRequestStatus, Friendship
from app.schemas.friend import (
    FriendRequestResponse,
    FriendResponse,
    FriendshipUpdateResponse,
    RemoveFriendResponse,
)

logger = logging.getLogger(__name__)


def _requests_between(store: DocumentStore, user_id: int, other_id: int) -> List[FriendRequest]:
    """Every request record for the pair, in either direction."""
    sent = store.query(FriendRequest, [
        ("from_user_id", "==", user_id),
        ("to_user_id", "==", other_id),
    ])
    received = store.query(FriendRequest, [
        ("from_user_id", "==", other_id),
        ("to_user_id", "==", user_id),
    ])
    return sent + received


def _get_friendship(store: DocumentStore, user_id: int, other_id: int) -> Optional[Friendship]:
    low, high = Friendship.pair(user_id, other_id)
    rows = store.query(Friendship, [("user_low_id", "==", low), ("user_high_id", "==", high)])
    return rows[0] if rows else None


def send_friend_request(
    store: DocumentStore,
    from_id: Optional[int],
    to_id: int,
    from_display_name: str = "",
    to_display_name: str = ""
) -> FriendRequest:
    from_id = require_user(from_id)
    if from_id == to_id:
        raise ValidationError("You cannot send a friend request to yourself")

    existing = _requests_between(store, from_id, to_id)
    if any(req.status == FriendRequestStatus.PENDING for req in existing):
        raise ConflictError("A friend request between these users is already pending")
    if _get_friendship(store, from_id, to_id) is not None or any(
        req.status == FriendRequestStatus.ACCEPTED for req in existing
    ):
        raise ConflictError("You are already friends with this user")

    request = store.create(FriendRequest(
        from_user_id=from_id,
        to_user_id=to_id,
        from_display_name=from_display_name or "",
        to_display_name=to_display_name or "",
        status=FriendRequestStatus.PENDING,
        created_at=store.server_timestamp(),
    ))
    logger.info(f"Friend request {request.id} sent from user {from_id} to user {to_id}")
    signals.friend_request_sent.send(request, from_user_id=from_id, to_user_id=to_id)
    return request


def get_friend_requests(store: DocumentStore, user_id: Optional[int]) -> List[FriendRequest]:
    """Pending requests addressed to the user, newest first."""
    user_id = require_user(user_id)
    requests = store.query(FriendRequest, [
        ("to_user_id", "==", user_id),
        ("status", "==", FriendRequestStatus.PENDING.value),
    ])
    return sorted(requests, key=lambda req: as_utc(req.created_at), reverse=True)


def _get_pending_request_for(
    store: DocumentStore,
    request_id: int,
    acting_user_id: int
) -> FriendRequest:
    request = store.get(FriendRequest, request_id)
    if request is None:
        raise NotFoundError(f"Friend request {request_id} not found")
    if request.to_user_id != acting_user_id:
        raise AuthorizationError("Only the recipient can respond to this friend request")
    if request.status != FriendRequestStatus.PENDING:
        raise StateError(f"Friend request {request_id} is already {FriendRequestStatus(request.status).value}")
    return request


def accept_friend_request(
    store: DocumentStore,
    request_id: int,
    acting_user_id: Optional[int]
) -> FriendshipUpdateResponse:
    """
    Accept a pending request addressed to ``acting_user_id``.

    The status change and the friendship row are committed together, so
    either both users see each other as friends or nothing changed.
    """
    acting_user_id = require_user(acting_user_id)
    request = _get_pending_request_for(store, request_id, acting_user_id)
    low, high = Friendship.pair(request.from_user_id, request.to_user_id)
    already_linked = _get_friendship(store, low, high) is not None

    now = store.server_timestamp()
    with store.batch():
        request = store.update(FriendRequest, request.id, {
            "status": FriendRequestStatus.ACCEPTED,
            "accepted_at": now,
        })
        if not already_linked:
            store.create(Friendship(
                user_low_id=low,
                user_high_id=high,
                request_id=request.id,
                created_at=now,
            ))

    logger.info(f"Friend request {request_id} accepted by user {acting_user_id}")
    signals.friendship_changed.send(request, user_ids=[low, high])
    return FriendshipUpdateResponse(
        request=FriendRequestResponse.model_validate(request),
        partial=False,
        message="Friend request accepted",
    )


def reject_friend_request(
    store: DocumentStore,
    request_id: int,
    acting_user_id: Optional[int]
) -> FriendRequest:
    acting_user_id = require_user(acting_user_id)
    request = _get_pending_request_for(store, request_id, acting_user_id)
    request = store.update(FriendRequest, request.id, {
        "status": FriendRequestStatus.REJECTED,
        "rejected_at": store.server_timestamp(),
    })
    logger.info(f"Friend request {request_id} rejected by user {acting_user_id}")
    return request


def get_friends(store: DocumentStore, user_id: Optional[int]) -> List[FriendResponse]:
    """
    Friends of the user.

    Combines accepted requests in both directions with friendship rows, so
    pairs linked before friendship rows existed are still listed. Each
    friend appears once.
    """
    user_id = require_user(user_id)
    friends: Dict[int, FriendResponse] = {}

    sent = store.query(FriendRequest, [
        ("from_user_id", "==", user_id),
        ("status", "==", FriendRequestStatus.ACCEPTED.value),
    ])
    for req in sent:
        friends.setdefault(req.to_user_id, FriendResponse(
            friend_id=req.to_user_id,
            name=req.to_display_name or "Unknown",
            request_id=req.id,
            added_at=req.accepted_at or req.created_at,
        ))

    received = store.query(FriendRequest, [
        ("to_user_id", "==", user_id),
        ("status", "==", FriendRequestStatus.ACCEPTED.value),
    ])
    for req in received:
        friends.setdefault(req.from_user_id, FriendResponse(
            friend_id=req.from_user_id,
            name=req.from_display_name or "Unknown",
            request_id=req.id,
            added_at=req.accepted_at or req.created_at,
        ))

    links = store.query(Friendship, [("user_low_id", "==", user_id)]) + \
        store.query(Friendship, [("user_high_id", "==", user_id)])
    for link in links:
        friends.setdefault(link.other(user_id), FriendResponse(
            friend_id=link.other(user_id),
            name="Unknown",
            request_id=link.request_id,
            added_at=link.created_at,
        ))

    return list(friends.values())


def remove_friend(store: DocumentStore, user_id: Optional[int], friend_id: int) -> RemoveFriendResponse:
    """
    End a friendship.

    Deletes every request record for the pair (duplicates included) and the
    friendship row in one batch.
    """
    user_id = require_user(user_id)
    requests = _requests_between(store, user_id, friend_id)
    friendship = _get_friendship(store, user_id, friend_id)
    if not requests and friendship is None:
        raise NotFoundError(f"User {friend_id} is not in your friends list")

    with store.batch():
        deleted = store.delete_many(requests)
        friendship_deleted = store.delete(Friendship, friendship.id) if friendship else False

    logger.info(
        f"User {user_id} removed friend {friend_id}: "
        f"{deleted} requests deleted, friendship row deleted: {friendship_deleted}"
    )
    signals.friendship_changed.send(None, user_ids=list(Friendship.pair(user_id, friend_id)))
    return RemoveFriendResponse(
        friend_id=friend_id,
        requests_deleted=deleted,
        friendship_deleted=friendship_deleted,
    )
