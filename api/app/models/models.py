"""
Models module - re-exports all table models.

Importing this module registers every table on ``SQLModel.metadata``
(used by ``init_db`` and Alembic).
"""
from app.models.enums import CardKind, FriendRequestStatus, RecipientStatus, ChallengeStatus
from app.models.topic import Topic
from app.models.card import Card
from app.models.ownership_reference import OwnershipReference
from app.models.friend_request import FriendRequest
from app.models.friendship import Friendship
from app.models.challenge import Challenge
from app.models.completed_challenge import CompletedChallengeRecord
from app.models.user_xp import UserXP

__all__ = [
    'CardKind',
    'FriendRequestStatus',
    'RecipientStatus',
    'ChallengeStatus',
    'Topic',
    'Card',
    'OwnershipReference',
    'FriendRequest',
    'Friendship',
    'Challenge',
    'CompletedChallengeRecord',
    'UserXP',
]
