"""
Models package - imports all models so they register with SQLModel.
"""
# Import enums first
from app.models.enums import CardKind, FriendRequestStatus, RecipientStatus, ChallengeStatus

# Import all models
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
