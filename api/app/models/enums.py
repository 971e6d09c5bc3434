"""
Model enums.
"""
from enum import Enum


class CardKind(str, Enum):
    """How a card (or a user's reference to it) came to exist."""
    OWNED = "owned"    # Created directly by a user, filed under their topics
    SHARED = "shared"  # Materialized for a challenge recipient


class FriendRequestStatus(str, Enum):
    """Status enum for FriendRequest."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RecipientStatus(str, Enum):
    """Per-recipient status inside a Challenge."""
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class ChallengeStatus(str, Enum):
    """Status enum for Challenge."""
    ACTIVE = "active"
