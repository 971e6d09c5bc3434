"""
Challenge schemas.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from app.models.enums import ChallengeStatus, RecipientStatus
from app.schemas.card import CardContent


class SendChallengeRequest(BaseModel):
    """Request schema for sending a challenge to friends."""
    card: CardContent
    recipient_ids: List[int] = Field(default_factory=list)
    source_card_id: Optional[int] = Field(None, description="Card the snapshot was taken from")
    sender_name: Optional[str] = None


class ChallengeRecipientResponse(BaseModel):
    """One recipient's progress on a challenge."""
    user_id: int
    status: RecipientStatus
    score: Optional[int] = None
    user_answer: Optional[str] = None
    completed_at: Optional[datetime] = None
    reward_claimed_at: Optional[datetime] = None


class ChallengeResponse(BaseModel):
    """Challenge response schema."""
    id: int
    sender_id: int
    sender_name: str
    card: Dict[str, Any]
    recipients: List[ChallengeRecipientResponse]
    status: ChallengeStatus
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChallengesResponse(BaseModel):
    """Response schema for challenge lists."""
    challenges: List[ChallengeResponse]


class CompleteChallengeRequest(BaseModel):
    """Request schema for answering a challenge."""
    user_answer: str


class CompleteChallengeResponse(BaseModel):
    """Grading result of a challenge answer."""
    is_correct: bool
    score: int
    correct_answer: str


class ClaimRewardRequest(BaseModel):
    """Request schema for claiming the reward of a correctly answered challenge."""
    keep_card: bool = Field(False, description="Also add the challenge card to the collection")


class RewardResponse(BaseModel):
    """Outcome of a reward claim."""
    challenge_id: int
    xp_awarded: int
    total_xp: int
    card_id: Optional[int] = None


class CompletedChallengeResponse(BaseModel):
    """Activity feed entry for a completed challenge."""
    id: int
    challenge_id: int
    sender_id: int
    sender_name: str
    card: Dict[str, Any]
    user_answer: str
    user_score: int
    is_correct: bool
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CompletedChallengesResponse(BaseModel):
    """Response schema for the activity feed."""
    challenges: List[CompletedChallengeResponse]
