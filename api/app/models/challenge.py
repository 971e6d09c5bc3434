"""
Challenge model.
"""
import copy
from sqlmodel import SQLModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from app.core.store import utc_now
from sqlalchemy import Column, JSON, String as SAString
from app.models.enums import ChallengeStatus


class Challenge(SQLModel, table=True):
    """Vocabulary challenge sent to one or more friends.

    ``card`` is a snapshot of the sender's card at send time so the challenge
    stays answerable after the original is edited or deleted. ``recipients``
    holds one entry per recipient:
    ``{user_id, status, score, user_answer, completed_at, reward_claimed_at}``
    with timestamps as ISO strings.
    """
    __tablename__ = "challenge"

    id: Optional[int] = Field(default=None, primary_key=True)
    sender_id: int = Field(index=True)
    sender_name: str = Field(default="Someone")
    card: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    recipients: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    status: ChallengeStatus = Field(
        default=ChallengeStatus.ACTIVE,
        sa_column=Column(SAString, nullable=False, default=ChallengeStatus.ACTIVE.value)
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime

    def recipient_entry(self, user_id: int) -> Optional[Dict[str, Any]]:
        for recipient in self.recipients or []:
            if recipient.get("user_id") == user_id:
                return recipient
        return None

    def updated_recipients(self, user_id: int, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Copy of ``recipients`` with one entry changed.

        JSON columns only register a change when a new value is assigned.
        """
        recipients = copy.deepcopy(self.recipients or [])
        for recipient in recipients:
            if recipient.get("user_id") == user_id:
                recipient.update(changes)
        return recipients
