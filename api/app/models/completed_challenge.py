"""
CompletedChallengeRecord model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional, Dict, Any
from datetime import datetime
from app.core.store import utc_now
from sqlalchemy import Column, JSON


class CompletedChallengeRecord(SQLModel, table=True):
    """Append-only log entry written once per (user, challenge) completion.

    Feeds the activity list and the per-day XP totals.
    """
    __tablename__ = "completed_challenge"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    challenge_id: int = Field(index=True)
    sender_id: int
    sender_name: str
    card: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    user_answer: str
    user_score: int
    is_correct: bool
    completed_at: datetime = Field(default_factory=utc_now, index=True)
