"""
Card model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from app.core.store import utc_now
from sqlalchemy import Column, String as SAString
from app.models.enums import CardKind


class Card(SQLModel, table=True):
    """Canonical card table - a vocabulary item's content, stored once.

    Owned cards carry ``creator_user_id``. Shared cards are materialized for
    a challenge recipient: ``creator_user_id`` stays empty and the sender /
    recipient pair is recorded instead.
    """
    __tablename__ = "card"

    id: Optional[int] = Field(default=None, primary_key=True)
    kind: CardKind = Field(
        default=CardKind.OWNED,
        sa_column=Column(SAString, nullable=False, default=CardKind.OWNED.value)
    )
    vocabulary: str = Field(index=True)
    definition: str
    sentence: str = Field(default="")
    pronunciation: Optional[str] = None
    image_url: Optional[str] = None
    topic_id: Optional[int] = Field(default=None, index=True)  # Informational for shared cards
    creator_user_id: Optional[int] = Field(default=None, index=True)
    shared_by_user_id: Optional[int] = Field(default=None, index=True)
    recipient_user_id: Optional[int] = Field(default=None, index=True)
    user_count: int = Field(default=0)  # Number of ownership references
    added_from: Optional[str] = None  # e.g. 'challenge'
    last_edited_by: Optional[int] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
