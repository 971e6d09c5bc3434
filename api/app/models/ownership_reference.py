"""
OwnershipReference model - per-user pointer to a canonical card.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from app.core.store import utc_now
from sqlalchemy import Column, String as SAString, UniqueConstraint
from app.models.enums import CardKind


class OwnershipReference(SQLModel, table=True):
    """One row per (user, card) pair; makes card sharing many-to-many."""
    __tablename__ = "ownership_reference"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", name="uq_ownership_reference_user_card"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    card_id: int = Field(foreign_key="card.id", index=True)
    kind: CardKind = Field(
        default=CardKind.OWNED,
        sa_column=Column(SAString, nullable=False, default=CardKind.OWNED.value)
    )
    topic_id: Optional[int] = Field(default=None, index=True)
    source_sender_id: Optional[int] = None  # Who shared the card, for shared references
    added_at: datetime = Field(default_factory=utc_now)
