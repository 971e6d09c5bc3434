"""
Card schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.models.enums import CardKind


class CardContent(BaseModel):
    """Editable vocabulary content of a card."""
    vocabulary: str = Field(..., description="Term being learned")
    definition: str = Field(..., description="Meaning of the term")
    sentence: str = Field("", description="Example sentence")
    pronunciation: Optional[str] = Field(None, description="Phonetic transcription")
    image_url: Optional[str] = Field(None, description="Image reference")
    topic_id: Optional[int] = Field(None, description="Topic the content was filed under")


class CreateCardRequest(CardContent):
    """Request schema for creating an owned card."""
    enrich: bool = Field(False, description="Fill missing pronunciation / definition from the dictionary provider")


class UpdateCardRequest(BaseModel):
    """Partial card update. Only provided fields change."""
    vocabulary: Optional[str] = None
    definition: Optional[str] = None
    sentence: Optional[str] = None
    pronunciation: Optional[str] = None
    image_url: Optional[str] = None


class MoveCardRequest(BaseModel):
    """Request schema for moving a card between topics (None = no topic)."""
    topic_id: Optional[int] = None


class MaterializeCardRequest(BaseModel):
    """Request schema for keeping the card of a correctly answered challenge."""
    challenge_id: int


class CardResponse(BaseModel):
    """Card response schema."""
    id: int
    kind: CardKind
    vocabulary: str
    definition: str
    sentence: str = ""
    pronunciation: Optional[str] = None
    image_url: Optional[str] = None
    topic_id: Optional[int] = None
    creator_user_id: Optional[int] = None
    shared_by_user_id: Optional[int] = None
    recipient_user_id: Optional[int] = None
    user_count: int = 0
    added_from: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CardsResponse(BaseModel):
    """Response schema for card lists."""
    cards: List[CardResponse]


class DeleteCardResponse(BaseModel):
    """Result of a delete request."""
    card_id: int
    deleted: bool
