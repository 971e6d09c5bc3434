"""
Topic schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class TopicResponse(BaseModel):
    """Topic response schema."""
    id: int
    user_id: int
    name: str
    description: str = ""
    card_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CreateTopicRequest(BaseModel):
    """Request schema for creating a topic."""
    name: str
    description: Optional[str] = None


class UpdateTopicRequest(BaseModel):
    """Request schema for updating a topic."""
    name: Optional[str] = None
    description: Optional[str] = None


class TopicsResponse(BaseModel):
    """Response schema for topics list."""
    topics: List[TopicResponse]


class TopicStatsResponse(BaseModel):
    """Counts across a user's topics."""
    total_topics: int = Field(..., description="Number of topics the user owns")
    total_cards: int = Field(..., description="Sum of the topics' card counters")
    cards_in_database: int = Field(..., description="Cards the user can see in the store")
