"""
Topics endpoint.
"""
from fastapi import APIRouter, Depends, status
from typing import Optional
from app.core.database import get_store
from app.core.identity import get_current_user_id
from app.core.store import DocumentStore
from app.schemas.topic import (
    TopicResponse,
    CreateTopicRequest,
    UpdateTopicRequest,
    TopicsResponse,
    TopicStatsResponse
)
from app.services import topic_service

router = APIRouter(prefix="/topics", tags=["topics"])


@router.get("", response_model=TopicsResponse)
async def get_topics(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Get the current user's topics, most recent first.
    When logged out, returns an empty list since all topics belong to users."""
    if user_id is None:
        return TopicsResponse(topics=[])

    topics = topic_service.get_topics(store, user_id)
    return TopicsResponse(
        topics=[TopicResponse.model_validate(topic) for topic in topics]
    )


@router.get("/stats", response_model=TopicStatsResponse)
async def get_topic_stats(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return topic_service.get_stats(store, user_id)


@router.post("", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
async def create_topic(
    request: CreateTopicRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Create a new topic for the current user."""
    topic = topic_service.create_topic(store, user_id, request.name, request.description)
    return TopicResponse.model_validate(topic)


@router.get("/{topic_id}", response_model=TopicResponse)
async def get_topic(
    topic_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    topic = topic_service.get_topic(store, user_id, topic_id)
    return TopicResponse.model_validate(topic)


@router.put("/{topic_id}", response_model=TopicResponse)
async def update_topic(
    topic_id: int,
    request: UpdateTopicRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Update a topic by ID."""
    topic = topic_service.update_topic(
        store, user_id, topic_id,
        name=request.name,
        description=request.description
    )
    return TopicResponse.model_validate(topic)


@router.post("/{topic_id}/recount", response_model=TopicResponse)
async def recount_topic(
    topic_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Recompute a topic's card count from its cards."""
    topic = topic_service.recount_card_count(store, user_id, topic_id)
    return TopicResponse.model_validate(topic)


@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic(
    topic_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Delete a topic together with the cards filed under it."""
    topic_service.delete_topic(store, user_id, topic_id)
    return None
