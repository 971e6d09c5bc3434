"""
Cards endpoint.
"""
from fastapi import APIRouter, Depends, status
from typing import Optional
from app.core.database import get_store
from app.core.identity import get_current_user_id
from app.core.store import DocumentStore, as_utc
from app.schemas.card import (
    CardContent,
    CardResponse,
    CardsResponse,
    CreateCardRequest,
    DeleteCardResponse,
    MaterializeCardRequest,
    MoveCardRequest,
    UpdateCardRequest
)
from app.services import card_service, reward_service
from app.services.enrichment_service import enrichment_service

router = APIRouter(prefix="/cards", tags=["cards"])


@router.get("", response_model=CardsResponse)
async def get_cards(
    topic_id: Optional[int] = None,
    sender_id: Optional[int] = None,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Get every card the current user created or keeps, optionally for one topic or one sender."""
    if user_id is None:
        return CardsResponse(cards=[])

    cards = card_service.get_cards_for_user(store, user_id, topic_id, sender_id)
    cards = sorted(cards, key=lambda card: as_utc(card.created_at), reverse=True)
    return CardsResponse(cards=[CardResponse.model_validate(card) for card in cards])


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    request: CreateCardRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Create a card, optionally filling pronunciation / definition from the dictionary."""
    content = CardContent(**request.model_dump(exclude={"enrich"}))
    if request.enrich:
        content = enrichment_service.enrich_content(content)

    card = card_service.create_owned_card(store, user_id, content.topic_id, content)
    return CardResponse.model_validate(card)


@router.post("/materialize", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def materialize_card(
    request: MaterializeCardRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Keep the card of a challenge the user answered correctly. Repeating the call returns the same card."""
    card = reward_service.keep_challenge_card(store, request.challenge_id, user_id)
    return CardResponse.model_validate(card)


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    card = card_service.get_card(store, user_id, card_id)
    return CardResponse.model_validate(card)


@router.patch("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: int,
    request: UpdateCardRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Edit a card the current user created, or a shared card they received."""
    card = card_service.update_card(store, user_id, card_id, request)
    return CardResponse.model_validate(card)


@router.put("/{card_id}/topic", response_model=CardResponse)
async def move_card(
    card_id: int,
    request: MoveCardRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    card = card_service.move_card_to_topic(store, user_id, card_id, request.topic_id)
    return CardResponse.model_validate(card)


@router.delete("/{card_id}", response_model=DeleteCardResponse)
async def delete_card(
    card_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    deleted = card_service.delete_card(store, user_id, card_id)
    return DeleteCardResponse(card_id=card_id, deleted=deleted)


@router.delete("/shared/{card_id}", response_model=DeleteCardResponse)
async def delete_shared_card(
    card_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Remove a shared card from the collection. Succeeds even if it is already gone."""
    deleted = card_service.delete_shared_card(store, user_id, card_id)
    return DeleteCardResponse(card_id=card_id, deleted=deleted)
