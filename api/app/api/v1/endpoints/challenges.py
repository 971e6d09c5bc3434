"""
Challenges endpoint.
"""
from fastapi import APIRouter, Depends, status
from typing import Optional
from app.core.database import get_store
from app.core.identity import get_current_user_id
from app.core.store import DocumentStore
from app.schemas.challenge import (
    ChallengeResponse,
    ChallengesResponse,
    ClaimRewardRequest,
    CompleteChallengeRequest,
    CompleteChallengeResponse,
    CompletedChallengeResponse,
    CompletedChallengesResponse,
    RewardResponse,
    SendChallengeRequest
)
from app.services import challenge_service, reward_service

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.post("", response_model=ChallengeResponse, status_code=status.HTTP_201_CREATED)
async def send_challenge(
    request: SendChallengeRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Send a card to friends as a guessing challenge."""
    challenge = challenge_service.send_challenge(
        store, user_id, request.card, request.recipient_ids,
        sender_name=request.sender_name,
        source_card_id=request.source_card_id
    )
    return ChallengeResponse.model_validate(challenge)


@router.get("/pending", response_model=ChallengesResponse)
async def get_pending_challenges(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Unexpired challenges waiting for the current user's answer."""
    if user_id is None:
        return ChallengesResponse(challenges=[])
    challenges = challenge_service.get_pending_challenges(store, user_id)
    return ChallengesResponse(
        challenges=[ChallengeResponse.model_validate(c) for c in challenges]
    )


@router.get("/sent", response_model=ChallengesResponse)
async def get_sent_challenges(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    challenges = challenge_service.get_sent_challenges(store, user_id)
    return ChallengesResponse(
        challenges=[ChallengeResponse.model_validate(c) for c in challenges]
    )


@router.get("/completed", response_model=CompletedChallengesResponse)
async def get_completed_challenges(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Activity feed of the current user's answered challenges."""
    records = challenge_service.get_completed_challenges(store, user_id)
    return CompletedChallengesResponse(
        challenges=[CompletedChallengeResponse.model_validate(r) for r in records]
    )


@router.get("/{challenge_id}", response_model=ChallengeResponse)
async def get_challenge(
    challenge_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    challenge = challenge_service.get_challenge(store, user_id, challenge_id)
    return ChallengeResponse.model_validate(challenge)


@router.post("/{challenge_id}/complete", response_model=CompleteChallengeResponse)
async def complete_challenge(
    challenge_id: int,
    request: CompleteChallengeRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Submit an answer. The first submission settles the challenge for this user."""
    return challenge_service.complete_challenge(store, challenge_id, user_id, request.user_answer)


@router.post("/{challenge_id}/reject")
async def reject_challenge(
    challenge_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    rejected = challenge_service.reject_challenge(store, challenge_id, user_id)
    return {"challenge_id": challenge_id, "rejected": rejected}


@router.post("/{challenge_id}/reward", response_model=RewardResponse)
async def claim_reward(
    challenge_id: int,
    request: ClaimRewardRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Claim XP for a correct answer, optionally keeping the card."""
    return reward_service.claim_challenge_reward(store, challenge_id, user_id, request.keep_card)


@router.delete("/{challenge_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_challenge(
    challenge_id: int,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    challenge_service.delete_challenge(store, challenge_id, user_id)
    return None
