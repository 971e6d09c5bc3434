"""
Reward service - turns a correct challenge answer into XP and, optionally, a card.

Keeping a received card is only possible through a challenge the user
answered correctly; the card content always comes from the challenge
snapshot, never from the client.
"""
import logging
from typing import Optional, Tuple

from app.core.config import settings
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, StateError
from app.core.identity import require_user
from app.core.store import DocumentStore
from app.models.models import Card, Challenge, RecipientStatus
from app.schemas.card import CardContent
from app.schemas.challenge import RewardResponse
from app.services import card_service, xp_service

logger = logging.getLogger(__name__)


def _load_rewardable(store: DocumentStore, challenge_id: int, user_id: int) -> Tuple[Challenge, dict]:
    challenge = store.get(Challenge, challenge_id)
    if challenge is None:
        raise NotFoundError(f"Challenge {challenge_id} not found")

    entry = challenge.recipient_entry(user_id)
    if entry is None:
        raise AuthorizationError("You are not a recipient of this challenge")
    if entry.get("status") != RecipientStatus.COMPLETED.value or not entry.get("score"):
        raise StateError("Only correctly answered challenges earn a reward")
    return challenge, entry


def _snapshot_content(challenge: Challenge) -> CardContent:
    snapshot = challenge.card or {}
    return CardContent(
        vocabulary=snapshot.get("vocabulary") or "",
        definition=snapshot.get("definition") or "",
        sentence=snapshot.get("sentence") or "",
        pronunciation=snapshot.get("pronunciation"),
        image_url=snapshot.get("image_url"),
        topic_id=snapshot.get("topic_id"),
    )


def keep_challenge_card(store: DocumentStore, challenge_id: int, user_id: Optional[int]) -> Card:
    """
    Add the card of a correctly answered challenge to the user's collection.

    Idempotent, and independent of the XP claim: calling it again after a
    failed or skipped keep returns the same card.
    """
    user_id = require_user(user_id)
    challenge, _ = _load_rewardable(store, challenge_id, user_id)
    return card_service.materialize_shared_card(
        store,
        challenge.sender_id,
        user_id,
        _snapshot_content(challenge),
    )


def claim_challenge_reward(
    store: DocumentStore,
    challenge_id: int,
    user_id: Optional[int],
    keep_card: bool = False
) -> RewardResponse:
    """
    Claim the XP for a correctly answered challenge.

    XP and the claim marker are written in one batch, so a reward is paid at
    most once. With ``keep_card`` the challenge card is then added to the
    user's collection. The card content is validated before any XP is paid;
    if keeping still fails afterwards, ``keep_challenge_card`` retries it
    without a second claim.
    """
    user_id = require_user(user_id)
    challenge, entry = _load_rewardable(store, challenge_id, user_id)
    if entry.get("reward_claimed_at"):
        raise ConflictError(f"Reward for challenge {challenge_id} was already claimed")

    content = None
    if keep_card:
        content = _snapshot_content(challenge)
        card_service.validate_content(content)

    xp_amount = settings.challenge_reward_xp
    now = store.server_timestamp()
    with store.batch():
        total_xp = xp_service.award_xp(store, user_id, xp_amount)
        store.update(Challenge, challenge.id, {
            "recipients": challenge.updated_recipients(user_id, {
                "reward_claimed_at": now.isoformat(),
            }),
            "updated_at": now,
        })

    card_id = None
    if content is not None:
        card = card_service.materialize_shared_card(store, challenge.sender_id, user_id, content)
        card_id = card.id

    logger.info(
        f"User {user_id} claimed {xp_amount} XP for challenge {challenge_id}"
        f"{f', kept card {card_id}' if card_id else ''}"
    )
    return RewardResponse(
        challenge_id=challenge_id,
        xp_awarded=xp_amount,
        total_xp=total_xp,
        card_id=card_id,
    )
