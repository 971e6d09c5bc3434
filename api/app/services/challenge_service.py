"""
Challenge service - sending, answering and rejecting vocabulary challenges.

Each recipient of a challenge moves independently from ``pending`` to either
``completed`` or ``rejected``; both are terminal. Answering grades and logs
the attempt but never copies the card: keeping the card is a separate step
handled by the reward service.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional

from app.core import signals
from app.core.config import settings
from app.core.exceptions import AuthorizationError, NotFoundError, StateError, ValidationError
from app.core.identity import require_user
from app.core.store import DocumentStore, as_utc, utc_now
from app.models.models import Challenge, ChallengeStatus, CompletedChallengeRecord, RecipientStatus
from app.schemas.card import CardContent
from app.schemas.challenge import CompleteChallengeResponse
from app.services import card_service

logger = logging.getLogger(__name__)

CORRECT_SCORE = 100
WRONG_SCORE = 0


def grade_answer(user_answer: Optional[str], vocabulary: str) -> bool:
    """Case-insensitive, whitespace-trimmed exact match."""
    return (user_answer or "").strip().lower() == (vocabulary or "").strip().lower()


def is_expired(challenge: Challenge, now: Optional[datetime] = None) -> bool:
    if challenge.expires_at is None:
        return False
    return as_utc(challenge.expires_at) <= as_utc(now or utc_now())


def send_challenge(
    store: DocumentStore,
    sender_id: Optional[int],
    content: CardContent,
    recipient_ids: List[int],
    sender_name: Optional[str] = None,
    source_card_id: Optional[int] = None
) -> Challenge:
    """
    Send a snapshot of a card to friends as a guessing challenge.

    Duplicate recipient ids collapse to one entry; the sender is never a
    recipient of their own challenge.
    """
    sender_id = require_user(sender_id)
    # Recipients keep the card through materialize_shared_card, which needs both fields
    card_service.validate_content(content)

    unique_ids: List[int] = []
    for recipient_id in recipient_ids or []:
        if recipient_id != sender_id and recipient_id not in unique_ids:
            unique_ids.append(recipient_id)
    if not unique_ids:
        raise ValidationError("At least one recipient is required")

    snapshot = content.model_dump()
    snapshot["vocabulary"] = content.vocabulary.strip()
    snapshot["source_card_id"] = source_card_id

    now = store.server_timestamp()
    challenge = store.create(Challenge(
        sender_id=sender_id,
        sender_name=(sender_name or "").strip() or "Someone",
        card=snapshot,
        recipients=[
            {
                "user_id": recipient_id,
                "status": RecipientStatus.PENDING.value,
                "score": None,
                "user_answer": None,
                "completed_at": None,
                "reward_claimed_at": None,
            }
            for recipient_id in unique_ids
        ],
        status=ChallengeStatus.ACTIVE,
        created_at=now,
        updated_at=now,
        expires_at=now + timedelta(days=settings.challenge_ttl_days),
    ))

    logger.info(f"Challenge {challenge.id} sent by user {sender_id} to {len(unique_ids)} recipients")
    signals.challenge_sent.send(challenge, recipient_ids=unique_ids)
    return challenge


def get_challenge(store: DocumentStore, user_id: Optional[int], challenge_id: int) -> Challenge:
    """Fetch a challenge visible to its sender and recipients."""
    user_id = require_user(user_id)
    challenge = store.get(Challenge, challenge_id)
    if challenge is None:
        raise NotFoundError(f"Challenge {challenge_id} not found")
    if challenge.sender_id != user_id and challenge.recipient_entry(user_id) is None:
        raise AuthorizationError("Access denied: You are not part of this challenge")
    return challenge


def get_pending_challenges(store: DocumentStore, user_id: Optional[int]) -> List[Challenge]:
    """
    Unexpired challenges still waiting for the user's answer, newest first.

    Recipients are embedded in each challenge, so this scans every challenge
    and filters in memory. Fine at small scale; a per-recipient collection
    would be needed to index it.
    """
    user_id = require_user(user_id)
    now = store.server_timestamp()
    pending = []
    for challenge in store.query(Challenge):
        entry = challenge.recipient_entry(user_id)
        if entry is None or entry.get("status") != RecipientStatus.PENDING.value:
            continue
        if is_expired(challenge, now):
            continue
        pending.append(challenge)
    return sorted(pending, key=lambda c: as_utc(c.created_at), reverse=True)


def get_sent_challenges(store: DocumentStore, sender_id: Optional[int]) -> List[Challenge]:
    sender_id = require_user(sender_id)
    challenges = store.query(Challenge, [("sender_id", "==", sender_id)])
    return sorted(challenges, key=lambda c: as_utc(c.created_at), reverse=True)


def get_completed_challenges(store: DocumentStore, user_id: Optional[int]) -> List[CompletedChallengeRecord]:
    """The user's answered challenges, newest first."""
    user_id = require_user(user_id)
    records = store.query(CompletedChallengeRecord, [("user_id", "==", user_id)])
    return sorted(records, key=lambda r: as_utc(r.completed_at), reverse=True)


def complete_challenge(
    store: DocumentStore,
    challenge_id: int,
    user_id: Optional[int],
    user_answer: str
) -> CompleteChallengeResponse:
    """
    Grade the user's answer and settle their entry.

    The entry becomes ``completed`` whether or not the answer is right
    (score 0 when wrong), and a CompletedChallengeRecord is appended in the
    same batch. The card is not added to the user's collection here.

    Raises:
        NotFoundError: challenge does not exist
        AuthorizationError: user is not a recipient
        StateError: the user already answered or rejected, or it expired
    """
    user_id = require_user(user_id)
    challenge = store.get(Challenge, challenge_id)
    if challenge is None:
        raise NotFoundError(f"Challenge {challenge_id} not found")

    entry = challenge.recipient_entry(user_id)
    if entry is None:
        raise AuthorizationError("You are not a recipient of this challenge")
    if entry.get("status") != RecipientStatus.PENDING.value:
        raise StateError(f"Challenge {challenge_id} is already {entry.get('status')}")

    now = store.server_timestamp()
    if is_expired(challenge, now):
        raise StateError(f"Challenge {challenge_id} has expired")

    correct_answer = challenge.card.get("vocabulary", "")
    is_correct = grade_answer(user_answer, correct_answer)
    score = CORRECT_SCORE if is_correct else WRONG_SCORE

    with store.batch():
        store.update(Challenge, challenge.id, {
            "recipients": challenge.updated_recipients(user_id, {
                "status": RecipientStatus.COMPLETED.value,
                "score": score,
                "user_answer": user_answer,
                "completed_at": now.isoformat(),
            }),
            "updated_at": now,
        })
        store.create(CompletedChallengeRecord(
            user_id=user_id,
            challenge_id=challenge.id,
            sender_id=challenge.sender_id,
            sender_name=challenge.sender_name,
            card={
                "vocabulary": challenge.card.get("vocabulary", ""),
                "definition": challenge.card.get("definition", ""),
                "sentence": challenge.card.get("sentence", ""),
                "image_url": challenge.card.get("image_url"),
            },
            user_answer=user_answer,
            user_score=score,
            is_correct=is_correct,
            completed_at=now,
        ))

    logger.info(f"User {user_id} completed challenge {challenge_id}: correct={is_correct}, score={score}")
    signals.challenge_completed.send(challenge, user_id=user_id, is_correct=is_correct, score=score)
    return CompleteChallengeResponse(
        is_correct=is_correct,
        score=score,
        correct_answer=correct_answer,
    )


def reject_challenge(store: DocumentStore, challenge_id: int, user_id: Optional[int]) -> bool:
    """
    Decline a challenge.

    Returns False without changing anything if the user's entry is already
    settled, so repeated rejections are harmless.
    """
    user_id = require_user(user_id)
    challenge = store.get(Challenge, challenge_id)
    if challenge is None:
        raise NotFoundError(f"Challenge {challenge_id} not found")
    entry = challenge.recipient_entry(user_id)
    if entry is None:
        raise NotFoundError(f"No challenge {challenge_id} addressed to user {user_id}")
    if entry.get("status") != RecipientStatus.PENDING.value:
        logger.info(f"Challenge {challenge_id} already {entry.get('status')} for user {user_id}")
        return False

    now = store.server_timestamp()
    store.update(Challenge, challenge.id, {
        "recipients": challenge.updated_recipients(user_id, {
            "status": RecipientStatus.REJECTED.value,
        }),
        "updated_at": now,
    })
    logger.info(f"User {user_id} rejected challenge {challenge_id}")
    signals.challenge_rejected.send(challenge, user_id=user_id)
    return True


def delete_challenge(store: DocumentStore, challenge_id: int, sender_id: Optional[int]) -> bool:
    """Withdraw a challenge. Only its sender may delete it."""
    sender_id = require_user(sender_id)
    challenge = store.get(Challenge, challenge_id)
    if challenge is None:
        raise NotFoundError(f"Challenge {challenge_id} not found")
    if challenge.sender_id != sender_id:
        raise AuthorizationError("Only the sender can delete this challenge")

    store.delete(Challenge, challenge_id)
    logger.info(f"Challenge {challenge_id} deleted by sender {sender_id}")
    return True


def watch_pending_challenges(
    user_id: Optional[int],
    callback: Callable[[Challenge], Any]
) -> signals.Subscription:
    """
    Call ``callback(challenge)`` whenever a challenge addressed to the user is sent.

    The returned handle keeps the callback connected until it is closed,
    either explicitly or by leaving its ``with`` block.
    """
    user_id = require_user(user_id)

    def on_challenge_sent(challenge: Challenge, recipient_ids: List[int], **kwargs: Any) -> None:
        if user_id in recipient_ids:
            callback(challenge)

    return signals.subscribe(signals.challenge_sent, on_challenge_sent)
