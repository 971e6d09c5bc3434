"""
Card service - canonical cards and the per-user ownership index.

A card is stored once. Users reach it either because they created it
(``kind=owned``, counted in their topic) or through an ownership reference
created when they kept a card received in a challenge (``kind=shared``).
Every user holding a card has exactly one ``OwnershipReference`` row for it.
"""
import logging
from typing import Dict, List, Optional, Tuple

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.identity import require_user
from app.core.store import DocumentStore
from app.models.models import Card, CardKind, OwnershipReference, Topic
from app.schemas.card import CardContent, UpdateCardRequest
from app.services import topic_service

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("vocabulary", "definition", "sentence", "pronunciation", "image_url")


def validate_content(content: CardContent) -> None:
    if not content.vocabulary or not content.vocabulary.strip():
        raise ValidationError("Vocabulary is required")
    if not content.definition or not content.definition.strip():
        raise ValidationError("Definition is required")


def _get_reference(store: DocumentStore, user_id: int, card_id: int) -> Optional[OwnershipReference]:
    references = store.query(OwnershipReference, [
        ("user_id", "==", user_id),
        ("card_id", "==", card_id),
    ])
    return references[0] if references else None


# ============================================================================
# Creation
# ============================================================================

def create_owned_card(
    store: DocumentStore,
    user_id: Optional[int],
    topic_id: Optional[int],
    content: CardContent
) -> Card:
    """
    Create a card owned by ``user_id``, optionally filed under a topic.

    The card, the owner's reference and the topic count increment are
    written in one batch, so the topic counter cannot drift on this path.
    """
    user_id = require_user(user_id)
    validate_content(content)
    if topic_id is not None:
        topic_service.get_topic(store, user_id, topic_id)

    now = store.server_timestamp()
    with store.batch():
        card = store.create(Card(
            kind=CardKind.OWNED,
            vocabulary=content.vocabulary.strip(),
            definition=content.definition.strip(),
            sentence=content.sentence or "",
            pronunciation=content.pronunciation or None,
            image_url=content.image_url or None,
            topic_id=topic_id,
            creator_user_id=user_id,
            user_count=1,
            created_at=now,
            updated_at=now,
        ))
        store.create(OwnershipReference(
            user_id=user_id,
            card_id=card.id,
            kind=CardKind.OWNED,
            topic_id=topic_id,
            added_at=now,
        ))
        if topic_id is not None:
            topic_service.adjust_card_count(store, topic_id, 1)

    logger.info(f"Created card {card.id} for user {user_id} in topic {topic_id}")
    return card


def materialize_shared_card(
    store: DocumentStore,
    sender_id: int,
    recipient_id: Optional[int],
    content: CardContent,
    added_from: str = "challenge"
) -> Card:
    """
    Add a card received from ``sender_id`` to the recipient's collection.

    Idempotent on (vocabulary, definition, recipient): if the recipient
    already has such a card, its id is returned and no duplicate is created.
    The check and the create are separate calls, so two concurrent calls can
    still both create a card; callers must tolerate the occasional duplicate.
    Shared cards never count towards the recipient's topics.
    """
    recipient_id = require_user(recipient_id)
    validate_content(content)

    existing = store.query(Card, [
        ("vocabulary", "==", content.vocabulary.strip()),
        ("definition", "==", content.definition.strip()),
        ("recipient_user_id", "==", recipient_id),
    ])
    if existing:
        card = existing[0]
        if _get_reference(store, recipient_id, card.id) is None:
            # Recipient removed it earlier; put it back in their collection
            with store.batch():
                store.create(OwnershipReference(
                    user_id=recipient_id,
                    card_id=card.id,
                    kind=CardKind.SHARED,
                    topic_id=None,
                    source_sender_id=card.shared_by_user_id,
                    added_at=store.server_timestamp(),
                ))
                store.increment(Card, card.id, "user_count", 1)
            logger.info(f"Restored shared card {card.id} for recipient {recipient_id}")
        else:
            logger.info(f"Card already exists for recipient {recipient_id}, skipping creation")
        return card

    now = store.server_timestamp()
    with store.batch():
        card = store.create(Card(
            kind=CardKind.SHARED,
            vocabulary=content.vocabulary.strip(),
            definition=content.definition.strip(),
            sentence=content.sentence or "",
            pronunciation=content.pronunciation or None,
            image_url=content.image_url or None,
            topic_id=content.topic_id,
            creator_user_id=None,
            shared_by_user_id=sender_id,
            recipient_user_id=recipient_id,
            user_count=1,
            added_from=added_from,
            created_at=now,
            updated_at=now,
        ))
        store.create(OwnershipReference(
            user_id=recipient_id,
            card_id=card.id,
            kind=CardKind.SHARED,
            topic_id=None,
            source_sender_id=sender_id,
            added_at=now,
        ))

    logger.info(f"Created shared card {card.id} from user {sender_id} for recipient {recipient_id}")
    return card


# ============================================================================
# Reads
# ============================================================================

def get_cards_for_user(
    store: DocumentStore,
    user_id: Optional[int],
    topic_id: Optional[int] = None,
    sender_id: Optional[int] = None
) -> List[Card]:
    """
    Every card the user can see, optionally restricted to one topic.

    Unions cards the user created directly (including cards created before
    the ownership index existed) with cards reachable through the user's
    references, deduplicated by card id. Order is unspecified.

    With ``sender_id`` only the cards kept from that user's challenges are
    returned.
    """
    user_id = require_user(user_id)

    created_filters = [("creator_user_id", "==", user_id)]
    reference_filters = [("user_id", "==", user_id)]
    if topic_id is not None:
        created_filters.append(("topic_id", "==", topic_id))
        reference_filters.append(("topic_id", "==", topic_id))

    cards_by_id: Dict[int, Card] = {}
    if sender_id is None:
        cards_by_id = {card.id: card for card in store.query(Card, created_filters)}
    else:
        reference_filters.append(("source_sender_id", "==", sender_id))

    references = store.query(OwnershipReference, reference_filters)
    missing_ids = [ref.card_id for ref in references if ref.card_id not in cards_by_id]
    for card in store.query(Card, [("id", "in", missing_ids)]):
        cards_by_id.setdefault(card.id, card)

    return list(cards_by_id.values())


def get_card(store: DocumentStore, user_id: Optional[int], card_id: int) -> Card:
    """Fetch one card the user created or holds a reference to."""
    user_id = require_user(user_id)
    card = store.get(Card, card_id)
    if card is None:
        raise NotFoundError(f"Card {card_id} not found")
    if card.creator_user_id != user_id and _get_reference(store, user_id, card_id) is None:
        raise AuthorizationError("Access denied: This card belongs to another user")
    return card


# ============================================================================
# Ownership resolution
# ============================================================================

def _find_shared_card(store: DocumentStore, card_id: int) -> Optional[Card]:
    card = store.get(Card, card_id)
    if card is not None and card.kind == CardKind.SHARED:
        return card
    return None


def _find_owned_card(store: DocumentStore, card_id: int) -> Optional[Card]:
    card = store.get(Card, card_id)
    if card is not None and card.kind != CardKind.SHARED:
        return card
    return None


def _resolve_card(store: DocumentStore, actor_id: int, card_id: int) -> Tuple[Card, CardKind]:
    """
    Find the card and check the actor may modify it.

    Tries the shared class first and falls back to owned, so clients that do
    not know a card's class can use one call for both. Raises NotFoundError
    only when the id matches neither.
    """
    card = _find_shared_card(store, card_id)
    if card is not None:
        if card.recipient_user_id != actor_id:
            raise AuthorizationError("You can only edit cards shared with you")
        return card, CardKind.SHARED

    card = _find_owned_card(store, card_id)
    if card is not None:
        if card.creator_user_id != actor_id:
            raise AuthorizationError("Access denied: This card belongs to another user")
        return card, CardKind.OWNED

    raise NotFoundError(f"Card {card_id} not found")


# ============================================================================
# Mutations
# ============================================================================

def update_card(
    store: DocumentStore,
    actor_id: Optional[int],
    card_id: int,
    patch: UpdateCardRequest
) -> Card:
    """
    Edit a card's content.

    A shared card is edited by its recipient only, and the edit stays on the
    recipient's copy. An owned card is edited by its creator only.
    """
    actor_id = require_user(actor_id)
    card, kind = _resolve_card(store, actor_id, card_id)

    fields = {
        key: value
        for key, value in patch.model_dump(exclude_unset=True).items()
        if key in EDITABLE_FIELDS
    }
    for key in ("vocabulary", "definition"):
        if key in fields and (fields[key] is None or not fields[key].strip()):
            raise ValidationError(f"{key.capitalize()} cannot be empty")

    now = store.server_timestamp()
    fields["updated_at"] = now
    if kind == CardKind.SHARED:
        fields["last_edited_by"] = actor_id

    card = store.update(Card, card.id, fields)
    logger.info(f"Updated {kind.value} card {card_id} by user {actor_id}")
    return card


def delete_card(store: DocumentStore, actor_id: Optional[int], card_id: int) -> bool:
    """
    Remove a card from the actor's collection.

    Owned card: deletes the card and every reference to it, and decrements
    its topic's count, in one batch. Shared card: deletes the actor's
    reference and decrements ``user_count``; the canonical card stays.
    """
    actor_id = require_user(actor_id)
    card = _find_shared_card(store, card_id)
    if card is not None:
        return _remove_shared_reference(store, actor_id, card)

    card, _ = _resolve_card(store, actor_id, card_id)
    references = store.query(OwnershipReference, [("card_id", "==", card.id)])
    topic_id = card.topic_id
    topic_exists = topic_id is not None and store.get(Topic, topic_id) is not None

    with store.batch():
        store.delete_many(references)
        store.delete(Card, card.id)
        if topic_exists:
            topic_service.adjust_card_count(store, topic_id, -1)

    if topic_id is not None and not topic_exists:
        logger.warning(f"Topic {topic_id} not found while deleting card {card_id}")
    logger.info(f"Deleted owned card {card_id} for user {actor_id}")
    return True


def delete_shared_card(store: DocumentStore, actor_id: Optional[int], card_id: int) -> bool:
    """
    Remove a shared card from the actor's collection.

    Repeated requests from a flaky client must not fail: an absent card
    returns False instead of raising NotFoundError.
    """
    actor_id = require_user(actor_id)
    card = _find_shared_card(store, card_id)
    if card is None:
        logger.warning(f"No shared card found for id {card_id}, skipping shared delete")
        return False
    return _remove_shared_reference(store, actor_id, card)


def _remove_shared_reference(store: DocumentStore, actor_id: int, card: Card) -> bool:
    reference = _get_reference(store, actor_id, card.id)
    if reference is None:
        if actor_id not in (card.recipient_user_id, card.shared_by_user_id):
            raise AuthorizationError("You can only delete cards shared with you or created by you")
        logger.info(f"Shared card {card.id} already removed for user {actor_id}")
        return False

    with store.batch():
        store.delete(OwnershipReference, reference.id)
        if (card.user_count or 0) > 0:
            store.increment(Card, card.id, "user_count", -1)

    logger.info(f"Removed shared card {card.id} from user {actor_id}'s collection")
    return True


def move_card_to_topic(
    store: DocumentStore,
    actor_id: Optional[int],
    card_id: int,
    new_topic_id: Optional[int]
) -> Card:
    """
    Move an owned card to another topic (or to no topic).

    Card, reference and both topic counters change in one batch; a failure
    leaves the old state intact.
    """
    actor_id = require_user(actor_id)
    card = _find_owned_card(store, card_id)
    if card is None:
        if _find_shared_card(store, card_id) is not None:
            raise ValidationError("Only cards you created can be moved between topics")
        raise NotFoundError(f"Card {card_id} not found")
    if card.creator_user_id != actor_id:
        raise AuthorizationError("Access denied: This card belongs to another user")

    if new_topic_id is not None:
        topic_service.get_topic(store, actor_id, new_topic_id)

    old_topic_id = card.topic_id
    if old_topic_id == new_topic_id:
        logger.info(f"Card {card_id} is already in topic {new_topic_id}")
        return card

    reference = _get_reference(store, actor_id, card.id)
    old_topic_exists = old_topic_id is not None and store.get(Topic, old_topic_id) is not None
    now = store.server_timestamp()

    with store.batch():
        store.update(Card, card.id, {"topic_id": new_topic_id, "updated_at": now})
        if reference is not None:
            store.update(OwnershipReference, reference.id, {"topic_id": new_topic_id})
        if old_topic_exists:
            topic_service.adjust_card_count(store, old_topic_id, -1)
        if new_topic_id is not None:
            topic_service.adjust_card_count(store, new_topic_id, 1)

    logger.info(f"Moved card {card_id} from topic {old_topic_id} to {new_topic_id}")
    return store.get(Card, card_id)
