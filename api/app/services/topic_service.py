"""
Topic service - owns topics and their card-count aggregate.
"""
import logging
from typing import List, Optional

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.identity import require_user
from app.core.store import DocumentStore, as_utc
from app.models.models import Card, OwnershipReference, Topic
from app.schemas.topic import TopicStatsResponse

logger = logging.getLogger(__name__)


def create_topic(
    store: DocumentStore,
    owner_id: Optional[int],
    name: str,
    description: Optional[str] = None
) -> Topic:
    """Create a topic for ``owner_id`` with an empty card count."""
    owner_id = require_user(owner_id)
    if not name or not name.strip():
        raise ValidationError("Topic name is required")

    now = store.server_timestamp()
    topic = store.create(Topic(
        user_id=owner_id,
        name=name.strip(),
        description=(description or "").strip(),
        card_count=0,
        created_at=now,
        updated_at=now,
    ))
    logger.info(f"Created topic {topic.id} for user {owner_id}")
    return topic


def get_topics(store: DocumentStore, owner_id: Optional[int]) -> List[Topic]:
    """All topics of a user, most recent first."""
    owner_id = require_user(owner_id)
    topics = store.query(Topic, [("user_id", "==", owner_id)])
    return sorted(topics, key=lambda topic: as_utc(topic.created_at), reverse=True)


def get_topic(store: DocumentStore, owner_id: Optional[int], topic_id: int) -> Topic:
    """Fetch a topic, checking that ``owner_id`` owns it."""
    owner_id = require_user(owner_id)
    topic = store.get(Topic, topic_id)
    if topic is None:
        raise NotFoundError(f"Topic {topic_id} not found")
    if topic.user_id != owner_id:
        raise AuthorizationError("Access denied: This topic belongs to another user")
    return topic


def update_topic(
    store: DocumentStore,
    owner_id: Optional[int],
    topic_id: int,
    name: Optional[str] = None,
    description: Optional[str] = None
) -> Topic:
    """Rename / re-describe a topic. Owner and card count never change here."""
    get_topic(store, owner_id, topic_id)

    fields = {}
    if name is not None:
        if not name.strip():
            raise ValidationError("Topic name is required")
        fields["name"] = name.strip()
    if description is not None:
        fields["description"] = description.strip()
    fields["updated_at"] = store.server_timestamp()

    return store.update(Topic, topic_id, fields)


def delete_topic(store: DocumentStore, owner_id: Optional[int], topic_id: int) -> int:
    """
    Delete a topic and the owner's cards filed under it.

    Only cards created by the owner are removed; a card shared into someone
    else's collection is never deleted from under them. The cards' ownership
    references go in the same batch.

    Returns:
        Number of cards deleted
    """
    owner_id = require_user(owner_id)
    topic = get_topic(store, owner_id, topic_id)

    cards = store.query(Card, [
        ("topic_id", "==", topic.id),
        ("creator_user_id", "==", owner_id),
    ])
    card_ids = [card.id for card in cards]
    references = store.query(OwnershipReference, [("card_id", "in", card_ids)]) if card_ids else []

    with store.batch():
        store.delete_many(references)
        store.delete_many(cards)
        store.delete(Topic, topic.id)

    logger.info(f"Deleted topic {topic_id} and {len(cards)} cards for user {owner_id}")
    return len(cards)


def adjust_card_count(store: DocumentStore, topic_id: int, delta: int) -> bool:
    """
    Atomically add ``delta`` to a topic's card count.

    Increments commute, so concurrent calls never conflict. Returns False if
    the topic no longer exists.
    """
    updated = store.increment(
        Topic, topic_id, "card_count", delta,
        updated_at=store.server_timestamp(),
    )
    if not updated:
        logger.warning(f"Topic {topic_id} not found while adjusting card count by {delta}")
    return updated


def recount_card_count(store: DocumentStore, owner_id: Optional[int], topic_id: int) -> Topic:
    """Repair a drifted counter by recounting the owner's cards in the topic."""
    topic = get_topic(store, owner_id, topic_id)
    actual = len(store.query(Card, [
        ("topic_id", "==", topic.id),
        ("creator_user_id", "==", topic.user_id),
    ]))
    if actual != topic.card_count:
        logger.warning(
            f"Topic {topic_id} card count drifted: stored {topic.card_count}, actual {actual}"
        )
    return store.update(Topic, topic_id, {
        "card_count": actual,
        "updated_at": store.server_timestamp(),
    })


def get_stats(store: DocumentStore, owner_id: Optional[int]) -> TopicStatsResponse:
    """Topic and card totals for a user."""
    # Imported here to avoid a circular import with the card service
    from app.services.card_service import get_cards_for_user

    topics = get_topics(store, owner_id)
    cards = get_cards_for_user(store, owner_id)
    return TopicStatsResponse(
        total_topics=len(topics),
        total_cards=sum(topic.card_count or 0 for topic in topics),
        cards_in_database=len(cards),
    )
