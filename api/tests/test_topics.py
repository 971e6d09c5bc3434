import pytest

from app.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from app.models.models import Card, OwnershipReference, Topic
from app.schemas.card import CardContent
from app.services import card_service, topic_service


def _content(vocabulary, definition="meaning"):
    return CardContent(vocabulary=vocabulary, definition=definition)


def test_create_topic_starts_with_zero_cards(store):
    topic = topic_service.create_topic(store, 1, "  Fruit  ", "Things to eat")

    assert topic.id is not None
    assert topic.name == "Fruit"
    assert topic.user_id == 1
    assert topic.card_count == 0


def test_create_topic_requires_user_and_name(store):
    with pytest.raises(AuthenticationError):
        topic_service.create_topic(store, None, "Fruit")
    with pytest.raises(ValidationError):
        topic_service.create_topic(store, 1, "   ")


def test_get_topics_only_returns_owners_topics(store):
    topic_service.create_topic(store, 1, "Fruit")
    topic_service.create_topic(store, 1, "Animals")
    topic_service.create_topic(store, 2, "Verbs")

    names = {topic.name for topic in topic_service.get_topics(store, 1)}
    assert names == {"Fruit", "Animals"}


def test_get_topic_checks_ownership(store):
    topic = topic_service.create_topic(store, 1, "Fruit")

    with pytest.raises(AuthorizationError):
        topic_service.get_topic(store, 2, topic.id)
    with pytest.raises(NotFoundError):
        topic_service.get_topic(store, 1, 999)


def test_update_topic_keeps_owner_and_count(store):
    topic = topic_service.create_topic(store, 1, "Fruit")
    card_service.create_owned_card(store, 1, topic.id, _content("apple"))

    updated = topic_service.update_topic(store, 1, topic.id, name="Fruits", description="Sweet")

    assert updated.name == "Fruits"
    assert updated.description == "Sweet"
    assert updated.user_id == 1
    assert updated.card_count == 1
    with pytest.raises(AuthorizationError):
        topic_service.update_topic(store, 2, topic.id, name="Mine now")


def test_delete_topic_removes_owned_cards_and_references(store):
    topic = topic_service.create_topic(store, 1, "Fruit")
    apple = card_service.create_owned_card(store, 1, topic.id, _content("apple"))
    card_service.create_owned_card(store, 1, topic.id, _content("pear"))
    elsewhere = card_service.create_owned_card(store, 1, None, _content("dog"))

    deleted = topic_service.delete_topic(store, 1, topic.id)

    assert deleted == 2
    assert store.get(Topic, topic.id) is None
    assert store.get(Card, apple.id) is None
    assert store.query(OwnershipReference, [("card_id", "==", apple.id)]) == []
    assert [card.id for card in card_service.get_cards_for_user(store, 1)] == [elsewhere.id]


def test_delete_topic_requires_owner(store):
    topic = topic_service.create_topic(store, 1, "Fruit")

    with pytest.raises(AuthorizationError):
        topic_service.delete_topic(store, 2, topic.id)
    with pytest.raises(NotFoundError):
        topic_service.delete_topic(store, 1, 999)


def test_delete_topic_leaves_shared_cards_alone(store):
    topic = topic_service.create_topic(store, 2, "Fruit")
    shared = card_service.materialize_shared_card(
        store, 1, 2, CardContent(vocabulary="kiwi", definition="fruit", topic_id=topic.id)
    )

    assert topic_service.delete_topic(store, 2, topic.id) == 0
    assert store.get(Card, shared.id) is not None


def test_recount_repairs_drifted_counter(store):
    topic = topic_service.create_topic(store, 1, "Fruit")
    card_service.create_owned_card(store, 1, topic.id, _content("apple"))
    store.update(Topic, topic.id, {"card_count": 10})

    repaired = topic_service.recount_card_count(store, 1, topic.id)

    assert repaired.card_count == 1


def test_adjust_card_count_on_missing_topic(store):
    assert topic_service.adjust_card_count(store, 999, 1) is False


def test_stats_count_topics_and_cards(store):
    fruit = topic_service.create_topic(store, 1, "Fruit")
    topic_service.create_topic(store, 1, "Animals")
    card_service.create_owned_card(store, 1, fruit.id, _content("apple"))
    card_service.create_owned_card(store, 1, None, _content("loose"))
    card_service.materialize_shared_card(store, 2, 1, _content("kiwi"))

    stats = topic_service.get_stats(store, 1)

    assert stats.total_topics == 2
    assert stats.total_cards == 1
    assert stats.cards_in_database == 3
