import pytest

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from app.models.models import Card, CardKind, OwnershipReference, Topic
from app.schemas.card import CardContent, UpdateCardRequest
from app.services import card_service, topic_service


def _content(vocabulary="apple", definition="a round fruit", **kwargs):
    return CardContent(vocabulary=vocabulary, definition=definition, **kwargs)


def _count(store, topic_id):
    return store.get(Topic, topic_id).card_count


# ---------------------------------------------------------------------------
# Owned cards
# ---------------------------------------------------------------------------

def test_create_owned_card_writes_card_reference_and_count(store):
    topic = topic_service.create_topic(store, 1, "Fruit")

    card = card_service.create_owned_card(store, 1, topic.id, _content(sentence="An apple a day"))

    assert card.kind == CardKind.OWNED
    assert card.creator_user_id == 1
    assert card.topic_id == topic.id
    assert card.user_count == 1
    references = store.query(OwnershipReference, [("card_id", "==", card.id)])
    assert [(ref.user_id, ref.kind) for ref in references] == [(1, CardKind.OWNED)]
    assert _count(store, topic.id) == 1


def test_create_owned_card_validates_input(store):
    topic = topic_service.create_topic(store, 1, "Fruit")

    with pytest.raises(ValidationError):
        card_service.create_owned_card(store, 1, topic.id, _content(vocabulary="  "))
    with pytest.raises(ValidationError):
        card_service.create_owned_card(store, 1, topic.id, _content(definition=""))
    with pytest.raises(AuthenticationError):
        card_service.create_owned_card(store, None, topic.id, _content())
    with pytest.raises(AuthorizationError):
        card_service.create_owned_card(store, 2, topic.id, _content())
    with pytest.raises(NotFoundError):
        card_service.create_owned_card(store, 1, 999, _content())

    assert store.query(Card) == []
    assert _count(store, topic.id) == 0


def test_topic_count_matches_cards_after_mixed_operations(store):
    fruit = topic_service.create_topic(store, 1, "Fruit")
    food = topic_service.create_topic(store, 1, "Food")
    apple = card_service.create_owned_card(store, 1, fruit.id, _content("apple"))
    pear = card_service.create_owned_card(store, 1, fruit.id, _content("pear"))
    card_service.create_owned_card(store, 1, fruit.id, _content("plum"))
    card_service.create_owned_card(store, 1, food.id, _content("bread"))

    card_service.delete_card(store, 1, apple.id)
    card_service.move_card_to_topic(store, 1, pear.id, food.id)
    # Shared cards never count towards a topic
    card_service.materialize_shared_card(store, 2, 1, _content("kiwi", topic_id=fruit.id))

    for topic in (fruit, food):
        owned = [
            card for card in card_service.get_cards_for_user(store, 1, topic.id)
            if card.kind == CardKind.OWNED
        ]
        assert _count(store, topic.id) == len(owned)
    assert _count(store, fruit.id) == 1
    assert _count(store, food.id) == 2


def test_get_card_requires_creator_or_reference(store):
    card = card_service.create_owned_card(store, 1, None, _content())

    assert card_service.get_card(store, 1, card.id).id == card.id
    with pytest.raises(AuthorizationError):
        card_service.get_card(store, 2, card.id)
    with pytest.raises(NotFoundError):
        card_service.get_card(store, 1, 999)


# ---------------------------------------------------------------------------
# Shared cards
# ---------------------------------------------------------------------------

def test_materialize_shared_card_is_idempotent(store):
    first = card_service.materialize_shared_card(store, 1, 2, _content("serendipity", "happy accident"))
    second = card_service.materialize_shared_card(store, 1, 2, _content("serendipity", "happy accident"))

    assert first.id == second.id
    assert len(store.query(Card, [("recipient_user_id", "==", 2)])) == 1
    assert first.kind == CardKind.SHARED
    assert first.shared_by_user_id == 1
    assert first.recipient_user_id == 2
    assert first.creator_user_id is None
    assert first.added_from == "challenge"


def test_materialize_distinguishes_recipients_and_content(store):
    for_bob = card_service.materialize_shared_card(store, 1, 2, _content())
    for_carol = card_service.materialize_shared_card(store, 1, 3, _content())
    other_meaning = card_service.materialize_shared_card(store, 1, 2, _content(definition="a company"))

    assert len({for_bob.id, for_carol.id, other_meaning.id}) == 3


def test_materialize_does_not_touch_topic_counts(store):
    topic = topic_service.create_topic(store, 2, "Fruit")

    card = card_service.materialize_shared_card(store, 1, 2, _content(topic_id=topic.id))

    assert card.topic_id == topic.id
    assert _count(store, topic.id) == 0


def test_shared_card_visible_to_recipient_only(store):
    card = card_service.materialize_shared_card(store, 1, 2, _content())

    assert [c.id for c in card_service.get_cards_for_user(store, 2)] == [card.id]
    assert card_service.get_cards_for_user(store, 1) == []


def test_get_cards_for_user_filtered_by_sender(store):
    own = card_service.create_owned_card(store, 2, None, _content("pear"))
    from_alice = card_service.materialize_shared_card(store, 1, 2, _content("apple"))
    from_carol = card_service.materialize_shared_card(store, 3, 2, _content("plum"))

    assert [c.id for c in card_service.get_cards_for_user(store, 2, sender_id=1)] == [from_alice.id]
    assert [c.id for c in card_service.get_cards_for_user(store, 2, sender_id=3)] == [from_carol.id]
    assert card_service.get_cards_for_user(store, 2, sender_id=4) == []
    everything = {c.id for c in card_service.get_cards_for_user(store, 2)}
    assert everything == {own.id, from_alice.id, from_carol.id}


def test_get_cards_for_user_deduplicates(store):
    card = card_service.create_owned_card(store, 1, None, _content())

    cards = card_service.get_cards_for_user(store, 1)

    assert [c.id for c in cards] == [card.id]


def test_get_cards_for_user_includes_cards_without_reference(store):
    legacy = store.create(Card(vocabulary="old", definition="from before references", creator_user_id=1))

    assert [c.id for c in card_service.get_cards_for_user(store, 1)] == [legacy.id]


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------

def test_update_owned_card_requires_creator(store):
    card = card_service.create_owned_card(store, 2, None, _content())

    with pytest.raises(AuthorizationError):
        card_service.update_card(store, 1, card.id, UpdateCardRequest(definition="mine"))

    updated = card_service.update_card(store, 2, card.id, UpdateCardRequest(sentence="Crunchy."))
    assert updated.sentence == "Crunchy."
    assert updated.definition == "a round fruit"


def test_update_shared_card_by_recipient(store):
    card = card_service.materialize_shared_card(store, 1, 2, _content())

    updated = card_service.update_card(store, 2, card.id, UpdateCardRequest(definition="my note"))

    assert updated.definition == "my note"
    assert updated.last_edited_by == 2
    with pytest.raises(AuthorizationError):
        card_service.update_card(store, 1, card.id, UpdateCardRequest(definition="sender edit"))


def test_update_shared_card_does_not_change_other_recipients_copy(store):
    bobs = card_service.materialize_shared_card(store, 1, 2, _content())
    carols = card_service.materialize_shared_card(store, 1, 3, _content())

    card_service.update_card(store, 2, bobs.id, UpdateCardRequest(definition="changed"))

    assert store.get(Card, carols.id).definition == "a round fruit"


def test_update_card_rejects_empty_required_fields_and_missing_cards(store):
    card = card_service.create_owned_card(store, 1, None, _content())

    with pytest.raises(ValidationError):
        card_service.update_card(store, 1, card.id, UpdateCardRequest(vocabulary=" "))
    with pytest.raises(NotFoundError):
        card_service.update_card(store, 1, 999, UpdateCardRequest(definition="x"))


# ---------------------------------------------------------------------------
# Deleting
# ---------------------------------------------------------------------------

def test_delete_owned_card_removes_references_and_decrements(store):
    topic = topic_service.create_topic(store, 1, "Fruit")
    card = card_service.create_owned_card(store, 1, topic.id, _content())

    assert card_service.delete_card(store, 1, card.id) is True

    assert store.get(Card, card.id) is None
    assert store.query(OwnershipReference, [("card_id", "==", card.id)]) == []
    assert _count(store, topic.id) == 0


def test_delete_owned_card_requires_creator(store):
    card = card_service.create_owned_card(store, 1, None, _content())

    with pytest.raises(AuthorizationError):
        card_service.delete_card(store, 2, card.id)
    with pytest.raises(NotFoundError):
        card_service.delete_card(store, 1, 999)


def test_delete_shared_card_keeps_canonical_card(store):
    card = card_service.materialize_shared_card(store, 1, 2, _content())

    assert card_service.delete_card(store, 2, card.id) is True

    remaining = store.get(Card, card.id)
    assert remaining is not None
    assert remaining.user_count == 0
    assert card_service.get_cards_for_user(store, 2) == []


def test_delete_shared_card_twice_is_not_an_error(store):
    card = card_service.materialize_shared_card(store, 1, 2, _content())

    assert card_service.delete_shared_card(store, 2, card.id) is True
    assert card_service.delete_shared_card(store, 2, card.id) is False
    assert card_service.delete_shared_card(store, 2, 999) is False


def test_delete_shared_card_rejects_unrelated_user(store):
    card = card_service.materialize_shared_card(store, 1, 2, _content())

    with pytest.raises(AuthorizationError):
        card_service.delete_shared_card(store, 3, card.id)


def test_materialize_after_delete_restores_reference(store):
    card = card_service.materialize_shared_card(store, 1, 2, _content())
    card_service.delete_shared_card(store, 2, card.id)

    again = card_service.materialize_shared_card(store, 1, 2, _content())

    assert again.id == card.id
    assert store.get(Card, card.id).user_count == 1
    assert [c.id for c in card_service.get_cards_for_user(store, 2)] == [card.id]


# ---------------------------------------------------------------------------
# Moving
# ---------------------------------------------------------------------------

def test_move_card_updates_both_counters_and_reference(store):
    fruit = topic_service.create_topic(store, 1, "Fruit")
    food = topic_service.create_topic(store, 1, "Food")
    card = card_service.create_owned_card(store, 1, fruit.id, _content())

    moved = card_service.move_card_to_topic(store, 1, card.id, food.id)

    assert moved.topic_id == food.id
    assert _count(store, fruit.id) == 0
    assert _count(store, food.id) == 1
    assert [c.id for c in card_service.get_cards_for_user(store, 1, food.id)] == [card.id]
    assert card_service.get_cards_for_user(store, 1, fruit.id) == []


def test_move_card_out_of_any_topic(store):
    fruit = topic_service.create_topic(store, 1, "Fruit")
    card = card_service.create_owned_card(store, 1, fruit.id, _content())

    moved = card_service.move_card_to_topic(store, 1, card.id, None)

    assert moved.topic_id is None
    assert _count(store, fruit.id) == 0


def test_move_card_to_same_topic_is_a_no_op(store):
    fruit = topic_service.create_topic(store, 1, "Fruit")
    card = card_service.create_owned_card(store, 1, fruit.id, _content())

    card_service.move_card_to_topic(store, 1, card.id, fruit.id)

    assert _count(store, fruit.id) == 1


def test_move_card_checks_ownership(store):
    mine = topic_service.create_topic(store, 1, "Fruit")
    theirs = topic_service.create_topic(store, 2, "Other")
    card = card_service.create_owned_card(store, 1, mine.id, _content())
    shared = card_service.materialize_shared_card(store, 2, 1, _content("kiwi"))

    with pytest.raises(AuthorizationError):
        card_service.move_card_to_topic(store, 1, card.id, theirs.id)
    with pytest.raises(AuthorizationError):
        card_service.move_card_to_topic(store, 2, card.id, theirs.id)
    with pytest.raises(ValidationError):
        card_service.move_card_to_topic(store, 1, shared.id, mine.id)
    assert _count(store, mine.id) == 1
    assert _count(store, theirs.id) == 0
