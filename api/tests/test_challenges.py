from datetime import timedelta

import pytest

from app.core.config import settings
from app.core.exceptions import AuthorizationError, NotFoundError, StateError, ValidationError
from app.core.store import as_utc, utc_now
from app.models.models import Challenge, CompletedChallengeRecord, RecipientStatus
from app.schemas.card import CardContent
from app.services import card_service, challenge_service


def _content(vocabulary="apple", definition="a round fruit"):
    return CardContent(vocabulary=vocabulary, definition=definition, sentence="I ate an apple.")


def _send(store, sender_id=1, recipients=(2,), vocabulary="apple"):
    return challenge_service.send_challenge(
        store, sender_id, _content(vocabulary), list(recipients), sender_name="Alice"
    )


def _entry(store, challenge_id, user_id):
    return store.get(Challenge, challenge_id).recipient_entry(user_id)


def test_grade_answer_trims_and_ignores_case():
    assert challenge_service.grade_answer("  Apple  ", "apple")
    assert challenge_service.grade_answer("APPLE", " apple ")
    assert not challenge_service.grade_answer("banana", "apple")
    assert not challenge_service.grade_answer(None, "apple")


def test_send_challenge_embeds_snapshot_and_expiry(store):
    challenge = _send(store, recipients=[2, 3, 2, 1])

    assert challenge.sender_name == "Alice"
    assert challenge.card["vocabulary"] == "apple"
    assert challenge.card["definition"] == "a round fruit"
    assert [r["user_id"] for r in challenge.recipients] == [2, 3]
    assert all(r["status"] == RecipientStatus.PENDING.value for r in challenge.recipients)
    assert as_utc(challenge.expires_at) - as_utc(challenge.created_at) == timedelta(days=settings.challenge_ttl_days)


def test_send_challenge_requires_recipients_and_vocabulary(store):
    with pytest.raises(ValidationError):
        challenge_service.send_challenge(store, 1, _content(), [])
    with pytest.raises(ValidationError):
        challenge_service.send_challenge(store, 1, _content(), [1])
    with pytest.raises(ValidationError):
        challenge_service.send_challenge(store, 1, _content(vocabulary=" "), [2])
    with pytest.raises(ValidationError):
        challenge_service.send_challenge(store, 1, _content(definition=""), [2])
    assert store.query(Challenge) == []


def test_snapshot_survives_source_card_deletion(store):
    card = card_service.create_owned_card(store, 1, None, _content())
    challenge = challenge_service.send_challenge(
        store, 1, _content(), [2], source_card_id=card.id
    )
    card_service.delete_card(store, 1, card.id)

    result = challenge_service.complete_challenge(store, challenge.id, 2, "apple")

    assert result.is_correct


def test_correct_answer_scores_100(store):
    challenge = _send(store)

    result = challenge_service.complete_challenge(store, challenge.id, 2, "  Apple  ")

    assert result.is_correct is True
    assert result.score == 100
    assert result.correct_answer == "apple"
    entry = _entry(store, challenge.id, 2)
    assert entry["status"] == RecipientStatus.COMPLETED.value
    assert entry["score"] == 100
    assert entry["user_answer"] == "  Apple  "
    assert entry["completed_at"] is not None


def test_wrong_answer_still_completes_with_zero(store):
    challenge = _send(store)

    result = challenge_service.complete_challenge(store, challenge.id, 2, "banana")

    assert result.is_correct is False
    assert result.score == 0
    assert _entry(store, challenge.id, 2)["status"] == RecipientStatus.COMPLETED.value
    with pytest.raises(StateError):
        challenge_service.complete_challenge(store, challenge.id, 2, "apple")


def test_completion_is_logged_even_when_wrong(store):
    challenge = _send(store)

    challenge_service.complete_challenge(store, challenge.id, 2, "banana")

    records = challenge_service.get_completed_challenges(store, 2)
    assert len(records) == 1
    assert records[0].challenge_id == challenge.id
    assert records[0].sender_name == "Alice"
    assert records[0].user_answer == "banana"
    assert records[0].user_score == 0
    assert records[0].is_correct is False


def test_completion_does_not_add_card(store):
    challenge = _send(store)

    challenge_service.complete_challenge(store, challenge.id, 2, "apple")

    assert card_service.get_cards_for_user(store, 2) == []


def test_recipients_progress_independently(store):
    challenge = _send(store, recipients=[2, 3])

    challenge_service.complete_challenge(store, challenge.id, 2, "apple")

    assert _entry(store, challenge.id, 2)["status"] == RecipientStatus.COMPLETED.value
    assert _entry(store, challenge.id, 3)["status"] == RecipientStatus.PENDING.value
    assert [c.id for c in challenge_service.get_pending_challenges(store, 3)] == [challenge.id]
    assert challenge_service.get_pending_challenges(store, 2) == []


def test_complete_challenge_errors(store):
    challenge = _send(store)

    with pytest.raises(NotFoundError):
        challenge_service.complete_challenge(store, 999, 2, "apple")
    with pytest.raises(AuthorizationError):
        challenge_service.complete_challenge(store, challenge.id, 3, "apple")


def test_expiry_check_after_reloading_from_store(store):
    challenge = _send(store)
    store.session.expire_all()
    loaded = store.get(Challenge, challenge.id)

    assert not challenge_service.is_expired(loaded)
    later = utc_now() + timedelta(days=settings.challenge_ttl_days, minutes=1)
    assert challenge_service.is_expired(loaded, later)
    assert [c.id for c in challenge_service.get_pending_challenges(store, 2)] == [challenge.id]


def test_expired_challenge_cannot_be_completed_or_listed(store):
    challenge = _send(store)
    store.update(Challenge, challenge.id, {"expires_at": utc_now() - timedelta(minutes=1)})

    assert challenge_service.get_pending_challenges(store, 2) == []
    with pytest.raises(StateError):
        challenge_service.complete_challenge(store, challenge.id, 2, "apple")
    assert store.query(CompletedChallengeRecord) == []


def test_reject_challenge_is_terminal_and_repeatable(store):
    challenge = _send(store)

    assert challenge_service.reject_challenge(store, challenge.id, 2) is True
    assert challenge_service.reject_challenge(store, challenge.id, 2) is False
    assert _entry(store, challenge.id, 2)["status"] == RecipientStatus.REJECTED.value
    assert challenge_service.get_pending_challenges(store, 2) == []
    with pytest.raises(StateError):
        challenge_service.complete_challenge(store, challenge.id, 2, "apple")


def test_reject_challenge_not_addressed_to_user(store):
    challenge = _send(store)

    with pytest.raises(NotFoundError):
        challenge_service.reject_challenge(store, challenge.id, 3)
    with pytest.raises(NotFoundError):
        challenge_service.reject_challenge(store, 999, 2)


def test_reject_after_completion_is_a_no_op(store):
    challenge = _send(store)
    challenge_service.complete_challenge(store, challenge.id, 2, "apple")

    assert challenge_service.reject_challenge(store, challenge.id, 2) is False
    assert _entry(store, challenge.id, 2)["status"] == RecipientStatus.COMPLETED.value


def test_sent_challenges_and_visibility(store):
    first = _send(store, vocabulary="apple")
    second = _send(store, vocabulary="pear")
    _send(store, sender_id=2, recipients=[1])

    assert {c.id for c in challenge_service.get_sent_challenges(store, 1)} == {first.id, second.id}
    assert challenge_service.get_challenge(store, 2, first.id).id == first.id
    with pytest.raises(AuthorizationError):
        challenge_service.get_challenge(store, 3, first.id)


def test_only_sender_can_delete_challenge(store):
    challenge = _send(store)

    with pytest.raises(AuthorizationError):
        challenge_service.delete_challenge(store, challenge.id, 2)

    assert challenge_service.delete_challenge(store, challenge.id, 1) is True
    assert store.get(Challenge, challenge.id) is None
    with pytest.raises(NotFoundError):
        challenge_service.delete_challenge(store, challenge.id, 1)


def test_watch_pending_challenges_until_closed(store):
    seen = []
    subscription = challenge_service.watch_pending_challenges(2, lambda challenge: seen.append(challenge.id))

    first = _send(store, recipients=[2, 3])
    _send(store, recipients=[3])
    subscription.close()
    _send(store, recipients=[2])

    assert seen == [first.id]
    assert subscription.active is False
    subscription.close()


def test_watch_pending_challenges_as_context_manager(store, sent_events):
    seen = []
    with challenge_service.watch_pending_challenges(3, lambda challenge: seen.append(challenge.id)):
        challenge = _send(store, recipients=[3])
    _send(store, recipients=[3])

    assert seen == [challenge.id]
    assert len(sent_events) == 2


def test_serendipity_scenario(store):
    challenge = challenge_service.send_challenge(
        store, 1, _content("serendipity", "a happy accident"), [2], sender_name="Alice"
    )

    result = challenge_service.complete_challenge(store, challenge.id, 2, "Serendipity")

    assert (result.is_correct, result.score, result.correct_answer) == (True, 100, "serendipity")
    assert len(challenge_service.get_completed_challenges(store, 2)) == 1
    assert _entry(store, challenge.id, 2)["status"] == RecipientStatus.COMPLETED.value

    content = CardContent(**{
        key: challenge.card.get(key)
        for key in ("vocabulary", "definition", "sentence")
    })
    card = card_service.materialize_shared_card(store, 1, 2, content)
    assert card.recipient_user_id == 2
    assert card.shared_by_user_id == 1
    again = card_service.materialize_shared_card(store, 1, 2, content)
    assert again.id == card.id
