from datetime import date, datetime, timedelta, timezone

import pytest

from app.core.exceptions import AuthenticationError, ValidationError
from app.models.models import CompletedChallengeRecord, UserXP
from app.services import xp_service


def test_get_xp_defaults_to_zero(store):
    assert xp_service.get_xp(store, 1) == 0
    assert store.get(UserXP, 1) is None


def test_award_xp_creates_then_increments(store):
    assert xp_service.award_xp(store, 1, 100) == 100
    assert xp_service.get_xp(store, 1) == 100

    assert xp_service.award_xp(store, 1, 50) == 150
    assert xp_service.get_xp(store, 1) == 150
    assert xp_service.get_xp(store, 2) == 0


def test_xp_never_decreases(store):
    totals = [xp_service.award_xp(store, 1, amount) for amount in (10, 0, 25, 0, 5)]

    assert totals == sorted(totals)
    assert totals[-1] == 40


def test_award_xp_rejects_negative_amounts(store):
    xp_service.award_xp(store, 1, 100)

    with pytest.raises(ValidationError):
        xp_service.award_xp(store, 1, -10)
    assert xp_service.get_xp(store, 1) == 100


def test_award_xp_requires_user(store):
    with pytest.raises(AuthenticationError):
        xp_service.award_xp(store, None, 10)


def _record(user_id, score, completed_at):
    return CompletedChallengeRecord(
        user_id=user_id,
        challenge_id=1,
        sender_id=9,
        sender_name="Alice",
        card={"vocabulary": "apple"},
        user_answer="apple" if score else "pear",
        user_score=score,
        is_correct=bool(score),
        completed_at=completed_at,
    )


def test_daily_xp_sums_scores_for_that_day(store):
    day = date(2024, 5, 1)
    noon = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    store.create(_record(1, 100, noon))
    store.create(_record(1, 0, noon + timedelta(hours=1)))
    store.create(_record(1, 100, datetime(2024, 5, 1, 23, 59, tzinfo=timezone.utc)))
    store.create(_record(1, 100, datetime(2024, 5, 2, 0, 0, tzinfo=timezone.utc)))
    store.create(_record(2, 100, noon))

    assert xp_service.get_daily_xp(store, 1, day) == 200
    assert xp_service.get_daily_xp(store, 1, date(2024, 4, 30)) == 0
