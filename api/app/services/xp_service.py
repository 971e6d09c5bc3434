"""
XP service - cumulative experience points per user.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import StoreError, ValidationError
from app.core.identity import require_user
from app.core.store import DocumentStore, as_utc
from app.models.models import CompletedChallengeRecord, UserXP

logger = logging.getLogger(__name__)


def award_xp(store: DocumentStore, user_id: Optional[int], amount: int) -> int:
    """
    Add ``amount`` XP to the user's total and return the new total.

    Creates the user's row on first award. The increment is computed by the
    database, so concurrent awards never lose an update.
    """
    user_id = require_user(user_id)
    if amount < 0:
        raise ValidationError("XP amount cannot be negative")

    now = store.server_timestamp()
    if not store.increment(UserXP, user_id, "total_xp", amount, updated_at=now):
        try:
            store.create(UserXP(user_id=user_id, total_xp=amount, created_at=now, updated_at=now))
        except StoreError as e:
            # Another award created the row first; fall back to incrementing it
            if not isinstance(e.__cause__, IntegrityError):
                raise
            store.increment(UserXP, user_id, "total_xp", amount, updated_at=now)

    total = get_xp(store, user_id)
    logger.info(f"Awarded {amount} XP to user {user_id}, total now {total}")
    return total


def get_xp(store: DocumentStore, user_id: Optional[int]) -> int:
    """The user's total XP, 0 if they have never earned any."""
    user_id = require_user(user_id)
    xp = store.get(UserXP, user_id)
    if xp is None:
        return 0
    return xp.total_xp or 0


def get_daily_xp(store: DocumentStore, user_id: Optional[int], day: Optional[date] = None) -> int:
    """Sum of challenge scores the user earned on ``day`` (UTC, default today)."""
    user_id = require_user(user_id)
    day = day or store.server_timestamp().date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = start + timedelta(days=1)

    records = store.query(CompletedChallengeRecord, [("user_id", "==", user_id)])
    return sum(
        record.user_score or 0
        for record in records
        if start <= as_utc(record.completed_at) < end
    )
