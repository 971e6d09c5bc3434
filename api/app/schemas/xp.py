"""
XP schemas.
"""
from pydantic import BaseModel
from datetime import date


class AwardXPRequest(BaseModel):
    """Request schema for awarding XP."""
    amount: int


class XPResponse(BaseModel):
    """A user's XP total."""
    user_id: int
    total_xp: int


class DailyXPResponse(BaseModel):
    """XP earned from challenges on one day."""
    user_id: int
    day: date
    xp: int
