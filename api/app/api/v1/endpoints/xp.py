"""
XP endpoint.
"""
from fastapi import APIRouter, Depends
from typing import Optional
from datetime import date
from app.core.database import get_store
from app.core.identity import get_current_user_id, require_user
from app.core.store import DocumentStore
from app.schemas.xp import AwardXPRequest, DailyXPResponse, XPResponse
from app.services import xp_service

router = APIRouter(prefix="/xp", tags=["xp"])


@router.get("", response_model=XPResponse)
async def get_xp(
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    user_id = require_user(user_id)
    return XPResponse(user_id=user_id, total_xp=xp_service.get_xp(store, user_id))


@router.post("", response_model=XPResponse)
async def award_xp(
    request: AwardXPRequest,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Add XP to the current user's total."""
    user_id = require_user(user_id)
    total = xp_service.award_xp(store, user_id, request.amount)
    return XPResponse(user_id=user_id, total_xp=total)


@router.get("/daily", response_model=DailyXPResponse)
async def get_daily_xp(
    day: Optional[date] = None,
    user_id: Optional[int] = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """XP earned from challenges on ``day`` (defaults to today, UTC)."""
    user_id = require_user(user_id)
    day = day or store.server_timestamp().date()
    return DailyXPResponse(user_id=user_id, day=day, xp=xp_service.get_daily_xp(store, user_id, day))
