"""
Identity provider.

Authentication happens upstream; requests reach the API carrying the
authenticated user's id in the ``X-User-Id`` header. Services receive that id
(or None) and call ``require_user`` before acting.
"""
from typing import Optional

from fastapi import Header

from app.core.exceptions import AuthenticationError


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[int]:
    """Current user id from the request, or None when the caller is anonymous."""
    if x_user_id is None or not x_user_id.strip():
        return None
    try:
        return int(x_user_id)
    except ValueError:
        raise AuthenticationError(f"Invalid user id: {x_user_id}")


def require_user(user_id: Optional[int]) -> int:
    """Return ``user_id`` or raise AuthenticationError when nobody is signed in."""
    if user_id is None:
        raise AuthenticationError("User must be authenticated to perform this action")
    return user_id
