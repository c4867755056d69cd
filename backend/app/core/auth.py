"""Authentication gate resolving a request to a user id.

Identity is established upstream (reverse proxy / session service) and
forwarded in the ``X-User-Id`` header. This module only validates that header.
"""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException, status

USER_ID_HEADER = "X-User-Id"


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> UUID:
    """Return the authenticated user's id or reject the request with 401."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user id")
