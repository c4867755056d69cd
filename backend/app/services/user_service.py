"""Helpers for working with users."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.user import User


def get_or_create_user(db: Session, user_id: UUID) -> User:
    """Return the row for an authenticated user id, inserting it on first write.

    Must be called before anything else is pending in the session: a lost race
    on the insert rolls the session back.
    """
    user = db.get(User, user_id)
    if user:
        return user

    user = User(id=user_id)
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        user = db.get(User, user_id)
        if user is None:
            raise
    return user
