"""Streaks and totals shown on the dashboard."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models.journal import Journal
from app.db.models.task import Task


def consecutive_days(qualifying: Iterable[date], today: date) -> int:
    """Count consecutive days ending at ``today`` that appear in ``qualifying``."""
    days = set(qualifying)
    streak = 0
    cursor = today
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def get_journal_streak(db: Session, user_id: UUID, today: date) -> int:
    rows = db.query(Journal.date).filter(Journal.user_id == user_id, Journal.date <= today).all()
    return consecutive_days((row[0] for row in rows), today)


def get_task_streak(db: Session, user_id: UUID, today: date) -> int:
    """Consecutive days on which every task for the day was completed."""
    rows = db.query(Task.date, Task.completed).filter(Task.user_id == user_id, Task.date <= today).all()
    all_done: Dict[date, bool] = {}
    for day, completed in rows:
        all_done[day] = all_done.get(day, True) and bool(completed)
    return consecutive_days((day for day, done in all_done.items() if done), today)


def get_total_journal_entries(db: Session, user_id: UUID) -> int:
    return db.query(func.count(Journal.id)).filter(Journal.user_id == user_id).scalar() or 0


def get_total_completed_tasks(db: Session, user_id: UUID) -> int:
    return (
        db.query(func.count(Task.id))
        .filter(Task.user_id == user_id, Task.completed.is_(True))
        .scalar()
        or 0
    )
