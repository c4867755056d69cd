"""Data access helpers for journals, goals, tasks and dashboard content.

Functions never commit; the caller owns the transaction boundary so that a
whole generation batch can be written atomically.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from app.db.models.dashboard_content import DashboardContent
from app.db.models.goal import Goal
from app.db.models.journal import Journal
from app.db.models.task import Task


class DuplicateJournalError(ValueError):
    """Raised when a journal already exists for the user and date."""


def count_words(content: str) -> int:
    return len(content.split())


# Journals


def get_journal_by_date(db: Session, user_id: UUID, day: date) -> Optional[Journal]:
    return (
        db.query(Journal)
        .filter(Journal.user_id == user_id, Journal.date == day)
        .one_or_none()
    )


def get_recent_journals(db: Session, user_id: UUID, limit: Optional[int] = None) -> List[Journal]:
    """Return the user's journals, most recent first."""
    query = db.query(Journal).filter(Journal.user_id == user_id).order_by(desc(Journal.date))
    if limit:
        query = query.limit(limit)
    return query.all()


def get_journals_in_range(db: Session, user_id: UUID, start: date, end: date) -> List[Journal]:
    """Return journals dated within [start, end], most recent first."""
    return (
        db.query(Journal)
        .filter(Journal.user_id == user_id, Journal.date >= start, Journal.date <= end)
        .order_by(desc(Journal.date))
        .all()
    )


def create_journal(db: Session, user_id: UUID, day: date, content: str) -> Journal:
    if get_journal_by_date(db, user_id, day) is not None:
        raise DuplicateJournalError(f"Journal already exists for {day.isoformat()}")
    journal = Journal(user_id=user_id, date=day, content=content, word_count=count_words(content))
    db.add(journal)
    db.flush()
    return journal


def get_active_user_ids(db: Session, since: date) -> List[UUID]:
    """Distinct users with at least one journal dated on or after ``since``."""
    rows = (
        db.query(Journal.user_id)
        .filter(Journal.date >= since)
        .distinct()
        .order_by(Journal.user_id)
        .all()
    )
    return [row[0] for row in rows]


# Goals


def get_user_goals(db: Session, user_id: UUID) -> List[Goal]:
    return (
        db.query(Goal)
        .filter(Goal.user_id == user_id)
        .order_by(desc(Goal.created_at))
        .all()
    )


def get_goal(db: Session, goal_id: UUID) -> Optional[Goal]:
    return db.get(Goal, goal_id)


def create_goal(db: Session, user_id: UUID, **fields: Any) -> Goal:
    goal = Goal(user_id=user_id, **fields)
    db.add(goal)
    db.flush()
    return goal


def update_goal(db: Session, goal: Goal, updates: Dict[str, Any]) -> Goal:
    for key, value in updates.items():
        setattr(goal, key, value)
    db.add(goal)
    db.flush()
    return goal


def delete_goal(db: Session, goal: Goal) -> int:
    """Delete a goal, detaching any tasks that referenced it.

    Returns the number of tasks whose ``related_goal_id`` was cleared.
    """
    detached = (
        db.query(Task)
        .filter(Task.related_goal_id == goal.id)
        .update({Task.related_goal_id: None}, synchronize_session=False)
    )
    db.delete(goal)
    db.flush()
    return detached


# Tasks


def create_task(db: Session, user_id: UUID, day: date, **fields: Any) -> Task:
    task = Task(user_id=user_id, date=day, **fields)
    db.add(task)
    return task


def get_tasks_for_date(db: Session, user_id: UUID, day: date) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.user_id == user_id, Task.date == day)
        .order_by(asc(Task.generated_at), asc(Task.position))
        .all()
    )


def get_user_tasks(db: Session, user_id: UUID, limit: Optional[int] = None) -> List[Task]:
    query = (
        db.query(Task)
        .filter(Task.user_id == user_id)
        .order_by(desc(Task.date), asc(Task.generated_at), asc(Task.position))
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def delete_tasks_for_date(db: Session, user_id: UUID, day: date) -> int:
    return (
        db.query(Task)
        .filter(Task.user_id == user_id, Task.date == day)
        .delete(synchronize_session=False)
    )


# Dashboard content


def create_dashboard_content(
    db: Session,
    user_id: UUID,
    day: date,
    *,
    daily_quote: str,
    focus_area: str,
    created_at: Optional[datetime] = None,
) -> DashboardContent:
    content = DashboardContent(user_id=user_id, date=day, daily_quote=daily_quote, focus_area=focus_area)
    if created_at is not None:
        content.created_at = created_at
    db.add(content)
    return content


def get_dashboard_content_for_date(db: Session, user_id: UUID, day: date) -> Optional[DashboardContent]:
    """Latest dashboard content for the date (regeneration may have added more than one)."""
    return (
        db.query(DashboardContent)
        .filter(DashboardContent.user_id == user_id, DashboardContent.date == day)
        .order_by(desc(DashboardContent.created_at))
        .first()
    )


def delete_dashboard_content_for_date(db: Session, user_id: UUID, day: date) -> int:
    return (
        db.query(DashboardContent)
        .filter(DashboardContent.user_id == user_id, DashboardContent.date == day)
        .delete(synchronize_session=False)
    )
