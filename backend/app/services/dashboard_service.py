"""Aggregation helpers for dashboard endpoint."""
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.api.schemas.dashboard import DashboardContentSummary, DashboardResponse, DashboardStats
from app.api.schemas.goal import GoalResponse
from app.api.schemas.task import TaskSummary
from app.services import stats_service, storage


def get_dashboard_data(db: Session, user_id: UUID, today: Optional[date] = None) -> DashboardResponse:
    """Today's tasks and content, goals, and streak statistics for one user."""
    today = today or date.today()

    tasks = storage.get_tasks_for_date(db, user_id, today)
    content = storage.get_dashboard_content_for_date(db, user_id, today)
    goals = storage.get_user_goals(db, user_id)

    stats = DashboardStats(
        journal_streak=stats_service.get_journal_streak(db, user_id, today),
        task_streak=stats_service.get_task_streak(db, user_id, today),
        total_entries=stats_service.get_total_journal_entries(db, user_id),
        completed_tasks=stats_service.get_total_completed_tasks(db, user_id),
    )

    return DashboardResponse(
        tasks=[TaskSummary.model_validate(task) for task in tasks],
        dashboard_content=DashboardContentSummary.model_validate(content) if content else None,
        goals=[GoalResponse.model_validate(goal) for goal in goals],
        stats=stats,
        has_journal_today=storage.get_journal_by_date(db, user_id, today) is not None,
    )
