"""Schemas for dashboard endpoint."""
from __future__ import annotations

import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.api.schemas.goal import GoalResponse
from app.api.schemas.task import TaskSummary


class DashboardContentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    date: dt.date
    daily_quote: Optional[str] = Field(..., alias="dailyQuote")
    focus_area: Optional[str] = Field(..., alias="focusArea")
    created_at: dt.datetime = Field(..., alias="createdAt")


class DashboardStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    journal_streak: int = Field(..., alias="journalStreak")
    task_streak: int = Field(..., alias="taskStreak")
    total_entries: int = Field(..., alias="totalEntries")
    completed_tasks: int = Field(..., alias="completedTasks")


class DashboardResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tasks: List[TaskSummary]
    dashboard_content: Optional[DashboardContentSummary] = Field(..., alias="dashboardContent")
    goals: List[GoalResponse]
    stats: DashboardStats
    has_journal_today: bool = Field(..., alias="hasJournalToday")
