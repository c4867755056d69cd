"""Schemas for task listing and completion."""
from __future__ import annotations

import datetime as dt
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TaskSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    user_id: UUID = Field(..., alias="userId")
    date: dt.date
    title: str
    description: Optional[str]
    category: str
    time_estimate: Optional[str] = Field(..., alias="timeEstimate")
    priority: str
    completed: bool
    completed_at: Optional[dt.datetime] = Field(..., alias="completedAt")
    related_goal_id: Optional[UUID] = Field(..., alias="relatedGoalId")
    generated_at: dt.datetime = Field(..., alias="generatedAt")


class TaskUpdateRequest(BaseModel):
    completed: bool


class TaskUpdateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    completed: bool
    completed_at: Optional[dt.datetime] = Field(..., alias="completedAt")
    request_id: str = Field(..., alias="requestId")
