"""Schemas for goal endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

GoalDuration = Literal["1month", "3months", "6months", "1year"]
GoalStatus = Literal["active", "completed", "paused"]


class GoalCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    duration: GoalDuration
    category: str = Field(..., min_length=1, max_length=50)
    progress: int = Field(default=0, ge=0, le=100)
    status: GoalStatus = "active"


class GoalUpdateRequest(BaseModel):
    """Partial update; only provided fields are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    duration: Optional[GoalDuration] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    status: Optional[GoalStatus] = None

    @field_validator("title", "duration", "category", "progress", "status")
    @classmethod
    def reject_null(cls, value):
        # Only description may be cleared.
        if value is None:
            raise ValueError("field cannot be null")
        return value


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    user_id: UUID = Field(..., alias="userId")
    title: str
    description: Optional[str]
    duration: str
    category: str
    progress: int
    status: str
    created_at: datetime = Field(..., alias="createdAt")


class GoalDeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    detached_tasks: int = Field(..., alias="detachedTasks")
