"""Schemas for job operations endpoints."""
from __future__ import annotations

import datetime as dt
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class JobRunRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[UUID] = Field(default=None, alias="userId")
    replace_existing: bool = Field(default=False, alias="replaceExisting")


class JobRunResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job: str
    target_date: dt.date = Field(..., alias="targetDate")
    users_processed: int = Field(..., alias="usersProcessed")
    users_skipped: int = Field(..., alias="usersSkipped")
    users_failed: int = Field(..., alias="usersFailed")
    tasks_written: int = Field(..., alias="tasksWritten")
    request_id: str = Field(..., alias="requestId")
