"""Schemas for manual task generation triggers."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateTasksRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[dt.date] = None
    replace_existing: bool = Field(default=False, alias="replaceExisting")


class GenerateTasksResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    date: dt.date
    skipped: bool
    tasks_generated: int = Field(..., alias="tasksGenerated")
    fallback_used: bool = Field(..., alias="fallbackUsed")
