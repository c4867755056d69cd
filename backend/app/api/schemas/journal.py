"""Schemas for journal endpoints."""
from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class JournalCreateRequest(BaseModel):
    date: dt.date
    content: str = Field(..., min_length=1, max_length=20000)


class JournalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    user_id: UUID = Field(..., alias="userId")
    date: dt.date
    content: str
    word_count: int = Field(..., alias="wordCount")
    created_at: dt.datetime = Field(..., alias="createdAt")
