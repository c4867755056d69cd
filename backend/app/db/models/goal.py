"""Goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (Index("ix_goals_user_id", "user_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(String(length=20), nullable=False)
    category = Column(String(length=50), nullable=False)
    progress = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    status = Column(String(length=20), nullable=False, default="active", server_default=sa_text("'active'"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
