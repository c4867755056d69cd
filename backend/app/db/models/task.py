"""Task ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_id_date", "user_id", "date"),
        Index("ix_tasks_related_goal_id", "related_goal_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Weak reference: deleting the goal nulls this out.
    related_goal_id = Column(
        UUID(as_uuid=True),
        ForeignKey("goals.id", ondelete="SET NULL"),
        nullable=True,
    )
    date = Column(Date, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(length=50), nullable=False)
    time_estimate = Column(String(length=50), nullable=True)
    # Index within the generated batch; preserves the order the model returned.
    position = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    priority = Column(String(length=10), nullable=False, default="medium", server_default=sa_text("'medium'"))
    completed = Column(Boolean, nullable=False, default=False, server_default=sa_text("false"))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    generated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
