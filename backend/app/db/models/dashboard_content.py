"""Dashboard content ORM model (daily quote and focus area)."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class DashboardContent(Base):
    __tablename__ = "dashboard_content"
    __table_args__ = (Index("ix_dashboard_content_user_id_date", "user_id", "date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    daily_quote = Column(Text, nullable=True)
    focus_area = Column(String(length=100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
