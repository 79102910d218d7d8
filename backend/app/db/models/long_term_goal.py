"""Long-term goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base

GOAL_CATEGORIES = ("fitness", "learning", "career", "personal", "financial")
GOAL_STATUSES = ("active", "completed", "paused", "archived")


class LongTermGoal(Base):
    __tablename__ = "long_term_goals"
    __table_args__ = (
        Index("ix_long_term_goals_user_id", "user_id"),
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_long_term_goals_progress"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(length=20), nullable=False)
    priority = Column(Integer, nullable=False, default=1)
    target_timeframe = Column(Text, nullable=False)
    progress = Column(Integer, nullable=False, default=0)
    status = Column(String(length=20), nullable=False, default="active")
    ai_context = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
