"""Profile ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    work_study = Column(Text, nullable=False)
    hobbies = Column(Text, nullable=False)
    sports = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    weight_kg = Column(Integer, nullable=True)
    height_cm = Column(Integer, nullable=True)
    age_years = Column(Integer, nullable=True)
    reading = Column(Text, nullable=True)
    extra_information = Column(Text, nullable=True)
    extra_words = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
