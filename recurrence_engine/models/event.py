"""Event model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, Integer
from datetime import datetime
from typing import Optional

from recurrence_engine.models.recurrence_rule import utcnow


class Event(SQLModel, table=True):
    """Calendar event; recurring when it references a rule."""

    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    start_time: datetime = Field(sa_type=DateTime)  # Wall-clock time in the engine time zone
    end_time: datetime = Field(sa_type=DateTime)
    is_all_day: bool = Field(default=False)
    location: Optional[str] = Field(default=None, max_length=200)
    priority: int = Field(default=0)
    category_id: Optional[int] = Field(default=None)
    recurrence_rule_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("recurrence_rules.id", ondelete="SET NULL"), nullable=True),
    )
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
