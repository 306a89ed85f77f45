"""Event Exception model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from datetime import datetime
from typing import Optional

from recurrence_engine.models.recurrence_rule import utcnow


class EventException(SQLModel, table=True):
    """Per-date override of one occurrence of a recurring event."""

    __tablename__ = "event_exceptions"
    __table_args__ = (
        UniqueConstraint("event_id", "original_date", name="uq_event_exceptions_event_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(
        sa_column=Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    original_date: str = Field(max_length=10)  # YYYY-MM-DD of the generated occurrence
    is_cancelled: bool = Field(default=False)
    modified_title: Optional[str] = Field(default=None, max_length=200)
    modified_description: Optional[str] = Field(default=None, max_length=1000)
    modified_start_time: Optional[str] = Field(default=None, max_length=40)  # ISO-8601
    modified_end_time: Optional[str] = Field(default=None, max_length=40)  # ISO-8601
    modified_location: Optional[str] = Field(default=None, max_length=200)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
