"""Recurrence rule schemas for the authoring API."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from recurrence_engine.models.recurrence_rule import RecurrenceRuleRecord


class RecurrenceRuleCreate(BaseModel):
    """Schema for creating a recurrence rule."""
    frequency: str = Field(..., min_length=1, max_length=20)  # daily, weekly, monthly, yearly
    interval: int = Field(default=1, ge=1)  # Repeat every X units
    days_of_week: Optional[List[int]] = Field(None, max_length=7)  # 0-6 for Sunday-Saturday
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    month_of_year: Optional[int] = Field(None, ge=1, le=12)
    end_date: Optional[datetime] = None
    end_occurrences: Optional[int] = Field(None, ge=1)


class RecurrenceRuleUpdate(BaseModel):
    """Schema for updating a recurrence rule; only provided fields change."""
    frequency: Optional[str] = Field(None, min_length=1, max_length=20)
    interval: Optional[int] = Field(None, ge=1)
    days_of_week: Optional[List[int]] = Field(None, max_length=7)
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    month_of_year: Optional[int] = Field(None, ge=1, le=12)
    end_date: Optional[datetime] = None
    end_occurrences: Optional[int] = Field(None, ge=1)


class RecurrenceRuleResponse(BaseModel):
    """Schema for recurrence rule API responses."""
    id: int
    frequency: str
    interval: int
    days_of_week: List[int] = []
    day_of_month: Optional[int] = None
    month_of_year: Optional[int] = None
    end_date: Optional[datetime] = None
    end_occurrences: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: RecurrenceRuleRecord) -> "RecurrenceRuleResponse":
        return cls(
            id=record.id,
            frequency=record.frequency,
            interval=record.interval,
            days_of_week=record.weekdays,
            day_of_month=record.day_of_month,
            month_of_year=record.month_of_year,
            end_date=record.end_date,
            end_occurrences=record.end_occurrences,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
