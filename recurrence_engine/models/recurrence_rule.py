"""Recurrence Rule model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Text
from datetime import datetime, timezone
from typing import List, Optional
import json

from recurrence_engine.domain.rule import RecurrenceRule


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RecurrenceRuleRecord(SQLModel, table=True):
    """Stored recurrence rule; see RecurrenceRule for the validated form."""

    __tablename__ = "recurrence_rules"

    id: Optional[int] = Field(default=None, primary_key=True)
    frequency: str = Field(max_length=20)  # DAILY, WEEKLY, MONTHLY, YEARLY
    interval: int = Field(default=1)  # Repeat every X units
    days_of_week: Optional[str] = Field(default=None, sa_column=Column(Text))  # JSON list, 0-6 for Sunday-Saturday
    day_of_month: Optional[int] = Field(default=None)  # 1-31
    month_of_year: Optional[int] = Field(default=None)  # 1-12
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)  # Wall-clock time in the engine time zone
    end_occurrences: Optional[int] = Field(default=None)  # Max occurrences from the anchor
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    @property
    def weekdays(self) -> List[int]:
        """Deserialized days_of_week."""
        if not self.days_of_week:
            return []
        return json.loads(self.days_of_week)

    def to_fields(self) -> dict:
        """Flat field dict accepted by RecurrenceRule.from_fields."""
        return {
            "frequency": self.frequency,
            "interval": self.interval,
            "days_of_week": self.weekdays,
            "day_of_month": self.day_of_month,
            "month_of_year": self.month_of_year,
            "end_date": self.end_date,
            "end_occurrences": self.end_occurrences,
        }

    def to_domain(self) -> RecurrenceRule:
        return RecurrenceRule.from_fields(**self.to_fields())

    def apply(self, rule: RecurrenceRule, end_date: Optional[datetime] = None) -> None:
        """Copy a validated rule onto this row; ``end_date`` is the storage form of rule.end_date."""
        self.frequency = rule.frequency.value
        self.interval = rule.interval
        self.days_of_week = json.dumps(rule.sorted_days) if rule.days_of_week else None
        self.day_of_month = rule.day_of_month
        self.month_of_year = rule.month_of_year
        self.end_date = end_date
        self.end_occurrences = rule.end_occurrences
        self.updated_at = utcnow()
