"""Event, override and occurrence value types."""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from recurrence_engine.errors import ValidationError


@dataclass(frozen=True)
class BaseEvent:
    """The recurring event definition; its start is the recurrence anchor."""

    id: int
    title: str
    start: datetime
    end: datetime
    is_all_day: bool = False
    description: Optional[str] = None
    location: Optional[str] = None
    priority: int = 0
    category_id: Optional[int] = None

    def __post_init__(self):
        if self.end < self.start:
            raise ValidationError(
                "Event end must not be before its start",
                details={"event_id": self.id},
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class OccurrenceOverride:
    """Cancels or modifies the single occurrence generated on ``original_date``."""

    original_date: date
    is_cancelled: bool = False
    modified_title: Optional[str] = None
    modified_description: Optional[str] = None
    modified_start_time: Optional[datetime] = None
    modified_end_time: Optional[datetime] = None
    modified_location: Optional[str] = None


@dataclass(frozen=True)
class Occurrence:
    """One materialized instance of a recurring event."""

    event_id: int
    title: str
    start: datetime
    end: datetime
    is_all_day: bool
    description: Optional[str]
    location: Optional[str]
    priority: int
    category_id: Optional[int]
    original_date: date
    candidate_index: int

    @property
    def sort_key(self) -> Tuple[datetime, int, int]:
        return (self.start, self.event_id, self.candidate_index)
