"""Occurrence schemas for the expansion API."""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from recurrence_engine.domain.event import Occurrence


class OccurrenceResponse(BaseModel):
    """One expanded occurrence as returned to callers."""
    id: int  # Owning event id
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False
    location: Optional[str] = None
    priority: int = 0
    category_id: Optional[int] = None

    @classmethod
    def from_occurrence(cls, occurrence: Occurrence) -> "OccurrenceResponse":
        return cls(
            id=occurrence.event_id,
            title=occurrence.title,
            description=occurrence.description,
            start_time=occurrence.start,
            end_time=occurrence.end,
            is_all_day=occurrence.is_all_day,
            location=occurrence.location,
            priority=occurrence.priority,
            category_id=occurrence.category_id,
        )
