"""Domain types for recurrence expansion."""

from .event import BaseEvent, Occurrence, OccurrenceOverride
from .rule import (
    EndCondition,
    EndDate,
    EndOccurrences,
    Frequency,
    NoEnd,
    RecurrenceRule,
    Weekday,
)

__all__ = [
    "BaseEvent",
    "EndCondition",
    "EndDate",
    "EndOccurrences",
    "Frequency",
    "NoEnd",
    "Occurrence",
    "OccurrenceOverride",
    "RecurrenceRule",
    "Weekday",
]
