"""
Event repositories consumed by the expansion service.

A repository answers the two reads an expansion needs:
- the base event together with its recurrence rule
- the event's overrides keyed by original date
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import pytz
from sqlmodel import Session, select

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.domain.event import BaseEvent, OccurrenceOverride
from recurrence_engine.domain.rule import RecurrenceRule
from recurrence_engine.errors import ConflictError, InvalidTimestampError, NotFoundError
from recurrence_engine.models.event import Event
from recurrence_engine.models.event_exception import EventException
from recurrence_engine.models.recurrence_rule import RecurrenceRuleRecord
from recurrence_engine.utils.time_utils import parse_date_key, parse_optional_timestamp, to_engine_time

logger = logging.getLogger(__name__)


class EventRepository(ABC):
    """Read access to recurring events and their overrides."""

    @abstractmethod
    def get_event_with_rule(self, event_id: int) -> Tuple[BaseEvent, Optional[RecurrenceRule]]:
        """
        Load an event and its rule.

        Raises:
            NotFoundError: If the event does not exist
        """

    @abstractmethod
    def get_exceptions(self, event_id: int) -> Mapping[date, OccurrenceOverride]:
        """Overrides of the event keyed by original date."""


def build_override_map(rows: Iterable[Any], timezone=pytz.utc) -> Dict[date, OccurrenceOverride]:
    """
    Parse stored override rows into a date-keyed map.

    Rows with an unparseable date or timestamp are skipped, as are later
    rows repeating an already seen date; both are logged.

    Args:
        rows: Objects exposing EventException's attributes
        timezone: Zone used for naive modified times

    Returns:
        Dict from original date to override
    """
    overrides: Dict[date, OccurrenceOverride] = {}

    for row in rows:
        try:
            original_date = parse_date_key(row.original_date)
            modified_start = parse_optional_timestamp(row.modified_start_time, timezone)
            modified_end = parse_optional_timestamp(row.modified_end_time, timezone)
        except InvalidTimestampError as e:
            logger.warning(
                "Skipping malformed exception %s for event %s: %s",
                getattr(row, "id", None),
                getattr(row, "event_id", None),
                e.message,
            )
            continue

        if original_date in overrides:
            logger.warning(
                "Ignoring duplicate exception %s for event %s on %s",
                getattr(row, "id", None),
                getattr(row, "event_id", None),
                original_date.isoformat(),
            )
            continue

        overrides[original_date] = OccurrenceOverride(
            original_date=original_date,
            is_cancelled=bool(row.is_cancelled),
            modified_title=row.modified_title,
            modified_description=row.modified_description,
            modified_start_time=modified_start,
            modified_end_time=modified_end,
            modified_location=row.modified_location,
        )

    return overrides


class SQLModelEventRepository(EventRepository):
    """Repository backed by the events, recurrence_rules and event_exceptions tables."""

    def __init__(self, session: Session, settings: Optional[ExpansionSettings] = None):
        self.session = session
        self.settings = settings or get_settings()

    def get_event_with_rule(self, event_id: int) -> Tuple[BaseEvent, Optional[RecurrenceRule]]:
        row = self.session.get(Event, event_id)
        if row is None:
            raise NotFoundError(f"Event {event_id} not found", details={"event_id": event_id})

        rule = None
        if row.recurrence_rule_id is not None:
            record = self.session.get(RecurrenceRuleRecord, row.recurrence_rule_id)
            if record is not None:
                rule = record.to_domain()
            else:
                logger.warning("Event %s references missing rule %s", event_id, row.recurrence_rule_id)

        return self.to_base_event(row), rule

    def get_exceptions(self, event_id: int) -> Mapping[date, OccurrenceOverride]:
        statement = (
            select(EventException)
            .where(EventException.event_id == event_id)
            .order_by(EventException.id)
        )
        rows = self.session.exec(statement).all()
        return build_override_map(rows, self.settings.timezone)

    def to_base_event(self, row: Event) -> BaseEvent:
        tz = self.settings.timezone
        return BaseEvent(
            id=row.id,
            title=row.title,
            start=to_engine_time(row.start_time, tz),
            end=to_engine_time(row.end_time, tz),
            is_all_day=row.is_all_day,
            description=row.description,
            location=row.location,
            priority=row.priority,
            category_id=row.category_id,
        )


class InMemoryEventRepository(EventRepository):
    """Dict-backed repository for tests and embedding without a database."""

    def __init__(self):
        self._events: Dict[int, Tuple[BaseEvent, Optional[RecurrenceRule]]] = {}
        self._exceptions: Dict[int, Dict[date, OccurrenceOverride]] = {}

    def add_event(self, event: BaseEvent, rule: Optional[RecurrenceRule] = None) -> None:
        self._events[event.id] = (event, rule)
        self._exceptions.setdefault(event.id, {})

    def add_exception(self, event_id: int, override: OccurrenceOverride) -> None:
        """Register an override; one per (event, original date)."""
        if event_id not in self._events:
            raise NotFoundError(f"Event {event_id} not found", details={"event_id": event_id})
        overrides = self._exceptions[event_id]
        if override.original_date in overrides:
            raise ConflictError(
                f"Event {event_id} already has an exception on {override.original_date.isoformat()}",
                details={"event_id": event_id, "original_date": override.original_date.isoformat()},
            )
        overrides[override.original_date] = override

    def get_event_with_rule(self, event_id: int) -> Tuple[BaseEvent, Optional[RecurrenceRule]]:
        if event_id not in self._events:
            raise NotFoundError(f"Event {event_id} not found", details={"event_id": event_id})
        return self._events[event_id]

    def get_exceptions(self, event_id: int) -> Mapping[date, OccurrenceOverride]:
        return dict(self._exceptions.get(event_id, {}))
