"""Event exception service: cancel or modify single occurrences."""
from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import logging

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.errors import ConflictError, NotFoundError
from recurrence_engine.models.event import Event
from recurrence_engine.models.event_exception import EventException
from recurrence_engine.services.recurrence_validator import RecurrenceValidator
from recurrence_engine.utils.time_utils import parse_date_key, parse_optional_timestamp, to_engine_time

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("modified_start_time", "modified_end_time")


class EventExceptionService:
    """Service class for event exception CRUD, one exception per event and date."""

    def __init__(self, session: Session, settings: Optional[ExpansionSettings] = None):
        self.session = session
        self.settings = settings or get_settings()

    def _require_event(self, event_id: int) -> Event:
        event = self.session.get(Event, event_id)
        if not event:
            raise NotFoundError(f"Event {event_id} not found", details={"event_id": event_id})
        return event

    def _find_by_date(self, event_id: int, original_date: date) -> Optional[EventException]:
        statement = select(EventException).where(
            EventException.event_id == event_id,
            EventException.original_date == original_date.isoformat(),
        )
        return self.session.exec(statement).first()

    def _normalize(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Bring timestamps into the engine time zone so they compare and store consistently."""
        data = dict(payload)
        for name in TIMESTAMP_FIELDS:
            if isinstance(data.get(name), datetime):
                data[name] = to_engine_time(data[name], self.settings.timezone)
        if data.get("original_date") is not None:
            data["original_date"] = parse_date_key(data["original_date"])
        return data

    def _write(self, exception: EventException, data: Dict[str, Any]) -> None:
        for name, value in data.items():
            if name == "original_date":
                value = value.isoformat()
            elif name in TIMESTAMP_FIELDS and isinstance(value, datetime):
                value = value.isoformat()
            setattr(exception, name, value)

    def _commit(self, exception: EventException) -> EventException:
        exception_id, event_id, original_date = exception.id, exception.event_id, exception.original_date
        self.session.add(exception)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            # Only a concurrent write of the same (event, date) is a conflict
            existing = self._find_by_date(event_id, date.fromisoformat(original_date))
            if existing is None or existing.id == exception_id:
                raise
            raise ConflictError(
                f"Event {event_id} already has an exception on {original_date}",
                details={"event_id": event_id, "original_date": original_date},
            )
        self.session.refresh(exception)
        return exception

    def create(self, event_id: int, payload: Dict[str, Any]) -> EventException:
        """
        Create an exception for one occurrence of an event.

        Raises:
            NotFoundError: If the event does not exist
            ValidationError: If the payload is invalid
            ConflictError: If the event already has an exception on that date
        """
        self._require_event(event_id)
        data = self._normalize(payload)
        RecurrenceValidator.raise_for(
            RecurrenceValidator.validate_exception_payload(data), "Invalid event exception"
        )

        if self._find_by_date(event_id, data["original_date"]):
            raise ConflictError(
                f"Event {event_id} already has an exception on {data['original_date'].isoformat()}",
                details={"event_id": event_id, "original_date": data["original_date"].isoformat()},
            )

        exception = EventException(event_id=event_id, original_date=data["original_date"].isoformat())
        self._write(exception, data)
        exception = self._commit(exception)
        logger.info("Created exception %s for event %s on %s", exception.id, event_id, exception.original_date)
        return exception

    def list_for_event(self, event_id: int) -> List[EventException]:
        """All exceptions of an event ordered by original date."""
        self._require_event(event_id)
        statement = (
            select(EventException)
            .where(EventException.event_id == event_id)
            .order_by(EventException.original_date)
        )
        return list(self.session.exec(statement).all())

    def get(self, event_id: int, exception_id: int) -> Optional[EventException]:
        """Get an exception of an event by ID."""
        exception = self.session.get(EventException, exception_id)
        if not exception or exception.event_id != event_id:
            return None
        return exception

    def update(self, event_id: int, exception_id: int, changes: Dict[str, Any]) -> Optional[EventException]:
        """Apply ``changes`` to an exception; returns None if it does not exist."""
        exception = self.get(event_id, exception_id)
        if not exception:
            return None

        current = {
            "original_date": exception.original_date,
            "is_cancelled": exception.is_cancelled,
            "modified_title": exception.modified_title,
            "modified_description": exception.modified_description,
            "modified_start_time": exception.modified_start_time,
            "modified_end_time": exception.modified_end_time,
            "modified_location": exception.modified_location,
        }
        for name in TIMESTAMP_FIELDS:
            current[name] = parse_optional_timestamp(current[name], self.settings.timezone)
        current.update(changes)

        data = self._normalize(current)
        RecurrenceValidator.raise_for(
            RecurrenceValidator.validate_exception_payload(data), "Invalid event exception"
        )

        existing = self._find_by_date(event_id, data["original_date"])
        if existing and existing.id != exception.id:
            raise ConflictError(
                f"Event {event_id} already has an exception on {data['original_date'].isoformat()}",
                details={"event_id": event_id, "original_date": data["original_date"].isoformat()},
            )

        self._write(exception, data)
        return self._commit(exception)

    def delete(self, event_id: int, exception_id: int) -> bool:
        """Delete an exception; the occurrence reverts to the base event."""
        exception = self.get(event_id, exception_id)
        if not exception:
            return False

        self.session.delete(exception)
        self.session.commit()
        logger.info("Deleted exception %s of event %s", exception_id, event_id)
        return True
