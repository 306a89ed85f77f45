"""Recurrence rule service: authoring and attaching rules to events."""
from sqlmodel import Session, select
from datetime import datetime, time
from typing import Any, Dict, Optional
import logging

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.domain.rule import RecurrenceRule
from recurrence_engine.errors import NotFoundError
from recurrence_engine.models.event import Event
from recurrence_engine.models.recurrence_rule import RecurrenceRuleRecord, utcnow
from recurrence_engine.services.recurrence_validator import RecurrenceValidator
from recurrence_engine.utils.time_utils import to_storage

logger = logging.getLogger(__name__)


class RecurrenceRuleService:
    """Service class for recurrence rule CRUD; invalid rules never reach the database."""

    def __init__(self, session: Session, settings: Optional[ExpansionSettings] = None):
        self.session = session
        self.settings = settings or get_settings()

    def build_rule(self, payload: Dict[str, Any]) -> RecurrenceRule:
        """Validate a payload and turn it into a domain rule (raises ValidationError)."""
        result = RecurrenceValidator.validate_rule_payload(payload)
        RecurrenceValidator.raise_for(result, "Invalid recurrence rule")
        for warning in result["warnings"]:
            logger.info("Recurrence rule warning: %s", warning)

        return RecurrenceRule.from_fields(
            frequency=payload["frequency"],
            interval=payload.get("interval", 1),
            days_of_week=payload.get("days_of_week"),
            day_of_month=payload.get("day_of_month"),
            month_of_year=payload.get("month_of_year"),
            end_date=payload.get("end_date"),
            end_occurrences=payload.get("end_occurrences"),
        )

    def _storage_end_date(self, rule: RecurrenceRule) -> Optional[datetime]:
        until = rule.end_date
        if until is None or isinstance(until, datetime):
            return to_storage(until, self.settings.timezone)
        return datetime.combine(until, time.max)

    def create(self, payload: Dict[str, Any]) -> RecurrenceRuleRecord:
        """Create a recurrence rule."""
        rule = self.build_rule(payload)

        record = RecurrenceRuleRecord(frequency=rule.frequency.value)
        record.apply(rule, end_date=self._storage_end_date(rule))

        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info("Created %s recurrence rule %s", record.frequency, record.id)
        return record

    def get(self, rule_id: int) -> Optional[RecurrenceRuleRecord]:
        """Get a recurrence rule by ID."""
        return self.session.get(RecurrenceRuleRecord, rule_id)

    def update(self, rule_id: int, changes: Dict[str, Any]) -> Optional[RecurrenceRuleRecord]:
        """
        Update a recurrence rule.

        Args:
            rule_id: Rule to update
            changes: Fields to replace; an explicit None clears a field

        Returns:
            Updated record, or None if the rule does not exist
        """
        record = self.get(rule_id)
        if not record:
            return None

        payload = record.to_fields()
        payload.update(changes)
        rule = self.build_rule(payload)

        record.apply(rule, end_date=self._storage_end_date(rule))
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info("Updated recurrence rule %s", rule_id)
        return record

    def delete(self, rule_id: int) -> bool:
        """Delete a recurrence rule; events using it stop recurring."""
        record = self.get(rule_id)
        if not record:
            return False

        events = self.session.exec(select(Event).where(Event.recurrence_rule_id == rule_id)).all()
        for event in events:
            event.recurrence_rule_id = None
            event.updated_at = utcnow()
            self.session.add(event)

        self.session.delete(record)
        self.session.commit()
        logger.info("Deleted recurrence rule %s (detached from %d events)", rule_id, len(events))
        return True

    def attach_to_event(self, event_id: int, rule_id: Optional[int]) -> Event:
        """Make an event recur by ``rule_id``, or stop recurring when it is None."""
        event = self.session.get(Event, event_id)
        if not event:
            raise NotFoundError(f"Event {event_id} not found", details={"event_id": event_id})
        if rule_id is not None and not self.get(rule_id):
            raise NotFoundError(f"Recurrence rule {rule_id} not found", details={"rule_id": rule_id})

        event.recurrence_rule_id = rule_id
        event.updated_at = utcnow()
        self.session.add(event)
        self.session.commit()
        self.session.refresh(event)
        return event
