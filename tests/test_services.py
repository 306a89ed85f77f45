"""Tests for the rule authoring and exception services."""

from datetime import date, datetime

import pytest
import pytz
from sqlmodel import select

from recurrence_engine.config import ExpansionSettings
from recurrence_engine.errors import ConflictError, NotFoundError, ValidationError
from recurrence_engine.models.event import Event
from recurrence_engine.models.event_exception import EventException
from recurrence_engine.services.event_exception_service import EventExceptionService
from recurrence_engine.services.recurrence_rule_service import RecurrenceRuleService


@pytest.fixture
def rule_service(session, settings):
    return RecurrenceRuleService(session, settings)


@pytest.fixture
def exception_service(session, settings):
    return EventExceptionService(session, settings)


class TestRecurrenceRuleService:
    def test_create_normalizes_fields(self, rule_service):
        record = rule_service.create({"frequency": "weekly", "days_of_week": [5, 1, 3]})

        assert record.id is not None
        assert record.frequency == "WEEKLY"
        assert record.interval == 1
        assert record.weekdays == [1, 3, 5]

    def test_create_rejects_invalid_rule(self, rule_service, session):
        with pytest.raises(ValidationError):
            rule_service.create({"frequency": "weekly"})

    def test_create_stores_aware_end_date_as_wall_clock(self, session):
        service = RecurrenceRuleService(session, ExpansionSettings(timezone_name="Europe/Berlin"))
        record = service.create({
            "frequency": "daily",
            "end_date": pytz.utc.localize(datetime(2024, 3, 1, 12, 0)),
        })
        assert record.end_date == datetime(2024, 3, 1, 13, 0)

    def test_plain_end_date_covers_the_day(self, rule_service):
        record = rule_service.create({"frequency": "daily", "end_date": date(2024, 3, 1)})
        assert record.end_date.date() == date(2024, 3, 1)
        assert record.end_date.hour == 23

    def test_update_merges_changes(self, rule_service):
        record = rule_service.create({"frequency": "monthly", "day_of_month": 15, "end_occurrences": 6})

        updated = rule_service.update(record.id, {"interval": 2})

        assert updated.interval == 2
        assert updated.day_of_month == 15
        assert updated.end_occurrences == 6

    def test_update_can_switch_end_condition(self, rule_service):
        record = rule_service.create({"frequency": "daily", "end_occurrences": 6})

        updated = rule_service.update(record.id, {"end_occurrences": None, "end_date": datetime(2024, 6, 1)})

        assert updated.end_occurrences is None
        assert updated.end_date == datetime(2024, 6, 1)

    def test_update_rejects_both_end_conditions(self, rule_service):
        record = rule_service.create({"frequency": "daily", "end_occurrences": 6})
        with pytest.raises(ValidationError):
            rule_service.update(record.id, {"end_date": datetime(2024, 6, 1)})

    def test_update_missing_rule(self, rule_service):
        assert rule_service.update(999, {"interval": 2}) is None

    def test_delete_detaches_events(self, rule_service, session, make_event):
        record = rule_service.create({"frequency": "daily"})
        event = make_event(rule_id=record.id)

        assert rule_service.delete(record.id) is True

        session.refresh(event)
        assert event.recurrence_rule_id is None
        assert rule_service.get(record.id) is None

    def test_delete_missing_rule(self, rule_service):
        assert rule_service.delete(999) is False

    def test_attach_and_detach(self, rule_service, make_event):
        record = rule_service.create({"frequency": "daily"})
        event = make_event()

        assert rule_service.attach_to_event(event.id, record.id).recurrence_rule_id == record.id
        assert rule_service.attach_to_event(event.id, None).recurrence_rule_id is None

    def test_attach_unknown_rule(self, rule_service, make_event):
        event = make_event()
        with pytest.raises(NotFoundError):
            rule_service.attach_to_event(event.id, 999)

    def test_attach_unknown_event(self, rule_service):
        record = rule_service.create({"frequency": "daily"})
        with pytest.raises(NotFoundError):
            rule_service.attach_to_event(999, record.id)


class TestEventExceptionService:
    def test_create_cancellation(self, exception_service, make_event):
        event = make_event()

        exception = exception_service.create(event.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        assert exception.id is not None
        assert exception.original_date == "2024-01-16"
        assert exception.is_cancelled is True

    def test_create_stores_times_in_engine_timezone(self, session, make_event):
        event = make_event()
        service = EventExceptionService(session, ExpansionSettings(timezone_name="Europe/Berlin"))

        exception = service.create(event.id, {
            "original_date": "2024-01-16",
            "modified_start_time": pytz.utc.localize(datetime(2024, 1, 16, 13, 0)),
        })

        assert exception.modified_start_time == "2024-01-16T14:00:00+01:00"

    def test_create_for_unknown_event(self, exception_service):
        with pytest.raises(NotFoundError):
            exception_service.create(999, {"original_date": date(2024, 1, 16), "is_cancelled": True})

    def test_duplicate_date_conflicts(self, exception_service, make_event):
        event = make_event()
        exception_service.create(event.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        with pytest.raises(ConflictError):
            exception_service.create(event.id, {"original_date": date(2024, 1, 16), "modified_title": "Again"})

    def test_same_date_on_other_event_is_allowed(self, exception_service, make_event):
        first = make_event()
        second = make_event(title="Other")
        exception_service.create(first.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})
        exception_service.create(second.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        assert len(exception_service.list_for_event(second.id)) == 1

    def test_create_rejects_end_before_start(self, exception_service, make_event):
        event = make_event()
        with pytest.raises(ValidationError):
            exception_service.create(event.id, {
                "original_date": date(2024, 1, 16),
                "modified_start_time": datetime(2024, 1, 16, 14),
                "modified_end_time": datetime(2024, 1, 16, 13),
            })

    def test_list_is_ordered_by_date(self, exception_service, make_event):
        event = make_event()
        exception_service.create(event.id, {"original_date": date(2024, 1, 18), "is_cancelled": True})
        exception_service.create(event.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        dates = [e.original_date for e in exception_service.list_for_event(event.id)]

        assert dates == ["2024-01-16", "2024-01-18"]

    def test_update_keeps_unchanged_fields(self, exception_service, make_event):
        event = make_event()
        exception = exception_service.create(event.id, {
            "original_date": date(2024, 1, 16),
            "modified_start_time": datetime(2024, 1, 16, 14),
        })

        updated = exception_service.update(event.id, exception.id, {"modified_title": "Moved"})

        assert updated.modified_title == "Moved"
        assert updated.modified_start_time == "2024-01-16T14:00:00+00:00"

    def test_update_rejects_null_cancellation_flag(self, exception_service, make_event):
        event = make_event()
        exception = exception_service.create(event.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        with pytest.raises(ValidationError) as exc_info:
            exception_service.update(event.id, exception.id, {"is_cancelled": None})

        assert "is_cancelled must be true or false" in exc_info.value.details["errors"]
        assert exception_service.get(event.id, exception.id).is_cancelled is True

    def test_update_to_taken_date_conflicts(self, exception_service, make_event):
        event = make_event()
        exception_service.create(event.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})
        other = exception_service.create(event.id, {"original_date": date(2024, 1, 17), "is_cancelled": True})

        with pytest.raises(ConflictError):
            exception_service.update(event.id, other.id, {"original_date": date(2024, 1, 16)})

    def test_get_checks_owning_event(self, exception_service, make_event):
        first = make_event()
        second = make_event(title="Other")
        exception = exception_service.create(first.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        assert exception_service.get(second.id, exception.id) is None
        assert exception_service.update(second.id, exception.id, {"is_cancelled": False}) is None
        assert exception_service.delete(second.id, exception.id) is False

    def test_delete(self, exception_service, make_event):
        event = make_event()
        exception = exception_service.create(event.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        assert exception_service.delete(event.id, exception.id) is True
        assert exception_service.list_for_event(event.id) == []

    def test_deleting_event_cascades(self, exception_service, session, make_event):
        event = make_event()
        exception_service.create(event.id, {"original_date": date(2024, 1, 16), "is_cancelled": True})

        session.delete(session.get(Event, event.id))
        session.commit()
        session.expire_all()

        assert session.exec(select(EventException)).all() == []
