"""Tests for loading events, rules and overrides from the database."""

import logging
from datetime import date, datetime
from types import SimpleNamespace

import pytest
import pytz
from sqlalchemy import DateTime

from recurrence_engine.config import ExpansionSettings
from recurrence_engine.domain.rule import Frequency, Weekday
from recurrence_engine.errors import NotFoundError
from recurrence_engine.models.event import Event
from recurrence_engine.models.event_exception import EventException
from recurrence_engine.models.recurrence_rule import RecurrenceRuleRecord
from recurrence_engine.services.repository import SQLModelEventRepository, build_override_map


def exception_row(**fields):
    values = dict(
        id=1,
        event_id=1,
        original_date="2024-01-16",
        is_cancelled=False,
        modified_title=None,
        modified_description=None,
        modified_start_time=None,
        modified_end_time=None,
        modified_location=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


class TestBuildOverrideMap:
    def test_keys_by_original_date(self):
        overrides = build_override_map([
            exception_row(id=1, original_date="2024-01-16", is_cancelled=True),
            exception_row(id=2, original_date="2024-01-18", modified_title="Retro"),
        ])

        assert set(overrides) == {date(2024, 1, 16), date(2024, 1, 18)}
        assert overrides[date(2024, 1, 16)].is_cancelled is True
        assert overrides[date(2024, 1, 18)].modified_title == "Retro"

    def test_parses_modified_times(self):
        overrides = build_override_map(
            [exception_row(modified_start_time="2024-01-16T14:00:00", modified_end_time="2024-01-16T15:00:00Z")],
            pytz.timezone("Europe/Berlin"),
        )
        override = overrides[date(2024, 1, 16)]

        assert override.modified_start_time == pytz.utc.localize(datetime(2024, 1, 16, 13, 0))
        assert override.modified_end_time == pytz.utc.localize(datetime(2024, 1, 16, 15, 0))

    def test_date_time_original_date_uses_its_date(self):
        overrides = build_override_map([exception_row(original_date="2024-01-16T09:00:00")])
        assert list(overrides) == [date(2024, 1, 16)]

    def test_skips_malformed_rows(self, caplog):
        rows = [
            exception_row(id=1, original_date="16/01/2024"),
            exception_row(id=2, original_date="2024-01-17", modified_start_time="soon"),
            exception_row(id=3, original_date="2024-01-18", is_cancelled=True),
        ]

        with caplog.at_level(logging.WARNING, logger="recurrence_engine.services.repository"):
            overrides = build_override_map(rows)

        assert list(overrides) == [date(2024, 1, 18)]
        assert caplog.text.count("Skipping malformed exception") == 2

    def test_duplicate_dates_keep_first_row(self, caplog):
        rows = [
            exception_row(id=1, modified_title="First"),
            exception_row(id=2, modified_title="Second"),
        ]

        with caplog.at_level(logging.WARNING, logger="recurrence_engine.services.repository"):
            overrides = build_override_map(rows)

        assert overrides[date(2024, 1, 16)].modified_title == "First"
        assert "duplicate exception 2" in caplog.text


class TestSQLModelEventRepository:
    def test_loads_event_and_rule(self, session, settings, make_event, make_rule):
        rule = make_rule(frequency="weekly", days_of_week=[1, 3])
        event = make_event(rule_id=rule.id, location="Room 1")

        base, loaded = SQLModelEventRepository(session, settings).get_event_with_rule(event.id)

        assert base.id == event.id
        assert base.start == pytz.utc.localize(datetime(2024, 1, 15, 9, 0))
        assert base.location == "Room 1"
        assert loaded.frequency is Frequency.WEEKLY
        assert loaded.days_of_week == frozenset({Weekday.MONDAY, Weekday.WEDNESDAY})

    def test_event_without_rule(self, session, settings, make_event):
        event = make_event()
        _, rule = SQLModelEventRepository(session, settings).get_event_with_rule(event.id)
        assert rule is None

    def test_unknown_event(self, session, settings):
        with pytest.raises(NotFoundError):
            SQLModelEventRepository(session, settings).get_event_with_rule(404)

    def test_times_are_read_in_engine_timezone(self, session, make_event):
        event = make_event()
        base, _ = SQLModelEventRepository(
            session, ExpansionSettings(timezone_name="America/New_York")
        ).get_event_with_rule(event.id)

        assert base.start.hour == 9
        assert base.start.utcoffset().total_seconds() == -5 * 3600

    def test_get_exceptions(self, session, settings, make_event):
        event = make_event()
        session.add(EventException(event_id=event.id, original_date="2024-01-16", is_cancelled=True))
        session.add(EventException(event_id=event.id, original_date="bad-date", is_cancelled=True))
        session.commit()

        overrides = SQLModelEventRepository(session, settings).get_exceptions(event.id)

        assert list(overrides) == [date(2024, 1, 16)]

    def test_exceptions_of_other_events_are_ignored(self, session, settings, make_event):
        first = make_event()
        second = make_event(title="Other")
        session.add(EventException(event_id=second.id, original_date="2024-01-16", is_cancelled=True))
        session.commit()

        assert SQLModelEventRepository(session, settings).get_exceptions(first.id) == {}


class TestDateTimeColumns:
    @pytest.mark.parametrize(
        "column",
        [
            Event.__table__.c.start_time,
            Event.__table__.c.end_time,
            Event.__table__.c.created_at,
            Event.__table__.c.updated_at,
            RecurrenceRuleRecord.__table__.c.end_date,
            RecurrenceRuleRecord.__table__.c.created_at,
            RecurrenceRuleRecord.__table__.c.updated_at,
            EventException.__table__.c.created_at,
        ],
        ids=lambda column: f"{column.table.name}.{column.name}",
    )
    def test_columns_hold_naive_wall_clock(self, column):
        assert type(column.type) is DateTime
        assert column.type.timezone is False

    def test_naive_times_round_trip(self, session, make_event, make_rule):
        rule = make_rule(frequency="daily", end_date=datetime(2024, 6, 1, 18, 0))
        event = make_event(rule_id=rule.id)
        session.expire_all()

        stored = session.get(Event, event.id)
        assert stored.start_time == datetime(2024, 1, 15, 9, 0)
        assert stored.start_time.tzinfo is None
        assert session.get(RecurrenceRuleRecord, rule.id).end_date == datetime(2024, 6, 1, 18, 0)
