"""Shared fixtures: in-memory database, API client and event factories."""

from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.db.config import enable_sqlite_foreign_keys, get_session
from recurrence_engine.db.init import init_db
from recurrence_engine.main import app
from recurrence_engine.models.event import Event
from recurrence_engine.services.recurrence_rule_service import RecurrenceRuleService


@pytest.fixture
def settings() -> ExpansionSettings:
    return ExpansionSettings()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session, settings):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_event(session):
    """Insert an events row; times are wall-clock in the engine time zone."""

    def _make(
        title: str = "Standup",
        start: datetime = datetime(2024, 1, 15, 9, 0),
        end: datetime = datetime(2024, 1, 15, 9, 30),
        rule_id: int | None = None,
        **fields,
    ) -> Event:
        event = Event(
            title=title,
            start_time=start,
            end_time=end,
            recurrence_rule_id=rule_id,
            **fields,
        )
        session.add(event)
        session.commit()
        session.refresh(event)
        return event

    return _make


@pytest.fixture
def make_rule(session, settings):
    """Create a recurrence_rules row through the authoring service."""

    def _make(**payload):
        return RecurrenceRuleService(session, settings).create(payload)

    return _make
