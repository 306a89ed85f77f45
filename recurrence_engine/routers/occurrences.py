"""Occurrence expansion router."""
from fastapi import APIRouter, Depends, Query
from typing import Any, Dict

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.db.config import get_session
from recurrence_engine.services.recurrence_expansion_service import expand_recurring_events
from recurrence_engine.services.repository import SQLModelEventRepository
from sqlmodel import Session

router = APIRouter(tags=["Occurrences"])


def get_repository(
    session: Session = Depends(get_session),
    settings: ExpansionSettings = Depends(get_settings),
) -> SQLModelEventRepository:
    """Dependency for getting the SQLModel-backed event repository."""
    return SQLModelEventRepository(session, settings)


@router.get("/events/{event_id}/occurrences", response_model=Dict[str, Any])
async def list_occurrences(
    event_id: int,
    start: str = Query(..., description="Window start (ISO date or date-time)"),
    end: str = Query(..., description="Window end, inclusive (ISO date or date-time)"),
    repository: SQLModelEventRepository = Depends(get_repository),
    settings: ExpansionSettings = Depends(get_settings),
):
    """Expand a recurring event into its occurrences within [start, end]."""
    occurrences = expand_recurring_events(repository, event_id, start, end, settings)

    return {
        "occurrences": occurrences,
        "count": len(occurrences)
    }
