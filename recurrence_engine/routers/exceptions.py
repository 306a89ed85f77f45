"""Event exception router."""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.db.config import get_session
from recurrence_engine.schemas.event_exception import (
    EventExceptionCreate,
    EventExceptionResponse,
    EventExceptionUpdate,
)
from recurrence_engine.services.event_exception_service import EventExceptionService
from sqlmodel import Session

router = APIRouter(tags=["Event Exceptions"])


def get_exception_service(
    session: Session = Depends(get_session),
    settings: ExpansionSettings = Depends(get_settings),
) -> EventExceptionService:
    """Dependency for getting EventExceptionService instance."""
    return EventExceptionService(session, settings)


@router.post(
    "/events/{event_id}/exceptions",
    response_model=EventExceptionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_exception(
    event_id: int,
    exception_data: EventExceptionCreate,
    service: EventExceptionService = Depends(get_exception_service),
):
    """Cancel or modify the occurrence generated on original_date."""
    return service.create(event_id, exception_data.model_dump())


@router.get("/events/{event_id}/exceptions", response_model=List[EventExceptionResponse])
async def list_exceptions(
    event_id: int,
    service: EventExceptionService = Depends(get_exception_service),
):
    """List the exceptions of an event."""
    return service.list_for_event(event_id)


@router.put("/events/{event_id}/exceptions/{exception_id}", response_model=EventExceptionResponse)
async def update_exception(
    event_id: int,
    exception_id: int,
    exception_data: EventExceptionUpdate,
    service: EventExceptionService = Depends(get_exception_service),
):
    """Update the fields sent in the body."""
    exception = service.update(event_id, exception_id, exception_data.model_dump(exclude_unset=True))
    if not exception:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event exception not found"
        )
    return exception


@router.delete("/events/{event_id}/exceptions/{exception_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exception(
    event_id: int,
    exception_id: int,
    service: EventExceptionService = Depends(get_exception_service),
):
    """Delete an exception; the occurrence reverts to the base event."""
    if not service.delete(event_id, exception_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event exception not found"
        )
