"""Recurrence rule router."""
from fastapi import APIRouter, Depends, HTTPException, status

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.db.config import get_session
from recurrence_engine.schemas.recurrence_rule import (
    RecurrenceRuleCreate,
    RecurrenceRuleResponse,
    RecurrenceRuleUpdate,
)
from recurrence_engine.services.recurrence_rule_service import RecurrenceRuleService
from sqlmodel import Session

router = APIRouter(tags=["Recurrence Rules"])  # No prefix since main.py adds /api prefix


def get_rule_service(
    session: Session = Depends(get_session),
    settings: ExpansionSettings = Depends(get_settings),
) -> RecurrenceRuleService:
    """Dependency for getting RecurrenceRuleService instance."""
    return RecurrenceRuleService(session, settings)


@router.post("/rules", response_model=RecurrenceRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
    rule_data: RecurrenceRuleCreate,
    service: RecurrenceRuleService = Depends(get_rule_service),
):
    """Create a recurrence rule; invalid combinations are rejected with 422."""
    record = service.create(rule_data.model_dump())
    return RecurrenceRuleResponse.from_record(record)


@router.get("/rules/{rule_id}", response_model=RecurrenceRuleResponse)
async def get_rule(
    rule_id: int,
    service: RecurrenceRuleService = Depends(get_rule_service),
):
    """Get a recurrence rule by ID."""
    record = service.get(rule_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recurrence rule not found"
        )
    return RecurrenceRuleResponse.from_record(record)


@router.put("/rules/{rule_id}", response_model=RecurrenceRuleResponse)
async def update_rule(
    rule_id: int,
    rule_data: RecurrenceRuleUpdate,
    service: RecurrenceRuleService = Depends(get_rule_service),
):
    """Update the fields sent in the body; send null to clear a field."""
    record = service.update(rule_id, rule_data.model_dump(exclude_unset=True))
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recurrence rule not found"
        )
    return RecurrenceRuleResponse.from_record(record)


@router.delete("/rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(
    rule_id: int,
    service: RecurrenceRuleService = Depends(get_rule_service),
):
    """Delete a recurrence rule; events using it stop recurring."""
    if not service.delete(rule_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recurrence rule not found"
        )


@router.put("/events/{event_id}/rule/{rule_id}")
async def attach_rule(
    event_id: int,
    rule_id: int,
    service: RecurrenceRuleService = Depends(get_rule_service),
):
    """Make an event recur by a rule."""
    event = service.attach_to_event(event_id, rule_id)
    return {"event_id": event.id, "recurrence_rule_id": event.recurrence_rule_id}


@router.delete("/events/{event_id}/rule")
async def detach_rule(
    event_id: int,
    service: RecurrenceRuleService = Depends(get_rule_service),
):
    """Stop an event from recurring; the rule itself is kept."""
    event = service.attach_to_event(event_id, None)
    return {"event_id": event.id, "recurrence_rule_id": event.recurrence_rule_id}
