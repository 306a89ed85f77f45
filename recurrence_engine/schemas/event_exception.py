"""Event exception schemas for the override API."""
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional


class EventExceptionCreate(BaseModel):
    """Schema for cancelling or modifying one occurrence."""
    original_date: date  # Date of the generated occurrence
    is_cancelled: bool = False
    modified_title: Optional[str] = Field(None, min_length=1, max_length=200)
    modified_description: Optional[str] = Field(None, max_length=1000)
    modified_start_time: Optional[datetime] = None
    modified_end_time: Optional[datetime] = None
    modified_location: Optional[str] = Field(None, max_length=200)


class EventExceptionUpdate(BaseModel):
    """Schema for updating an exception; only provided fields change."""
    original_date: Optional[date] = None
    is_cancelled: Optional[bool] = None
    modified_title: Optional[str] = Field(None, min_length=1, max_length=200)
    modified_description: Optional[str] = Field(None, max_length=1000)
    modified_start_time: Optional[datetime] = None
    modified_end_time: Optional[datetime] = None
    modified_location: Optional[str] = Field(None, max_length=200)


class EventExceptionResponse(BaseModel):
    """Schema for event exception API responses."""
    id: int
    event_id: int
    original_date: str
    is_cancelled: bool
    modified_title: Optional[str] = None
    modified_description: Optional[str] = None
    modified_start_time: Optional[str] = None
    modified_end_time: Optional[str] = None
    modified_location: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
