from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from campus_events.models.event import EventCategory, EventScope
from campus_events.schemas.common import as_utc

# ---------------------------
# Event Schemas
# ---------------------------

def _clean_title(v):
    if v is None:
        return v
    v = str(v).strip()
    if not v:
        raise ValueError("title must not be empty")
    return v

class EventBase(BaseModel):
    title: str = Field(max_length=200)
    event_date: datetime
    category: EventCategory
    scope: EventScope = EventScope.own_institution
    description: Optional[str] = None
    venue: Optional[str] = None
    visible: bool = True
    registration_closed: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v):
        return _clean_title(v)

class EventCreate(EventBase):
    total_capacity: int = Field(ge=1)

class EventUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    event_date: datetime | None = None
    category: EventCategory | None = None
    scope: EventScope | None = None
    description: str | None = None
    venue: str | None = None
    visible: bool | None = None
    registration_closed: bool | None = None
    total_capacity: int | None = Field(default=None, ge=1)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v):
        return _clean_title(v)

    # omitted means "leave as is"; an explicit null would blank a required column
    @field_validator(
        "title", "event_date", "category", "scope", "visible", "registration_closed", "total_capacity"
    )
    @classmethod
    def _not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

class Event(EventBase):
    id: int
    total_capacity: int
    consumed_capacity: int
    remaining_capacity: int
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("event_date", "created_at", mode="after")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)

# ---------------------------
# Capacity ledger
# ---------------------------

class CapacityEdit(BaseModel):
    total_capacity: int = Field(ge=1)

class LedgerRow(BaseModel):
    event_id: int
    title: str
    total_capacity: int
    consumed_capacity: int
    approved: int
    pending: int
    remaining: int
    consistent: bool

class ReconcileResult(BaseModel):
    event_id: int
    consumed_before: int
    consumed_after: int
