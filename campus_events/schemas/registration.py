from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Dict, Optional
from datetime import datetime

from campus_events.models.registration import RegistrationStatus
from campus_events.schemas.common import as_utc

class Participant(BaseModel):
    """Identity the participant types into the registration form."""
    name: str = Field(min_length=1, max_length=160)
    email: EmailStr
    institution: str = Field(min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=120)
    year: str = Field(min_length=1, max_length=20)

    @field_validator("name", "institution", "department", "year", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

class RegistrationCreate(Participant):
    event_id: int = Field(ge=1)

class Registration(BaseModel):
    id: int
    event_id: int
    student_id: Optional[str] = None
    name: str
    email: str
    institution: str
    department: str
    year: str
    status: RegistrationStatus
    created_at: datetime
    approved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("created_at", "approved_at", mode="after")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)

class RegistrationWithEvent(Registration):
    event_title: Optional[str] = None
    event_date: Optional[datetime] = None
    category: Optional[str] = None

    @field_validator("event_date", mode="after")
    @classmethod
    def _event_utc(cls, v):
        return as_utc(v)

class StatusMap(BaseModel):
    status_map: Dict[int, RegistrationStatus]
