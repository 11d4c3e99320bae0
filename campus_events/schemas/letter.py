from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime

from campus_events.schemas.common import as_utc

class ParticipantSnapshot(BaseModel):
    name: str
    email: str
    institution: str
    department: str
    year: str
    student_id: Optional[str] = None

class LetterEvent(BaseModel):
    id: int
    title: str
    date: datetime
    category: str

    @field_validator("date", mode="after")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)

class ApprovalLetter(BaseModel):
    """Everything a document generator needs for an approved registration."""
    reference: str
    registration_id: int
    approved_at: datetime
    event: LetterEvent
    participant: ParticipantSnapshot

    @field_validator("approved_at", mode="after")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)
