from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import ForeignKey, String, DateTime, Index, text
from campus_events.db.base import Base

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

class RegistrationStatus(str, Enum):
    pending="pending"
    approved="approved"
    rejected="rejected"

TERMINAL_STATUSES = frozenset({RegistrationStatus.approved, RegistrationStatus.rejected})

# at most one pending/approved registration per (event, email); rejected rows fall out of the index
_ACTIVE_ONLY = text("status IN ('pending', 'approved')")

class Registration(Base):
    __tablename__ = "registrations"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), index=True)
    user_ref: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    student_id: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    name: Mapped[str] = mapped_column(String(160))
    email: Mapped[str] = mapped_column(String(160))
    email_normalized: Mapped[str] = mapped_column(String(160), index=True)
    institution: Mapped[str] = mapped_column(String(200))
    department: Mapped[str] = mapped_column(String(120))
    year: Mapped[str] = mapped_column(String(20))
    status: Mapped[RegistrationStatus] = mapped_column(default=RegistrationStatus.pending, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="registrations")

    __table_args__ = (
        Index(
            "uq_registrations_active_event_email",
            "event_id", "email_normalized",
            unique=True,
            sqlite_where=_ACTIVE_ONLY,
            postgresql_where=_ACTIVE_ONLY,
        ),
    )

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, event={self.event_id}, email={self.email_normalized!r}, status={self.status})>"
