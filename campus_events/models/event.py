from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Integer, Boolean, DateTime, CheckConstraint
from campus_events.db.base import Base

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class EventCategory(str, Enum):
    hackathon="hackathon"
    game="game"
    celebration="celebration"

class EventScope(str, Enum):
    own_institution="own_institution"
    other_institution="other_institution"

class Event(Base):
    __tablename__ = "events"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), unique=True)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    category: Mapped[EventCategory]
    scope: Mapped[EventScope] = mapped_column(default=EventScope.own_institution)
    description: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    venue: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    total_capacity: Mapped[int] = mapped_column(Integer)
    consumed_capacity: Mapped[int] = mapped_column(Integer, default=0)
    visible: Mapped[bool] = mapped_column(Boolean, default=True)
    registration_closed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    registrations = relationship("Registration", back_populates="event")

    __table_args__ = (
        CheckConstraint("total_capacity >= 1", name="total_capacity_positive"),
        CheckConstraint("consumed_capacity >= 0", name="consumed_capacity_non_negative"),
        CheckConstraint("consumed_capacity <= total_capacity", name="consumed_le_total"),
    )

    @property
    def remaining_capacity(self) -> int:
        return self.total_capacity - self.consumed_capacity

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title!r}, consumed={self.consumed_capacity}/{self.total_capacity})>"
