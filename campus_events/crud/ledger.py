"""Event capacity ledger.

The ``consumed_capacity`` column of an event is the single source of truth
for "is there room". Every mutation here is one conditional ``UPDATE`` and
its rowcount decides the outcome, so two callers racing for the last unit
can never both succeed. None of these methods commit: the caller owns the
transaction boundary.
"""
from typing import Any, Dict, List

import structlog
from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from campus_events.core.errors import (
    BelowConsumed,
    EventFull,
    EventNotFound,
    InvariantViolation,
    RegistrationClosed,
)
from campus_events.models.event import Event
from campus_events.models.registration import Registration, RegistrationStatus

logger = structlog.get_logger(__name__)


class CapacityLedger:
    def load(self, db: Session, event_id: int) -> Event:
        event = db.get(Event, event_id, populate_existing=True)
        if event is None:
            raise EventNotFound(event_id=event_id)
        return event

    def reserve(self, db: Session, event_id: int) -> None:
        """Compare-and-increment one unit of capacity."""
        res = db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                Event.registration_closed.is_(False),
                Event.consumed_capacity < Event.total_capacity,
            )
            .values(consumed_capacity=Event.consumed_capacity + 1)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 1:
            return

        event = self.load(db, event_id)
        if event.registration_closed:
            raise RegistrationClosed(event_id=event_id)
        raise EventFull(event_id=event_id, total=event.total_capacity, consumed=event.consumed_capacity)

    def release(self, db: Session, event_id: int, units: int = 1) -> None:
        """Give back previously committed units. Administrative correction only."""
        if units < 1:
            raise ValueError("units must be >= 1")
        res = db.execute(
            update(Event)
            .where(Event.id == event_id, Event.consumed_capacity >= units)
            .values(consumed_capacity=Event.consumed_capacity - units)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 1:
            return

        event = self.load(db, event_id)
        raise InvariantViolation(
            "Release would drive consumed capacity below zero",
            event_id=event_id, consumed=event.consumed_capacity, units=units,
        )

    def edit_capacity(self, db: Session, event_id: int, new_total: int) -> None:
        if new_total < 1:
            raise ValueError("total capacity must be >= 1")
        res = db.execute(
            update(Event)
            .where(Event.id == event_id, Event.consumed_capacity <= new_total)
            .values(total_capacity=new_total)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 1:
            return

        event = self.load(db, event_id)
        raise BelowConsumed(event_id=event_id, requested=new_total, consumed=event.consumed_capacity)

    def approved_count(self, db: Session, event_id: int) -> int:
        return int(db.scalar(
            select(func.count(Registration.id)).where(
                Registration.event_id == event_id,
                Registration.status == RegistrationStatus.approved,
            )
        ) or 0)

    def consumed(self, db: Session, event_id: int) -> int:
        value = db.scalar(select(Event.consumed_capacity).where(Event.id == event_id))
        if value is None:
            raise EventNotFound(event_id=event_id)
        return int(value)

    def verify(self, db: Session, event_id: int) -> None:
        """Post-condition: consumed capacity equals the number of approved registrations."""
        consumed = self.consumed(db, event_id)
        approved = self.approved_count(db, event_id)
        if consumed != approved:
            logger.error("ledger.invariant_violation", event_id=event_id, consumed=consumed, approved=approved)
            raise InvariantViolation(event_id=event_id, consumed=consumed, approved=approved)

    def reconcile(self, db: Session, event_id: int) -> Dict[str, int]:
        """Bring ``consumed`` back in line with ``count(approved)``.

        Refuses (without writing) when the approved count itself exceeds total capacity.
        """
        event = self.load(db, event_id)
        before = event.consumed_capacity
        approved = self.approved_count(db, event_id)
        if approved > event.total_capacity:
            logger.error("ledger.reconcile_impossible", event_id=event_id, approved=approved, total=event.total_capacity)
            raise InvariantViolation(
                "Approved registrations exceed total capacity",
                event_id=event_id, approved=approved, total=event.total_capacity,
            )

        if before > approved:
            self.release(db, event_id, before - approved)
        elif before < approved:
            res = db.execute(
                update(Event)
                .where(Event.id == event_id, Event.consumed_capacity == before)
                .values(consumed_capacity=approved)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                raise InvariantViolation("Ledger changed during reconcile", event_id=event_id)
        return {"event_id": event_id, "consumed_before": before, "consumed_after": approved}

    def report(self, db: Session) -> List[Dict[str, Any]]:
        approved = func.coalesce(func.sum(case((Registration.status == RegistrationStatus.approved, 1), else_=0)), 0)
        pending = func.coalesce(func.sum(case((Registration.status == RegistrationStatus.pending, 1), else_=0)), 0)
        stmt = (
            select(Event.id, Event.title, Event.total_capacity, Event.consumed_capacity,
                   approved.label("approved"), pending.label("pending"))
            .outerjoin(Registration, Registration.event_id == Event.id)
            .group_by(Event.id, Event.title, Event.total_capacity, Event.consumed_capacity)
            .order_by(Event.id)
        )
        out: List[Dict[str, Any]] = []
        for row in db.execute(stmt):
            out.append({
                "event_id": row.id,
                "title": row.title,
                "total_capacity": row.total_capacity,
                "consumed_capacity": row.consumed_capacity,
                "approved": int(row.approved),
                "pending": int(row.pending),
                "remaining": row.total_capacity - row.consumed_capacity,
                "consistent": row.consumed_capacity == int(row.approved)
                              and row.consumed_capacity <= row.total_capacity,
            })
        return out


capacity_ledger = CapacityLedger()
