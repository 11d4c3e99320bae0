"""Approval workflow.

Approving flips the registration to ``approved`` and reserves one unit of
capacity in the same database transaction. The status flip happens first
(a conditional update that only matches ``pending`` rows), then the ledger
reservation, then the ``consumed == count(approved)`` post-condition. Any
failure rolls the whole unit back, so a registration is never approved
without its capacity unit and capacity is never consumed for a registration
that did not end up approved.
"""
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from campus_events.core.errors import DomainError
from campus_events.core.rbac import ensure_admin
from campus_events.crud import audit
from campus_events.crud.ledger import capacity_ledger
from campus_events.crud.registration import registration_store
from campus_events.models.registration import Registration, RegistrationStatus
from campus_events.schemas.actor import Actor

logger = structlog.get_logger(__name__)


def approve(db: Session, registration_id: int, actor: Actor, *, now: Optional[datetime] = None) -> Registration:
    ensure_admin(actor)
    try:
        reg = registration_store.transition(
            db, registration_id, RegistrationStatus.approved, at=now or datetime.now(timezone.utc)
        )
        capacity_ledger.reserve(db, reg.event_id)
        capacity_ledger.verify(db, reg.event_id)
        audit.record(
            db, actor=actor.sub, entity="registration", entity_id=reg.id, action="approve",
            diff={"status": ["pending", "approved"], "event_id": reg.event_id},
        )
        db.commit()
    except DomainError as exc:
        db.rollback()
        logger.warning("registration.approve_failed", registration_id=registration_id, actor=actor.sub, code=exc.code)
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(reg)
    logger.info("registration.approved", registration_id=reg.id, event_id=reg.event_id, actor=actor.sub)
    return reg


def reject(db: Session, registration_id: int, actor: Actor) -> Registration:
    ensure_admin(actor)
    try:
        reg = registration_store.transition(db, registration_id, RegistrationStatus.rejected)
        audit.record(
            db, actor=actor.sub, entity="registration", entity_id=reg.id, action="reject",
            diff={"status": ["pending", "rejected"], "event_id": reg.event_id},
        )
        db.commit()
    except DomainError as exc:
        db.rollback()
        logger.warning("registration.reject_failed", registration_id=registration_id, actor=actor.sub, code=exc.code)
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(reg)
    logger.info("registration.rejected", registration_id=reg.id, event_id=reg.event_id, actor=actor.sub)
    return reg
