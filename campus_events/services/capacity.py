"""Administrative operations on the capacity ledger."""
from typing import Any, Dict, List

import structlog
from sqlalchemy.orm import Session

from campus_events.core.errors import DomainError
from campus_events.core.rbac import ensure_admin
from campus_events.crud import audit
from campus_events.crud.ledger import capacity_ledger
from campus_events.models.event import Event
from campus_events.schemas.actor import Actor

logger = structlog.get_logger(__name__)


def edit_capacity(db: Session, event_id: int, new_total: int, actor: Actor) -> Event:
    """Change an event's total capacity; refused if it would drop below what is consumed."""
    ensure_admin(actor)
    try:
        before = capacity_ledger.load(db, event_id).total_capacity
        capacity_ledger.edit_capacity(db, event_id, new_total)
        audit.record(
            db, actor=actor.sub, entity="event", entity_id=event_id, action="edit_capacity",
            diff={"total_capacity": [before, new_total]},
        )
        db.commit()
    except DomainError as exc:
        db.rollback()
        logger.warning("ledger.edit_refused", event_id=event_id, requested=new_total, code=exc.code)
        raise

    event = db.get(Event, event_id, populate_existing=True)
    logger.info("ledger.capacity_edited", event_id=event_id, total=[before, new_total], actor=actor.sub)
    return event


def reconcile(db: Session, event_id: int, actor: Actor) -> Dict[str, int]:
    ensure_admin(actor)
    try:
        result = capacity_ledger.reconcile(db, event_id)
        if result["consumed_before"] != result["consumed_after"]:
            audit.record(
                db, actor=actor.sub, entity="event", entity_id=event_id, action="reconcile",
                diff={"consumed_capacity": [result["consumed_before"], result["consumed_after"]]},
            )
        db.commit()
    except DomainError:
        db.rollback()
        raise

    logger.info("ledger.reconciled", actor=actor.sub, **result)
    return result


def ledger_report(db: Session) -> List[Dict[str, Any]]:
    return capacity_ledger.report(db)
