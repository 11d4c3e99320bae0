"""Event administration (create, update, delete)."""
import structlog
from sqlalchemy.orm import Session

from campus_events.core.errors import DomainError, EventHasRegistrations, EventNotFound, DuplicateEventTitle
from campus_events.core.rbac import ensure_admin
from campus_events.crud import audit
from campus_events.crud.event import event_crud
from campus_events.crud.ledger import capacity_ledger
from campus_events.crud.registration import registration_store
from campus_events.models.event import Event
from campus_events.schemas.actor import Actor
from campus_events.schemas.event import EventCreate, EventUpdate

logger = structlog.get_logger(__name__)


def create_event(db: Session, body: EventCreate, actor: Actor) -> Event:
    ensure_admin(actor)
    try:
        event = event_crud.create_unique(db, body)
        audit.record(
            db, actor=actor.sub, entity="event", entity_id=event.id, action="create",
            diff={"title": event.title, "total_capacity": event.total_capacity},
        )
        db.commit()
    except DomainError as exc:
        db.rollback()
        logger.warning("event.create_refused", title=body.title, code=exc.code)
        raise
    db.refresh(event)
    logger.info("event.created", event_id=event.id, title=event.title, actor=actor.sub)
    return event


def update_event(db: Session, event_id: int, body: EventUpdate, actor: Actor) -> Event:
    """Apply the sent fields. Capacity changes go through the ledger."""
    ensure_admin(actor)
    data = body.model_dump(exclude_unset=True)
    new_total = data.pop("total_capacity", None)
    try:
        event = event_crud.get(db, event_id)
        if event is None:
            raise EventNotFound(event_id=event_id)
        if "title" in data and data["title"] != event.title:
            other = event_crud.get_by_title(db, data["title"])
            if other is not None and other.id != event.id:
                raise DuplicateEventTitle(title=data["title"])

        diff = {k: [getattr(event, k), v] for k, v in data.items() if getattr(event, k) != v}
        if data:
            event_crud.update(db, event, data, commit=False)
        if new_total is not None and new_total != event.total_capacity:
            before = event.total_capacity
            capacity_ledger.edit_capacity(db, event_id, new_total)
            diff["total_capacity"] = [before, new_total]
        if diff:
            audit.record(db, actor=actor.sub, entity="event", entity_id=event_id, action="update",
                         diff={k: [str(a), str(b)] for k, (a, b) in diff.items()})
        db.commit()
    except DomainError as exc:
        db.rollback()
        logger.warning("event.update_refused", event_id=event_id, code=exc.code)
        raise

    event = db.get(Event, event_id, populate_existing=True)
    logger.info("event.updated", event_id=event_id, fields=sorted(diff), actor=actor.sub)
    return event


def delete_event(db: Session, event_id: int, actor: Actor) -> None:
    """Registrations are an audit trail and are never deleted, so neither is their event."""
    ensure_admin(actor)
    event = event_crud.get(db, event_id)
    if event is None:
        raise EventNotFound(event_id=event_id)
    if registration_store.exists_for_event(db, event_id):
        raise EventHasRegistrations(event_id=event_id)
    audit.record(db, actor=actor.sub, entity="event", entity_id=event_id, action="delete",
                 diff={"title": event.title})
    event_crud.remove(db, event_id)
    logger.info("event.deleted", event_id=event_id, actor=actor.sub)
