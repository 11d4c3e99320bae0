"""Admission: turning a participant's request into a pending registration.

Admission never touches capacity. The ``consumed >= total`` check below is
a fast-path refusal only; the authoritative check happens when an admin
approves and the ledger reserves a unit.
"""
import structlog
from sqlalchemy.orm import Session

from campus_events.core.errors import DomainError, EventFull, EventNotFound, RegistrationClosed
from campus_events.crud.registration import registration_store
from campus_events.models.event import Event
from campus_events.models.registration import Registration
from campus_events.schemas.actor import Actor
from campus_events.schemas.registration import Participant

logger = structlog.get_logger(__name__)


def submit(db: Session, event_id: int, participant: Participant, actor: Actor) -> Registration:
    event = db.get(Event, event_id, populate_existing=True)
    try:
        if event is None:
            raise EventNotFound(event_id=event_id)
        if event.registration_closed:
            raise RegistrationClosed(event_id=event_id)
        if event.consumed_capacity >= event.total_capacity:
            raise EventFull(event_id=event_id, total=event.total_capacity, consumed=event.consumed_capacity)

        registration = Registration(
            event_id=event_id,
            user_ref=actor.sub,
            # snapshot: later reassignment of the id must not rewrite history
            student_id=actor.student_id,
            name=participant.name,
            email=str(participant.email).strip(),
            institution=participant.institution,
            department=participant.department,
            year=participant.year,
        )
        registration_store.create_pending(db, registration)
        db.commit()
    except DomainError as exc:
        logger.warning("registration.refused", event_id=event_id, actor=actor.sub, code=exc.code)
        raise

    db.refresh(registration)
    logger.info(
        "registration.submitted",
        registration_id=registration.id, event_id=event_id, actor=actor.sub,
    )
    return registration
