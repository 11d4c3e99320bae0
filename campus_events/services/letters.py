"""Read model for approved registrations, consumed by the letter generator."""
from sqlalchemy.orm import Session

from campus_events.core.errors import LetterUnavailable, RegistrationNotFound
from campus_events.core.rbac import ensure_admin_or_owner
from campus_events.models.registration import Registration, RegistrationStatus
from campus_events.schemas.actor import Actor
from campus_events.schemas.letter import ApprovalLetter, LetterEvent, ParticipantSnapshot


def reference_code(registration_id: int) -> str:
    return f"APR-{registration_id:08d}"


def approval_letter(db: Session, registration_id: int, actor: Actor) -> ApprovalLetter:
    reg = db.get(Registration, registration_id)
    if reg is None:
        raise RegistrationNotFound(registration_id=registration_id)
    ensure_admin_or_owner(actor, email=reg.email, user_ref=reg.user_ref)
    if reg.status != RegistrationStatus.approved or reg.approved_at is None:
        raise LetterUnavailable(registration_id=registration_id, status=reg.status.value)

    ev = reg.event
    return ApprovalLetter(
        reference=reference_code(reg.id),
        registration_id=reg.id,
        approved_at=reg.approved_at,
        event=LetterEvent(id=ev.id, title=ev.title, date=ev.event_date, category=ev.category.value),
        participant=ParticipantSnapshot(
            name=reg.name,
            email=reg.email,
            institution=reg.institution,
            department=reg.department,
            year=reg.year,
            student_id=reg.student_id,
        ),
    )
