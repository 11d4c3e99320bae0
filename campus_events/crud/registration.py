from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_events.core.errors import AlreadyTerminal, DuplicateActive, RegistrationNotFound, is_unique_violation
from campus_events.crud.base import CRUDBase
from campus_events.models.registration import (
    Registration,
    RegistrationStatus,
    TERMINAL_STATUSES,
    normalize_email,
)

logger = structlog.get_logger(__name__)


class CRUDRegistration(CRUDBase[Registration, None, None]):
    def create_pending(self, db: Session, registration: Registration) -> Registration:
        """Insert a pending registration.

        Uniqueness of (event, normalized email) among pending/approved rows is
        enforced by the partial unique index, so the check and the insert are
        one statement. On conflict the session is rolled back.
        """
        registration.email_normalized = normalize_email(registration.email)
        registration.status = RegistrationStatus.pending
        registration.approved_at = None
        db.add(registration)
        try:
            db.flush()
        except IntegrityError as exc:
            db.rollback()
            if not is_unique_violation(exc):
                raise
            raise DuplicateActive(event_id=registration.event_id, email=registration.email_normalized) from exc
        return registration

    def transition(
        self, db: Session, registration_id: int, target: RegistrationStatus, *, at: Optional[datetime] = None
    ) -> Registration:
        """pending -> approved | rejected, as a single conditional update. Does not commit."""
        if target not in TERMINAL_STATUSES:
            raise ValueError(f"Not a terminal status: {target}")

        values = {"status": target}
        if target == RegistrationStatus.approved:
            values["approved_at"] = at or datetime.now(timezone.utc)

        res = db.execute(
            update(Registration)
            .where(Registration.id == registration_id, Registration.status == RegistrationStatus.pending)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        reg = db.get(Registration, registration_id, populate_existing=True)
        if res.rowcount != 1:
            if reg is None:
                raise RegistrationNotFound(registration_id=registration_id)
            raise AlreadyTerminal(registration_id=registration_id, status=reg.status.value)
        return reg

    def find_by_event(
        self, db: Session, event_id: int, status: Optional[RegistrationStatus] = None
    ) -> List[Registration]:
        return self.search(db, event_id=event_id, status=status)

    def find_by_participant(
        self, db: Session, *, email: Optional[str] = None, user_ref: Optional[str] = None
    ) -> List[Registration]:
        clauses = []
        if email:
            clauses.append(Registration.email_normalized == normalize_email(email))
        if user_ref:
            clauses.append(Registration.user_ref == user_ref)
        if not clauses:
            return []
        stmt = (
            select(Registration)
            .where(or_(*clauses))
            .order_by(Registration.created_at.desc(), Registration.id.desc())
        )
        return list(db.scalars(stmt))

    def search(
        self,
        db: Session,
        *,
        event_id: Optional[int] = None,
        status: Optional[RegistrationStatus] = None,
    ) -> List[Registration]:
        stmt = select(Registration)
        if event_id is not None:
            stmt = stmt.where(Registration.event_id == event_id)
        if status is not None:
            stmt = stmt.where(Registration.status == status)
        stmt = stmt.order_by(Registration.created_at.desc(), Registration.id.desc())
        return list(db.scalars(stmt))

    def exists_for_event(self, db: Session, event_id: int) -> bool:
        return db.scalar(select(Registration.id).where(Registration.event_id == event_id).limit(1)) is not None


registration_store = CRUDRegistration(Registration)
