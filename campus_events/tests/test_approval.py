"""
Approval workflow: status flip + capacity reservation as one unit.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest
from sqlalchemy import select, update

from campus_events.core.errors import (
    AlreadyTerminal,
    EventFull,
    InvariantViolation,
    PermissionDenied,
    RegistrationClosed,
    RegistrationNotFound,
)
from campus_events.crud.ledger import capacity_ledger
from campus_events.models.audit import AuditLog
from campus_events.models.event import Event
from campus_events.models.registration import Registration, RegistrationStatus
from campus_events.schemas.registration import Registration as RegistrationOut
from campus_events.services import approval


def _status(db, registration_id: int) -> RegistrationStatus:
    return db.scalar(select(Registration.status).where(Registration.id == registration_id))


class TestApprove:
    def test_approve_reserves_one_unit(self, db_session, make_event, make_registration, admin):
        event = make_event(total_capacity=2)
        reg = make_registration(event)
        now = datetime(2026, 2, 14, 9, 30, tzinfo=timezone.utc)

        out = approval.approve(db_session, reg.id, admin, now=now)

        assert out.status == RegistrationStatus.approved
        # read back through the response model, which restores UTC
        assert RegistrationOut.model_validate(out).approved_at == now
        assert capacity_ledger.consumed(db_session, event.id) == 1
        capacity_ledger.verify(db_session, event.id)

    def test_approve_writes_audit_row(self, db_session, make_event, make_registration, admin):
        reg = make_registration(make_event())

        approval.approve(db_session, reg.id, admin)

        row = db_session.scalar(select(AuditLog).where(AuditLog.entity == "registration"))
        assert row.action == "approve"
        assert row.actor == admin.sub
        assert row.entity_id == reg.id

    def test_capacity_one_second_approval_is_refused(self, db_session, make_event, make_registration, admin):
        event = make_event(total_capacity=1)
        first = make_registration(event)
        second = make_registration(event)

        approval.approve(db_session, first.id, admin)
        with pytest.raises(EventFull):
            approval.approve(db_session, second.id, admin)

        # the failed approval left nothing behind
        assert _status(db_session, second.id) == RegistrationStatus.pending
        assert capacity_ledger.consumed(db_session, event.id) == 1
        assert db_session.query(AuditLog).filter_by(entity_id=second.id).count() == 0

    def test_second_approval_of_same_registration(self, db_session, make_event, make_registration, admin):
        event = make_event(total_capacity=5)
        reg = make_registration(event)

        approval.approve(db_session, reg.id, admin)
        with pytest.raises(AlreadyTerminal):
            approval.approve(db_session, reg.id, admin)

        assert capacity_ledger.consumed(db_session, event.id) == 1

    def test_approving_a_rejected_registration(self, db_session, make_event, make_registration, admin):
        event = make_event()
        reg = make_registration(event, status=RegistrationStatus.rejected)

        with pytest.raises(AlreadyTerminal):
            approval.approve(db_session, reg.id, admin)
        assert capacity_ledger.consumed(db_session, event.id) == 0

    def test_closed_event_refuses_approval(self, db_session, make_event, make_registration, admin):
        event = make_event(total_capacity=5)
        reg = make_registration(event)
        db_session.execute(update(Event).where(Event.id == event.id).values(registration_closed=True))
        db_session.commit()

        with pytest.raises(RegistrationClosed):
            approval.approve(db_session, reg.id, admin)
        assert _status(db_session, reg.id) == RegistrationStatus.pending

    def test_ledger_drift_aborts_and_rolls_back(self, db_session, make_event, make_registration, admin):
        event = make_event(total_capacity=5, consumed_capacity=2)
        reg = make_registration(event)

        with pytest.raises(InvariantViolation):
            approval.approve(db_session, reg.id, admin)

        assert _status(db_session, reg.id) == RegistrationStatus.pending
        assert capacity_ledger.consumed(db_session, event.id) == 2

    def test_unknown_registration(self, db_session, admin):
        with pytest.raises(RegistrationNotFound):
            approval.approve(db_session, 4040, admin)

    def test_student_cannot_approve(self, db_session, make_event, make_registration, student):
        reg = make_registration(make_event())
        with pytest.raises(PermissionDenied):
            approval.approve(db_session, reg.id, student)
        assert _status(db_session, reg.id) == RegistrationStatus.pending


class TestReject:
    def test_reject_leaves_capacity_alone(self, db_session, make_event, make_registration, admin):
        event = make_event(total_capacity=1)
        reg = make_registration(event)

        out = approval.reject(db_session, reg.id, admin)

        assert out.status == RegistrationStatus.rejected
        assert capacity_ledger.consumed(db_session, event.id) == 0

    def test_reject_works_on_full_event(self, db_session, make_event, make_registration, admin):
        event = make_event(total_capacity=1)
        approval.approve(db_session, make_registration(event).id, admin)
        waiting = make_registration(event)

        assert approval.reject(db_session, waiting.id, admin).status == RegistrationStatus.rejected

    def test_reject_approved_is_refused(self, db_session, make_event, make_registration, admin):
        event = make_event()
        reg = make_registration(event)
        approval.approve(db_session, reg.id, admin)

        with pytest.raises(AlreadyTerminal):
            approval.reject(db_session, reg.id, admin)
        assert capacity_ledger.consumed(db_session, event.id) == 1

    def test_student_cannot_reject(self, db_session, make_event, make_registration, student):
        reg = make_registration(make_event())
        with pytest.raises(PermissionDenied):
            approval.reject(db_session, reg.id, student)


class TestConcurrentApprovals:
    def _approve_all(self, session_factory, admin, registration_ids):
        def attempt(registration_id):
            db = session_factory()
            try:
                approval.approve(db, registration_id, admin)
                return "approved"
            except EventFull:
                return "full"
            finally:
                db.close()

        with ThreadPoolExecutor(max_workers=len(registration_ids)) as pool:
            return list(pool.map(attempt, registration_ids))

    def test_last_slot_goes_to_exactly_one(self, db_session, session_factory, make_event, make_registration, admin):
        event = make_event(total_capacity=1)
        ids = [make_registration(event).id for _ in range(10)]

        results = self._approve_all(session_factory, admin, ids)

        assert results.count("approved") == 1
        assert results.count("full") == 9
        db_session.expire_all()
        assert capacity_ledger.consumed(db_session, event.id) == 1
        assert capacity_ledger.approved_count(db_session, event.id) == 1
        pending = db_session.query(Registration).filter_by(event_id=event.id, status=RegistrationStatus.pending)
        assert pending.count() == 9

    def test_concurrent_approvals_fill_exactly_to_capacity(
        self, db_session, session_factory, make_event, make_registration, admin
    ):
        event = make_event(total_capacity=3)
        ids = [make_registration(event).id for _ in range(8)]

        results = self._approve_all(session_factory, admin, ids)

        assert results.count("approved") == 3
        db_session.expire_all()
        capacity_ledger.verify(db_session, event.id)
        assert capacity_ledger.consumed(db_session, event.id) == 3

    def test_same_registration_approved_concurrently(
        self, db_session, session_factory, make_event, make_registration, admin
    ):
        event = make_event(total_capacity=5)
        reg = make_registration(event)

        def attempt(_):
            db = session_factory()
            try:
                approval.approve(db, reg.id, admin)
                return "approved"
            except AlreadyTerminal:
                return "terminal"
            finally:
                db.close()

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(attempt, range(6)))

        assert results.count("approved") == 1
        assert results.count("terminal") == 5
        db_session.expire_all()
        assert capacity_ledger.consumed(db_session, event.id) == 1
