"""
Capacity ledger: conditional reserve/release, capacity edits, reconcile.
"""
import pytest
from sqlalchemy import update

from campus_events.core.errors import (
    BelowConsumed,
    EventFull,
    EventNotFound,
    InvariantViolation,
    RegistrationClosed,
)
from campus_events.crud.ledger import capacity_ledger
from campus_events.models.event import Event
from campus_events.models.registration import RegistrationStatus


def _force_consumed(db, event_id: int, value: int) -> None:
    db.execute(update(Event).where(Event.id == event_id).values(consumed_capacity=value))
    db.commit()


class TestReserve:
    def test_reserve_increments_consumed(self, db_session, make_event):
        event = make_event(total_capacity=2)

        capacity_ledger.reserve(db_session, event.id)
        db_session.commit()

        assert capacity_ledger.consumed(db_session, event.id) == 1

    def test_reserve_refuses_when_full(self, db_session, make_event):
        event = make_event(total_capacity=1, consumed_capacity=1)

        with pytest.raises(EventFull) as exc:
            capacity_ledger.reserve(db_session, event.id)

        assert exc.value.details["total"] == 1
        assert capacity_ledger.consumed(db_session, event.id) == 1

    def test_reserve_refuses_when_registration_closed(self, db_session, make_event):
        event = make_event(total_capacity=5, registration_closed=True)

        with pytest.raises(RegistrationClosed):
            capacity_ledger.reserve(db_session, event.id)
        assert capacity_ledger.consumed(db_session, event.id) == 0

    def test_reserve_unknown_event(self, db_session):
        with pytest.raises(EventNotFound):
            capacity_ledger.reserve(db_session, 999)

    def test_reserve_never_exceeds_total(self, db_session, make_event):
        event = make_event(total_capacity=3)
        outcomes = []
        for _ in range(5):
            try:
                capacity_ledger.reserve(db_session, event.id)
                db_session.commit()
                outcomes.append("ok")
            except EventFull:
                db_session.rollback()
                outcomes.append("full")

        assert outcomes == ["ok", "ok", "ok", "full", "full"]
        assert capacity_ledger.consumed(db_session, event.id) == 3


class TestRelease:
    def test_release_decrements(self, db_session, make_event):
        event = make_event(total_capacity=3, consumed_capacity=2)

        capacity_ledger.release(db_session, event.id)
        db_session.commit()

        assert capacity_ledger.consumed(db_session, event.id) == 1

    def test_release_below_zero_is_an_invariant_violation(self, db_session, make_event):
        event = make_event(total_capacity=3, consumed_capacity=0)

        with pytest.raises(InvariantViolation):
            capacity_ledger.release(db_session, event.id)
        assert capacity_ledger.consumed(db_session, event.id) == 0

    def test_release_rejects_non_positive_units(self, db_session, make_event):
        event = make_event()
        with pytest.raises(ValueError):
            capacity_ledger.release(db_session, event.id, units=0)


class TestEditCapacity:
    def test_raise_and_lower_total(self, db_session, make_event):
        event = make_event(total_capacity=5, consumed_capacity=3)

        capacity_ledger.edit_capacity(db_session, event.id, 8)
        db_session.commit()
        assert capacity_ledger.load(db_session, event.id).total_capacity == 8

        capacity_ledger.edit_capacity(db_session, event.id, 3)
        db_session.commit()
        assert capacity_ledger.load(db_session, event.id).total_capacity == 3

    def test_below_consumed_is_refused(self, db_session, make_event):
        event = make_event(total_capacity=5, consumed_capacity=3)

        with pytest.raises(BelowConsumed) as exc:
            capacity_ledger.edit_capacity(db_session, event.id, 2)
        db_session.rollback()

        assert exc.value.status_code == 409
        assert exc.value.details == {"event_id": event.id, "requested": 2, "consumed": 3}
        assert capacity_ledger.load(db_session, event.id).total_capacity == 5

    def test_zero_capacity_is_invalid(self, db_session, make_event):
        event = make_event()
        with pytest.raises(ValueError):
            capacity_ledger.edit_capacity(db_session, event.id, 0)

    def test_unknown_event(self, db_session):
        with pytest.raises(EventNotFound):
            capacity_ledger.edit_capacity(db_session, 404, 10)


class TestVerifyAndReconcile:
    def test_verify_passes_when_consistent(self, db_session, make_event, make_registration):
        event = make_event(total_capacity=3, consumed_capacity=1)
        make_registration(event, status=RegistrationStatus.approved)
        make_registration(event, status=RegistrationStatus.pending)

        capacity_ledger.verify(db_session, event.id)

    def test_verify_detects_drift(self, db_session, make_event, make_registration):
        event = make_event(total_capacity=3, consumed_capacity=2)
        make_registration(event, status=RegistrationStatus.approved)

        with pytest.raises(InvariantViolation) as exc:
            capacity_ledger.verify(db_session, event.id)
        assert exc.value.details == {"event_id": event.id, "consumed": 2, "approved": 1}

    def test_reconcile_releases_surplus(self, db_session, make_event, make_registration):
        event = make_event(total_capacity=5)
        make_registration(event, status=RegistrationStatus.approved)
        _force_consumed(db_session, event.id, 3)

        result = capacity_ledger.reconcile(db_session, event.id)
        db_session.commit()

        assert result == {"event_id": event.id, "consumed_before": 3, "consumed_after": 1}
        capacity_ledger.verify(db_session, event.id)

    def test_reconcile_raises_lagging_counter(self, db_session, make_event, make_registration):
        event = make_event(total_capacity=5)
        make_registration(event, status=RegistrationStatus.approved)
        make_registration(event, status=RegistrationStatus.approved)

        result = capacity_ledger.reconcile(db_session, event.id)
        db_session.commit()

        assert result["consumed_after"] == 2
        assert capacity_ledger.consumed(db_session, event.id) == 2

    def test_reconcile_is_noop_when_consistent(self, db_session, make_event):
        event = make_event(total_capacity=5)
        result = capacity_ledger.reconcile(db_session, event.id)
        assert result["consumed_before"] == result["consumed_after"] == 0

    def test_reconcile_refuses_when_approved_exceed_total(self, db_session, make_event, make_registration):
        event = make_event(total_capacity=1, consumed_capacity=1)
        make_registration(event, status=RegistrationStatus.approved)
        make_registration(event, status=RegistrationStatus.approved)

        with pytest.raises(InvariantViolation):
            capacity_ledger.reconcile(db_session, event.id)
        assert capacity_ledger.consumed(db_session, event.id) == 1


class TestReport:
    def test_report_rows(self, db_session, make_event, make_registration):
        ok = make_event(title="Consistent", total_capacity=4, consumed_capacity=1)
        make_registration(ok, status=RegistrationStatus.approved)
        make_registration(ok, status=RegistrationStatus.pending)
        make_registration(ok, status=RegistrationStatus.rejected)
        drift = make_event(title="Drifted", total_capacity=4, consumed_capacity=2)
        empty = make_event(title="Empty", total_capacity=2)

        rows = {r["event_id"]: r for r in capacity_ledger.report(db_session)}

        assert rows[ok.id] == {
            "event_id": ok.id,
            "title": "Consistent",
            "total_capacity": 4,
            "consumed_capacity": 1,
            "approved": 1,
            "pending": 1,
            "remaining": 3,
            "consistent": True,
        }
        assert rows[drift.id]["consistent"] is False
        assert rows[empty.id]["approved"] == 0
        assert rows[empty.id]["consistent"] is True
