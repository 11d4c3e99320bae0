"""
Admission: participant request -> pending registration, capacity untouched.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest

from campus_events.core.errors import DuplicateActive, EventFull, EventNotFound, RegistrationClosed
from campus_events.crud.ledger import capacity_ledger
from campus_events.models.registration import Registration, RegistrationStatus
from campus_events.schemas.registration import Participant
from campus_events.services import admission


def _participant(email: str = "asha@college.edu") -> Participant:
    return Participant(name="Asha Rao", email=email, institution="City College", department="CSE", year="3")


class TestSubmit:
    def test_creates_pending_without_consuming_capacity(self, db_session, make_event, student):
        event = make_event(total_capacity=2)

        reg = admission.submit(db_session, event.id, _participant(), student)

        assert reg.status == RegistrationStatus.pending
        assert reg.user_ref == student.sub
        assert reg.student_id == "S001"
        assert capacity_ledger.consumed(db_session, event.id) == 0

    def test_pending_does_not_reserve_so_many_may_queue(self, db_session, make_event, student):
        event = make_event(total_capacity=1)

        for i in range(3):
            admission.submit(db_session, event.id, _participant(f"p{i}@college.edu"), student)

        assert db_session.query(Registration).filter_by(event_id=event.id).count() == 3
        assert capacity_ledger.consumed(db_session, event.id) == 0

    def test_unknown_event(self, db_session, student):
        with pytest.raises(EventNotFound):
            admission.submit(db_session, 77, _participant(), student)

    def test_closed_event(self, db_session, make_event, student):
        event = make_event(registration_closed=True)
        with pytest.raises(RegistrationClosed):
            admission.submit(db_session, event.id, _participant(), student)

    def test_full_event_fast_path(self, db_session, make_event, student):
        event = make_event(total_capacity=1, consumed_capacity=1)
        with pytest.raises(EventFull):
            admission.submit(db_session, event.id, _participant(), student)

    def test_duplicate_submission(self, db_session, make_event, student):
        event = make_event()
        admission.submit(db_session, event.id, _participant("Asha@College.edu"), student)

        with pytest.raises(DuplicateActive):
            admission.submit(db_session, event.id, _participant("asha@college.edu "), student)

    def test_student_id_is_a_snapshot(self, db_session, make_event, student):
        event = make_event()
        reg = admission.submit(db_session, event.id, _participant(), student)

        student.student_id = "S999"

        db_session.refresh(reg)
        assert reg.student_id == "S001"


class TestConcurrentSubmit:
    def test_same_email_racing_creates_one_registration(self, session_factory, make_event, student):
        event = make_event(total_capacity=50)

        def attempt(_):
            db = session_factory()
            try:
                admission.submit(db, event.id, _participant(), student)
                return "created"
            except DuplicateActive:
                return "duplicate"
            finally:
                db.close()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(8)))

        assert results.count("created") == 1
        assert results.count("duplicate") == 7
