import os

# must be set before campus_events.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["AUTO_MIGRATE"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from campus_events.core.rbac import ROLE_ADMIN, ROLE_STUDENT
from campus_events.core.tokens import create_access_token
from campus_events.db.base import Base
from campus_events.db.session import get_db, make_engine
from campus_events.main import api
from campus_events.models.event import Event, EventCategory, EventScope
from campus_events.models.registration import Registration, RegistrationStatus, normalize_email
from campus_events.schemas.actor import Actor


@pytest.fixture
def engine(tmp_path):
    """A file-backed SQLite database per test, so worker threads get their own connections."""
    eng = make_engine(f"sqlite:///{tmp_path / 'events.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Session:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    api.dependency_overrides[get_db] = override_get_db
    yield TestClient(api)
    api.dependency_overrides.clear()


@pytest.fixture
def admin() -> Actor:
    return Actor(sub="admin-1", email="admin@college.edu", role=ROLE_ADMIN)


@pytest.fixture
def student() -> Actor:
    return Actor(sub="stu-1", email="asha@college.edu", role=ROLE_STUDENT, student_id="S001")


@pytest.fixture
def other_student() -> Actor:
    return Actor(sub="stu-2", email="ravi@college.edu", role=ROLE_STUDENT, student_id="S002")


@pytest.fixture
def headers_for():
    def _headers(actor: Actor) -> dict[str, str]:
        token = create_access_token(sub=actor.sub, email=actor.email, role=actor.role, student_id=actor.student_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_headers(admin, headers_for) -> dict[str, str]:
    return headers_for(admin)


@pytest.fixture
def student_headers(student, headers_for) -> dict[str, str]:
    return headers_for(student)


@pytest.fixture
def make_event(db_session):
    counter = {"n": 0}

    def _make(**overrides) -> Event:
        counter["n"] += 1
        data = {
            "title": f"Event {counter['n']}",
            "event_date": datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc),
            "category": EventCategory.hackathon,
            "scope": EventScope.own_institution,
            "total_capacity": 10,
            "consumed_capacity": 0,
        }
        data.update(overrides)
        event = Event(**data)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make


@pytest.fixture
def make_registration(db_session):
    """Insert a registration row directly, bypassing admission."""
    counter = {"n": 0}

    def _make(event: Event, **overrides) -> Registration:
        counter["n"] += 1
        data = {
            "event_id": event.id,
            "name": f"Participant {counter['n']}",
            "email": f"participant{counter['n']}@college.edu",
            "institution": "City College",
            "department": "CSE",
            "year": "2",
            "status": RegistrationStatus.pending,
        }
        data.update(overrides)
        data.setdefault("email_normalized", normalize_email(data["email"]))
        reg = Registration(**data)
        db_session.add(reg)
        db_session.commit()
        db_session.refresh(reg)
        return reg

    return _make
