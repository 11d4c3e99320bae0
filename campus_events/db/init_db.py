# campus_events/db/init_db.py
from datetime import datetime, timezone

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from campus_events.models.event import Event, EventCategory, EventScope

logger = structlog.get_logger(__name__)

DEMO_EVENTS = [
    {
        "title": "Code Sprint 2026",
        "description": "A 24-hour hackathon to build solutions for real-world problems.",
        "event_date": datetime(2026, 3, 15, 9, 0, tzinfo=timezone.utc),
        "category": EventCategory.hackathon,
        "scope": EventScope.own_institution,
        "venue": "Main Auditorium",
        "total_capacity": 100,
    },
    {
        "title": "Inter-College Chess Open",
        "description": "Rapid chess tournament open to every college in the district.",
        "event_date": datetime(2026, 4, 2, 10, 0, tzinfo=timezone.utc),
        "category": EventCategory.game,
        "scope": EventScope.other_institution,
        "venue": "Sports Complex",
        "total_capacity": 64,
    },
    {
        "title": "Annual Cultural Fest",
        "description": "Music, dance and drama performances by student clubs.",
        "event_date": datetime(2026, 2, 20, 17, 0, tzinfo=timezone.utc),
        "category": EventCategory.celebration,
        "scope": EventScope.own_institution,
        "venue": "Open Air Theatre",
        "total_capacity": 500,
    },
]

def init_db(db: Session) -> None:
    """Seed demo events into an empty database. Never touches existing rows."""
    if db.scalar(select(func.count(Event.id))):
        return
    for data in DEMO_EVENTS:
        db.add(Event(consumed_capacity=0, **data))
    db.commit()
    logger.info("db.seeded", events=len(DEMO_EVENTS))
