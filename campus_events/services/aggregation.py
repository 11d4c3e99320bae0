"""Read-only statistics over committed state.

Each function is a deterministic fold over the events and registrations
tables: same data in, same output out. Nothing here writes.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import case, extract, func, select
from sqlalchemy.orm import Session

from campus_events.core.config import settings
from campus_events.models.event import Event, EventCategory, EventScope
from campus_events.models.registration import Registration, RegistrationStatus

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def per_event_counts(db: Session, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Registrations per event, most registered first; ties broken by event id."""
    registrations = func.count(Registration.id).label("registrations")
    stmt = (
        select(Event.id, Event.title, registrations)
        .join(Registration, Registration.event_id == Event.id)
        .group_by(Event.id, Event.title)
        .order_by(registrations.desc(), Event.id.asc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return [
        {"event_id": row.id, "title": row.title, "registrations": int(row.registrations)}
        for row in db.execute(stmt)
    ]


def summary(db: Session) -> Dict[str, Any]:
    """Headline counts. Registration counts come from one statement so they agree with each other."""
    registrations = db.execute(
        select(
            func.count(Registration.id).label("total"),
            _count_where(Registration.status == RegistrationStatus.pending).label("pending"),
            _count_where(Registration.status == RegistrationStatus.approved).label("approved"),
        )
    ).one()
    events = db.execute(
        select(
            func.count(Event.id).label("total"),
            _count_where(Event.scope == EventScope.own_institution).label("own"),
            _count_where(Event.scope == EventScope.other_institution).label("other"),
        )
    ).one()
    top = per_event_counts(db, limit=1)
    return {
        "total_events": int(events.total),
        "total_registrations": int(registrations.total),
        "pending_count": int(registrations.pending),
        "approved_count": int(registrations.approved),
        "own_institution_events": int(events.own),
        "other_institution_events": int(events.other),
        "most_registered_event": top[0]["title"] if top else "N/A",
    }


def category_distribution(db: Session) -> List[Dict[str, Any]]:
    """Number of events per category; every category is listed, in declaration order."""
    counts = dict(db.execute(select(Event.category, func.count(Event.id)).group_by(Event.category)).all())
    return [{"category": c.value, "count": int(counts.get(c, 0))} for c in EventCategory]


def monthly_growth(db: Session, buckets: Optional[int] = None) -> List[Dict[str, Any]]:
    """Registrations per (year, month) of creation, oldest first, keeping the most recent ``buckets``."""
    buckets = settings.MONTHLY_GROWTH_BUCKETS if buckets is None else buckets
    if buckets <= 0:
        return []
    year = extract("year", Registration.created_at).label("year")
    month = extract("month", Registration.created_at).label("month")
    stmt = (
        select(year, month, func.count(Registration.id).label("registrations"))
        .group_by(year, month)
        .order_by(year.desc(), month.desc())
        .limit(buckets)
    )
    rows = list(db.execute(stmt))
    rows.reverse()
    return [
        {
            "year": int(r.year),
            "month": int(r.month),
            "label": f"{MONTHS[int(r.month) - 1]} {int(r.year)}",
            "registrations": int(r.registrations),
        }
        for r in rows
    ]
