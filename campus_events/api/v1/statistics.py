from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from campus_events.api.deps import get_db
from campus_events.core.config import settings
from campus_events.core.rbac import require_roles, ROLE_ADMIN
from campus_events.schemas.statistics import (
    CategoryDistribution,
    EventRegistrations,
    MonthlyGrowth,
    Summary,
)
from campus_events.services import aggregation

router = APIRouter(dependencies=[Depends(require_roles(ROLE_ADMIN))])

@router.get("/", response_model=Summary)
def summary(db: Session = Depends(get_db)):
    return aggregation.summary(db)

@router.get("/event-registrations", response_model=EventRegistrations)
def event_registrations(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    return {"data": aggregation.per_event_counts(db, limit=limit or settings.TOP_EVENTS_LIMIT)}

@router.get("/category-distribution", response_model=CategoryDistribution)
def category_distribution(db: Session = Depends(get_db)):
    return {"data": aggregation.category_distribution(db)}

@router.get("/monthly-growth", response_model=MonthlyGrowth)
def monthly_growth(db: Session = Depends(get_db)):
    return {"data": aggregation.monthly_growth(db)}
