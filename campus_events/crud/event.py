from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_events.core.errors import DuplicateEventTitle
from campus_events.crud.base import CRUDBase
from campus_events.models.event import Event, EventCategory, EventScope
from campus_events.schemas.event import EventCreate, EventUpdate

class CRUDEvent(CRUDBase[Event, EventCreate, EventUpdate]):
    def get_by_title(self, db: Session, title: str) -> Optional[Event]:
        return db.scalar(select(Event).where(Event.title == title.strip()))

    def create_unique(self, db: Session, obj_in: EventCreate) -> Event:
        """Consumed capacity always starts at zero; titles are unique."""
        if self.get_by_title(db, obj_in.title):
            raise DuplicateEventTitle(title=obj_in.title)
        try:
            return self.create(db, obj_in, extra={"consumed_capacity": 0}, commit=False)
        except IntegrityError as exc:
            db.rollback()
            raise DuplicateEventTitle(title=obj_in.title) from exc

    def list_filtered(
        self,
        db: Session,
        *,
        category: Optional[EventCategory] = None,
        scope: Optional[EventScope] = None,
        include_hidden: bool = False,
    ) -> List[Event]:
        stmt = select(Event)
        if category is not None:
            stmt = stmt.where(Event.category == category)
        if scope is not None:
            stmt = stmt.where(Event.scope == scope)
        if not include_hidden:
            stmt = stmt.where(Event.visible.is_(True))
        return list(db.scalars(stmt.order_by(Event.event_date, Event.id)))

event_crud = CRUDEvent(Event)
