from typing import List, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from campus_events.api.deps import get_db, get_optional_actor
from campus_events.core.rbac import require_roles, ROLE_ADMIN
from campus_events.crud.event import event_crud
from campus_events.models.event import EventCategory, EventScope
from campus_events.schemas.actor import Actor
from campus_events.schemas.event import (
    CapacityEdit,
    Event,
    EventCreate,
    EventUpdate,
    LedgerRow,
    ReconcileResult,
)
from campus_events.services import capacity, events as event_service

router = APIRouter()

@router.get("/", response_model=List[Event])
def list_events(
    category: Optional[EventCategory] = Query(None),
    scope: Optional[EventScope] = Query(None),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    # hidden events are only listed for admins
    include_hidden = actor is not None and actor.is_admin
    return event_crud.list_filtered(db, category=category, scope=scope, include_hidden=include_hidden)

@router.get("/ledger", response_model=List[LedgerRow])
def ledger_report(db: Session = Depends(get_db), _: Actor = Depends(require_roles(ROLE_ADMIN))):
    return capacity.ledger_report(db)

@router.get("/{event_id}", response_model=Event)
def get_event(event_id: int, db: Session = Depends(get_db)):
    e = event_crud.get(db, event_id)
    if not e:
        raise HTTPException(status_code=404, detail="Event not found")
    return e

@router.post("/", response_model=Event, status_code=status.HTTP_201_CREATED)
def create_event(
    body: EventCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    return event_service.create_event(db, body, actor)

@router.put("/{event_id}", response_model=Event)
def update_event(
    event_id: int,
    body: EventUpdate = Body(...),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    if not body.model_dump(exclude_unset=True):
        raise HTTPException(status_code=400, detail="No valid fields to update")
    return event_service.update_event(db, event_id, body, actor)

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    event_service.delete_event(db, event_id, actor)
    return None  # 204

@router.put("/{event_id}/capacity", response_model=Event)
def edit_capacity(
    event_id: int,
    body: CapacityEdit,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    return capacity.edit_capacity(db, event_id, body.total_capacity, actor)

@router.post("/{event_id}/ledger/reconcile", response_model=ReconcileResult)
def reconcile_ledger(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    return capacity.reconcile(db, event_id, actor)
