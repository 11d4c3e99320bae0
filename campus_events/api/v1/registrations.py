# campus_events/api/v1/registrations.py
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from campus_events.api.deps import get_db, get_current_actor
from campus_events.core.errors import RegistrationNotFound
from campus_events.core.rbac import require_roles, ensure_admin_or_owner, ROLE_ADMIN
from campus_events.crud.registration import registration_store
from campus_events.models.registration import Registration as RegistrationModel, RegistrationStatus
from campus_events.schemas.actor import Actor
from campus_events.schemas.registration import (
    Participant,
    Registration,
    RegistrationCreate,
    RegistrationWithEvent,
    StatusMap,
)
from campus_events.services import admission, approval

router = APIRouter()

def _with_event(reg: RegistrationModel) -> RegistrationWithEvent:
    data = Registration.model_validate(reg).model_dump()
    if reg.event is not None:
        data.update(
            event_title=reg.event.title,
            event_date=reg.event.event_date,
            category=reg.event.category.value,
        )
    return RegistrationWithEvent(**data)

@router.post("/", response_model=Registration, status_code=status.HTTP_201_CREATED)
def submit_registration(
    body: RegistrationCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    participant = Participant(**body.model_dump(exclude={"event_id"}))
    return admission.submit(db, body.event_id, participant, actor)

@router.get("/", response_model=List[RegistrationWithEvent])
def list_registrations(
    event_id: Optional[int] = Query(None),
    status: Optional[RegistrationStatus] = Query(None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    if actor.is_admin:
        rows = registration_store.search(db, event_id=event_id, status=status)
    else:
        # students only ever see their own registrations
        rows = registration_store.find_by_participant(db, email=actor.email, user_ref=actor.sub)
        if event_id is not None:
            rows = [r for r in rows if r.event_id == event_id]
        if status is not None:
            rows = [r for r in rows if r.status == status]
    return [_with_event(r) for r in rows]

@router.get("/pending", response_model=List[RegistrationWithEvent])
def pending_registrations(
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    return [_with_event(r) for r in registration_store.search(db, status=RegistrationStatus.pending)]

@router.get("/my-status", response_model=StatusMap)
def my_status(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    status_map: Dict[int, RegistrationStatus] = {}
    # newest first, so the first row seen per event wins
    for reg in registration_store.find_by_participant(db, email=actor.email, user_ref=actor.sub):
        status_map.setdefault(reg.event_id, reg.status)
    return StatusMap(status_map=status_map)

@router.get("/{registration_id}", response_model=RegistrationWithEvent)
def get_registration(
    registration_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    reg = registration_store.get(db, registration_id)
    if reg is None:
        raise RegistrationNotFound(registration_id=registration_id)
    ensure_admin_or_owner(actor, email=reg.email, user_ref=reg.user_ref)
    return _with_event(reg)

@router.put("/{registration_id}/approve", response_model=Registration)
def approve_registration(
    registration_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    return approval.approve(db, registration_id, actor)

@router.put("/{registration_id}/reject", response_model=Registration)
def reject_registration(
    registration_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(ROLE_ADMIN)),
):
    return approval.reject(db, registration_id, actor)
