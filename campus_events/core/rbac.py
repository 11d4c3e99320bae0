# campus_events/core/rbac.py
from fastapi import Depends, HTTPException, status
from campus_events.api.deps import get_current_actor
from campus_events.core.errors import PermissionDenied
from campus_events.schemas.actor import Actor

ROLE_ADMIN = "admin"       # approves/rejects, manages events
ROLE_STUDENT = "student"   # submits registrations

def require_roles(*roles: str):
    allowed = set(roles)
    def dep(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return actor
    return dep

def ensure_admin(actor: Actor) -> None:
    """Service-level guard for admin-only operations."""
    if actor is None or actor.role != ROLE_ADMIN:
        raise PermissionDenied(actor=getattr(actor, "sub", None))

def ensure_admin_or_owner(actor: Actor, *, email: str, user_ref: str | None) -> None:
    if actor.role == ROLE_ADMIN:
        return
    if actor.email.strip().lower() == (email or "").strip().lower():
        return
    if user_ref is not None and actor.sub == user_ref:
        return
    raise PermissionDenied("Unauthorized", actor=actor.sub)
