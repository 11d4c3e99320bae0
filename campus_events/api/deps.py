from typing import Optional
from fastapi import Header, HTTPException

from campus_events.db.session import get_db  # noqa: F401  (re-exported for routers)
from campus_events.core.tokens import decode_access
from campus_events.schemas.actor import Actor

# ----------------------------------------------------------------------
# Reads the Bearer from the Authorization header (no OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: str = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Please login to access this resource")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    return parts[1]

def _actor_from_payload(payload: dict) -> Actor:
    return Actor(
        sub=str(payload["sub"]),
        email=str(payload["email"]).strip().lower(),
        role=str(payload["role"]),
        student_id=payload.get("student_id") or None,
    )

def get_current_actor(authorization: str = Header(None, alias="Authorization")) -> Actor:
    token = get_bearer_token(authorization)
    payload = decode_access(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return _actor_from_payload(payload)

# ----------------------------------------------------------------------
# Public routes: the caller may or may not be logged in; bad tokens are
# treated as anonymous
# ----------------------------------------------------------------------
def get_optional_actor(authorization: str = Header(None, alias="Authorization")) -> Optional[Actor]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    payload = decode_access(parts[1])
    return _actor_from_payload(payload) if payload else None
