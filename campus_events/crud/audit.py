from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from campus_events.models.audit import AuditLog

def record(
    db: Session,
    *,
    actor: Optional[str],
    entity: str,
    entity_id: int,
    action: str,
    diff: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Append an audit row inside the caller's transaction."""
    row = AuditLog(actor=actor, entity=entity, entity_id=entity_id, action=action, diff_json=diff)
    db.add(row)
    db.flush()
    return row
