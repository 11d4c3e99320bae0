from datetime import datetime, timezone
from typing import Optional

def as_utc(v: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands timestamps back naive; they were stored as UTC."""
    if v is None or not isinstance(v, datetime):
        return v
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)
