# loads the modules so their tables register on Base.metadata
from campus_events.db.base import Base  # noqa: F401

import campus_events.models.event         # noqa: F401
import campus_events.models.registration  # noqa: F401
import campus_events.models.audit         # noqa: F401

__all__: list[str] = []
