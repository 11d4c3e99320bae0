# campus_events/core/errors.py
"""Domain errors raised by the ledger, the registration store and the services.

Every error carries a stable ``code`` the HTTP layer renders verbatim, so
callers can tell "event is fully booked" apart from "you already have a
pending registration for this event".
"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    status_code: int = 400
    code: str = "DOMAIN_ERROR"
    message: str = "Operation refused"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class PermissionDenied(DomainError):
    status_code = 403
    code = "PERMISSION_DENIED"
    message = "Admin access required"


# ---------------------------- NotFound ----------------------------

class NotFound(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class EventNotFound(NotFound):
    code = "EVENT_NOT_FOUND"
    message = "Event not found"


class RegistrationNotFound(NotFound):
    code = "REGISTRATION_NOT_FOUND"
    message = "Registration not found"


# ---------------------------- Conflict ----------------------------

class Conflict(DomainError):
    status_code = 409
    code = "CONFLICT"
    message = "Conflict"


class DuplicateActive(Conflict):
    code = "DUPLICATE_ACTIVE"
    message = "You already have a pending or approved registration for this event"


class AlreadyTerminal(Conflict):
    code = "ALREADY_TERMINAL"
    message = "Registration has already been resolved"


class EventFull(Conflict):
    code = "EVENT_FULL"
    message = "Event is fully booked"


class RegistrationClosed(Conflict):
    code = "REGISTRATION_CLOSED"
    message = "Registration is closed for this event"


class DuplicateEventTitle(Conflict):
    code = "DUPLICATE_EVENT_TITLE"
    message = "An event with this title already exists"


class EventHasRegistrations(Conflict):
    code = "EVENT_HAS_REGISTRATIONS"
    message = "Event has registrations and cannot be deleted"


class LetterUnavailable(Conflict):
    code = "LETTER_UNAVAILABLE"
    message = "Letter is only available for approved registrations"


# ------------------------ InvariantViolation ------------------------

class InvariantViolation(DomainError):
    """Capacity accounting is (or would become) inconsistent.

    Aborts the triggering operation; never coerced silently.
    """
    status_code = 500
    code = "INVARIANT_VIOLATION"
    message = "Capacity ledger invariant violated"


class BelowConsumed(InvariantViolation):
    # the edit is refused before anything is written
    status_code = 409
    code = "BELOW_CONSUMED"
    message = "New capacity is below the number of approved registrations"


def is_unique_violation(exc: Exception) -> bool:
    """True when a driver IntegrityError comes from a UNIQUE constraint or index."""
    msg = str(getattr(exc, "orig", exc)).lower()
    return "unique" in msg or "duplicate key" in msg
