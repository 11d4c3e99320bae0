# campus_events/api/v1/router.py
from fastapi import APIRouter
from campus_events.api.v1 import (
    events,
    registrations,
    letters,
    statistics,
)

api_router = APIRouter()

api_router.include_router(events.router,        prefix="/events",        tags=["events"])
api_router.include_router(registrations.router, prefix="/registrations", tags=["registrations"])
api_router.include_router(letters.router,       prefix="/letters",       tags=["letters"])
api_router.include_router(statistics.router,    prefix="/statistics",    tags=["statistics"])
