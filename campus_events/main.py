from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request
import structlog

from campus_events.api.v1.router import api_router
from campus_events.core.config import settings
from campus_events.core.errors import DomainError, is_unique_violation
from campus_events.core.logging import setup_logging
from campus_events.db.bootstrap import run_migrations_and_seed

setup_logging()
logger = structlog.get_logger(__name__)

api = FastAPI(
    title="College Event Registrations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={"displayRequestDuration": True, "persistAuthorization": True},
)

api.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # narrow down to the frontend origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# /metrics (Prometheus)
Instrumentator().instrument(api).expose(api, include_in_schema=False, should_gzip=True)

api.include_router(api_router, prefix="/api/v1")

@api.get("/healthz", tags=["health"])
def healthz():
    return {"status": "ok"}

@api.on_event("startup")
def startup():
    if settings.AUTO_MIGRATE:
        run_migrations_and_seed()

@api.exception_handler(DomainError)
def handle_domain_error(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("request.invariant_violation", path=request.url.path, code=exc.code, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@api.exception_handler(IntegrityError)
def handle_integrity_error(request: Request, exc: IntegrityError):
    detail = str(getattr(exc, "orig", exc))
    if is_unique_violation(exc):
        code, message = "UNIQUE_VIOLATION", "Duplicate record."
    else:
        code, message = "INTEGRITY_ERROR", "Record violates a database constraint."
    logger.warning("request.integrity_error", path=request.url.path, code=code, details=detail)
    return JSONResponse(status_code=409, content={"code": code, "message": message, "details": detail})

@api.exception_handler(Exception)
def handle_unexpected(request: Request, exc: Exception):
    logger.error("request.unhandled", path=request.url.path, error=repr(exc))
    return JSONResponse(
        status_code=500,
        content={"code": "INTERNAL_ERROR", "message": "Internal error.", "details": str(exc)},
    )
