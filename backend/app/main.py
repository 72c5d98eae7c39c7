"""FastAPI application entry point.

This module wires together the API routers, configures middleware,
error handlers and startup/shutdown tasks, and exposes the ASGI
application object used by the server.  Every router is mounted under
the ``/api`` prefix the mobile client calls.
"""

import os
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.routes import (
    children,
    share_codes,
    child_access,
    visits,
    vaccines,
    appointments,
    allergies,
    diseases,
    medications,
    doctors,
    hospitals,
    settings,
)
from app.database import create_db_and_tables, dispose_engine, async_session
from app.crud import get_settings

# Basic logging configuration.  The log level can be controlled with an
# environment variable so deployments can adjust verbosity without code
# changes.
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL))
logger = logging.getLogger(__name__)

API_PREFIX = "/api"
CORS_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]

app = FastAPI(title="Family Health Records API")

# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    """Create tables and make sure the settings row exists."""

    await create_db_and_tables()
    async with async_session() as session:
        s = await get_settings(session)
    logger.info(
        "Started %s (revoking a share code removes access: %s)",
        s.site_name,
        s.revoke_removes_access,
    )


@app.on_event("shutdown")
async def on_shutdown():
    await dispose_engine()


app.include_router(children.router, prefix=API_PREFIX)
app.include_router(share_codes.router, prefix=API_PREFIX)
app.include_router(child_access.router, prefix=API_PREFIX)
app.include_router(visits.router, prefix=API_PREFIX)
app.include_router(visits.photo_router, prefix=API_PREFIX)
app.include_router(vaccines.router, prefix=API_PREFIX)
app.include_router(appointments.router, prefix=API_PREFIX)
app.include_router(allergies.router, prefix=API_PREFIX)
app.include_router(diseases.router, prefix=API_PREFIX)
app.include_router(medications.router, prefix=API_PREFIX)
app.include_router(doctors.router, prefix=API_PREFIX)
app.include_router(hospitals.router, prefix=API_PREFIX)
app.include_router(settings.router, prefix=API_PREFIX)


@app.get(f"{API_PREFIX}/health")
async def health():
    return {"status": "ok"}


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first invalid field as a 400, naming the field."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = _field_name(first.get("loc", ()))
        if first.get("type") == "missing":
            message = f"{field} is required"
        else:
            message = f"{field}: {first.get('msg')}"
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage error during request %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "code": "storage_error",
            "message": "A storage error occurred",
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler that logs the stack trace once."""
    logger.exception("Unhandled error during request %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "code": "internal_server_error",
            "message": "An unexpected error occurred",
        },
    )
