"""Expose the client portal FastAPI app and its CORS defaults."""

import logging
import os
import re
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import read_bool_env
from .migrations import run_database_migrations
from .routers import (
    auth_router,
    billing_periods_router,
    incident_reports_router,
    invoices_router,
    organization_router,
    time_logs_router,
    users_router,
    work_orders_router,
)

RUN_MIGRATIONS_ENV = "RUN_MIGRATIONS_ON_STARTUP"

LOCAL_DEVELOPMENT_ORIGINS = {
    "http://localhost:3000",
    "http://localhost:5173",
}
LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$"

DEFAULT_ALLOWED_ORIGINS = {
    *LOCAL_DEVELOPMENT_ORIGINS,
    "http://127.0.0.1:3000",
    "http://0.0.0.0:3000",
    "http://127.0.0.1:5173",
    "http://0.0.0.0:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
}


def _normalize_origin(origin: str) -> str | None:
    stripped = origin.strip()
    if not stripped:
        return None
    return stripped.rstrip("/")


def _read_allowed_origins(raw_origins: Iterable[str]) -> list[str]:
    normalized = {_normalize_origin(origin) for origin in raw_origins}
    return sorted({origin for origin in normalized if origin})


def _split_raw_origins(raw_value: str) -> list[str]:
    """Split a raw origin string using commas or whitespace as separators."""

    return [origin for origin in re.split(r"[\s,]+", raw_value) if origin]


def _load_allowed_origins_from_env() -> list[str]:
    raw_value = os.getenv("BACKEND_ALLOWED_ORIGINS")
    if not raw_value:
        return []
    return _read_allowed_origins(_split_raw_origins(raw_value))


def _resolve_allowed_origins() -> list[str]:
    env_origins = _load_allowed_origins_from_env()
    if env_origins:
        origins = list(env_origins)
    else:
        origins = _read_allowed_origins(DEFAULT_ALLOWED_ORIGINS)

    missing_dev_origins = [
        origin for origin in LOCAL_DEVELOPMENT_ORIGINS if origin not in origins
    ]
    if missing_dev_origins:
        # The portal frontend dev servers must always be reachable.
        origins = _read_allowed_origins([*origins, *missing_dev_origins])

    return origins


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_database_is_ready()
    yield


app = FastAPI(title="Client Portal API", lifespan=lifespan)

LOGGER = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_allowed_origins(),
    allow_origin_regex=LOCALHOST_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(billing_periods_router, prefix="/billing-periods", tags=["billing-periods"])
app.include_router(invoices_router, prefix="/invoices", tags=["invoices"])
app.include_router(work_orders_router, prefix="/work-orders", tags=["work-orders"])
app.include_router(time_logs_router, prefix="/time-logs", tags=["time-logs"])
app.include_router(
    incident_reports_router, prefix="/incident-reports", tags=["incident-reports"]
)
app.include_router(organization_router, prefix="/organization", tags=["organization"])
app.include_router(users_router, prefix="/users", tags=["users"])


def ensure_database_is_ready() -> None:
    """Apply pending database migrations when the service starts."""

    if not read_bool_env(RUN_MIGRATIONS_ENV, True):
        LOGGER.info("Skipping database migrations (%s disabled)", RUN_MIGRATIONS_ENV)
        return
    LOGGER.info("Ensuring database schema is up to date before serving requests")
    run_database_migrations()


@app.get("/", tags=["health"])
def read_root() -> dict[str, str]:
    """Return a simple health check response."""
    return {"status": "ok"}
