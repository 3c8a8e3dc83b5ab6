"""Database configuration for the client portal backend."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

_DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "portal.db"
_DEFAULT_DATABASE_URL = f"sqlite:///{_DEFAULT_DB_PATH.as_posix()}"
REQUIRE_POSTGRES_ENV = "REQUIRE_POSTGRES"
POOL_SIZE_ENV = "DATABASE_POOL_SIZE"
POOL_MAX_OVERFLOW_ENV = "DATABASE_MAX_OVERFLOW"
POOL_TIMEOUT_ENV = "DATABASE_POOL_TIMEOUT"
POOL_RECYCLE_ENV = "DATABASE_POOL_RECYCLE"
CONNECT_TIMEOUT_ENV = "DATABASE_CONNECT_TIMEOUT"

DEFAULT_POOL_SIZE = 5
DEFAULT_MAX_OVERFLOW = 10
DEFAULT_POOL_TIMEOUT = 30
DEFAULT_POOL_RECYCLE = 1800
DEFAULT_CONNECT_TIMEOUT = 10


def _ensure_directory(path: str | os.PathLike[str]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def read_int_env(name: str, default: int) -> int:
    """Read a non-negative integer setting from the environment."""

    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return value


def read_bool_env(name: str, default: bool = False) -> bool:
    """Read a boolean flag (``1/true/yes/on``) from the environment."""

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_database_url(raw_url: str | None) -> str:
    if not raw_url:
        if read_bool_env(REQUIRE_POSTGRES_ENV, False):
            raise RuntimeError(
                "DATABASE_URL must be configured for PostgreSQL when REQUIRE_POSTGRES=1"
            )
        _ensure_directory(_DEFAULT_DB_PATH)
        return _DEFAULT_DATABASE_URL

    url = make_url(raw_url)
    is_sqlite = url.drivername.startswith("sqlite")
    if is_sqlite and url.database not in (None, "", ":memory:"):
        _ensure_directory(url.database)
    if is_sqlite and read_bool_env(REQUIRE_POSTGRES_ENV, False):
        raise RuntimeError(
            "SQLite is not permitted when REQUIRE_POSTGRES=1; configure DATABASE_URL"
        )
    return url.render_as_string(hide_password=False)


def _engine_options(database_url: str) -> Dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": read_int_env(POOL_SIZE_ENV, DEFAULT_POOL_SIZE),
        "max_overflow": read_int_env(POOL_MAX_OVERFLOW_ENV, DEFAULT_MAX_OVERFLOW),
        "pool_timeout": read_int_env(POOL_TIMEOUT_ENV, DEFAULT_POOL_TIMEOUT),
        "pool_recycle": read_int_env(POOL_RECYCLE_ENV, DEFAULT_POOL_RECYCLE),
        "connect_args": {
            "connect_timeout": read_int_env(CONNECT_TIMEOUT_ENV, DEFAULT_CONNECT_TIMEOUT)
        },
    }


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite ignores FOREIGN KEY clauses unless the pragma is set per connection.
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SQLALCHEMY_DATABASE_URL = _resolve_database_url(os.getenv("DATABASE_URL"))

engine = create_engine(SQLALCHEMY_DATABASE_URL, **_engine_options(SQLALCHEMY_DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator:
    """Yield a database session and ensure it is closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator:
    """Provide a transactional scope for jobs running outside request handlers."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
