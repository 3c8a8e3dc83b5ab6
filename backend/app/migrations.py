"""Apply Alembic migrations before the API starts serving requests."""

from __future__ import annotations

import errno
import logging
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine.reflection import Inspector

from .database import SQLALCHEMY_DATABASE_URL

LOGGER = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parent.parent
LOCK_FILENAME = ".alembic-migration.lock"
LOCK_RETRY_DELAY = 0.25
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30.0

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl
else:  # pragma: no cover - platform specific
    import msvcrt

RevisionSentinel = tuple[str, Callable[[Inspector], bool]]

# Newest first: the first matching check identifies the revision of a schema
# that was created without Alembic (e.g. through ``Base.metadata.create_all``).
REVISION_SENTINELS: Sequence[RevisionSentinel] = (
    (
        "20261015_0002",
        lambda inspector: inspector.has_table("incident_reports")
        and inspector.has_table("invoice_comments"),
    ),
    (
        "20261001_0001",
        lambda inspector: inspector.has_table("invoices") and inspector.has_table("work_orders"),
    ),
)


def _read_lock_timeout() -> float:
    raw = os.getenv(LOCK_TIMEOUT_ENV)
    if not raw:
        return DEFAULT_LOCK_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning(
            "Invalid %s=%s; falling back to %.1f seconds", LOCK_TIMEOUT_ENV, raw, DEFAULT_LOCK_TIMEOUT
        )
        return DEFAULT_LOCK_TIMEOUT
    if value <= 0:
        LOGGER.warning(
            "%s must be positive; using %.1f seconds", LOCK_TIMEOUT_ENV, DEFAULT_LOCK_TIMEOUT
        )
        return DEFAULT_LOCK_TIMEOUT
    return value


def _lock_is_held_elsewhere(error: OSError) -> bool:
    if isinstance(error, BlockingIOError):
        return True
    if getattr(error, "errno", None) in {errno.EACCES, errno.EAGAIN, errno.EBUSY}:
        return True
    # Windows reports sharing (32) and lock (33) violations.
    return getattr(error, "winerror", None) in {32, 33}


def _try_lock(handle) -> None:
    if os.name == "posix":  # pragma: no cover - platform specific
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    else:  # pragma: no cover - platform specific
        msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)


def _unlock(handle) -> None:
    if os.name == "posix":  # pragma: no cover - platform specific
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    else:  # pragma: no cover - platform specific
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)


@contextmanager
def migration_lock(path: Path, *, timeout: float) -> Iterator[None]:
    """Hold an exclusive file lock so only one process migrates at a time."""

    path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with path.open("a+") as handle:
        LOGGER.debug("Acquiring Alembic migration lock at %s", path)
        while True:
            try:
                _try_lock(handle)
                break
            except OSError as error:
                if not _lock_is_held_elsewhere(error):
                    raise
                if time.monotonic() >= deadline:
                    raise TimeoutError("Timed out waiting for Alembic migration lock") from error
                time.sleep(LOCK_RETRY_DELAY)
        try:
            yield
        finally:
            _unlock(handle)
            LOGGER.debug("Released Alembic migration lock at %s", path)


def detect_revision(inspector: Inspector, sentinels: Iterable[RevisionSentinel]) -> str | None:
    for revision, check in sentinels:
        if check(inspector):
            return revision
    return None


def build_alembic_config(database_url: str | None = None) -> Config:
    config = Config(str(BACKEND_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    config.set_main_option(
        "sqlalchemy.url", database_url or os.getenv("DATABASE_URL") or SQLALCHEMY_DATABASE_URL
    )
    return config


def run_database_migrations(database_url: str | None = None) -> None:
    """Upgrade the database to the latest Alembic revision."""

    if str(BACKEND_DIR) not in sys.path:
        sys.path.insert(0, str(BACKEND_DIR))

    config = build_alembic_config(database_url)
    final_url = config.get_main_option("sqlalchemy.url")
    LOGGER.info("Running database migrations at %s", final_url)

    with migration_lock(BACKEND_DIR / LOCK_FILENAME, timeout=_read_lock_timeout()):
        connect_args = {"check_same_thread": False} if final_url.startswith("sqlite") else {}
        engine = create_engine(final_url, connect_args=connect_args)
        try:
            inspector = inspect(engine)
            if inspector.has_table("alembic_version"):
                command.upgrade(config, "head")
                return

            detected = detect_revision(inspector, REVISION_SENTINELS)
            if detected is None:
                LOGGER.debug("No versioned schema detected; running full upgrade")
                command.upgrade(config, "head")
                return

            LOGGER.info("Existing tables match revision %s; stamping before upgrade", detected)
            command.stamp(config, detected)
            head = ScriptDirectory.from_config(config).get_current_head()
            if detected != head:
                command.upgrade(config, "head")
        finally:
            engine.dispose()
