from __future__ import annotations

from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text

from backend.app.database import Base
from backend.app.migrations import run_database_migrations

BACKEND_DIR = Path(__file__).resolve().parents[1]


def _head_revision() -> str:
    config = Config(str(BACKEND_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    return ScriptDirectory.from_config(config).get_current_head()


def _version(url: str) -> str:
    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            return connection.scalar(text("SELECT version_num FROM alembic_version"))
    finally:
        engine.dispose()


def test_migrations_create_schema_matching_models(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'fresh.db'}"

    run_database_migrations(url)

    engine = create_engine(url)
    inspector = inspect(engine)
    tables = set(inspector.get_table_names()) - {"alembic_version"}
    assert tables == set(Base.metadata.tables)
    for table_name, table in Base.metadata.tables.items():
        columns = {column["name"] for column in inspector.get_columns(table_name)}
        assert columns == {column.name for column in table.columns}, table_name
    engine.dispose()

    assert _version(url) == _head_revision()


def test_migrations_stamp_schema_created_without_alembic(tmp_path, monkeypatch) -> None:
    url = f"sqlite:///{tmp_path / 'current.db'}"
    engine = create_engine(url)
    Base.metadata.create_all(bind=engine)
    engine.dispose()

    monkeypatch.setenv("DATABASE_URL", url)
    run_database_migrations()

    assert _version(url) == _head_revision()


def test_migrations_are_idempotent(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'twice.db'}"

    run_database_migrations(url)
    run_database_migrations(url)

    assert _version(url) == _head_revision()


def test_migrations_upgrade_schema_stamped_at_initial_revision(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'initial.db'}"
    engine = create_engine(url)
    Base.metadata.create_all(bind=engine)
    Base.metadata.tables["invoice_comments"].drop(bind=engine)
    Base.metadata.tables["incident_reports"].drop(bind=engine)
    engine.dispose()

    run_database_migrations(url)

    engine = create_engine(url)
    tables = set(inspect(engine).get_table_names())
    engine.dispose()
    assert {"incident_reports", "invoice_comments"} <= tables
    assert _version(url) == _head_revision() == "20261015_0002"
