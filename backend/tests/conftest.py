from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
import base64
import os
import sys
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the project root (which exposes the ``backend`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "0"

from backend.app.database import Base, get_db
from backend.app.main import app
from backend.app import models
from backend.app.security import generate_password_hash
from backend.app.services.billing_periods import APP_TIMEZONE, get_clock

PASSWORD = "P0rtal-Secret!"
FIXED_NOW = datetime(2026, 1, 20, 10, 30, tzinfo=APP_TIMEZONE)


@pytest.fixture(scope="session")
def security_settings() -> dict:
    os.environ["PORTAL_JWT_SECRET"] = base64.urlsafe_b64encode(os.urandom(32)).decode()
    os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
    os.environ.pop("DEFAULT_HOURLY_RATE", None)
    return {"password": PASSWORD, "password_hash": generate_password_hash(PASSWORD, iterations=1_000)}


@pytest.fixture(scope="session", autouse=True)
def _ensure_security_settings(security_settings: dict) -> Generator[None, None, None]:
    yield


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="session", autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def organization(db_session: Session) -> models.Organization:
    org = models.Organization(
        name="St. Example Parish",
        slug="st-example",
        invoice_prefix="SEP",
        next_invoice_number=1,
        hourly_rate=Decimal("85.00"),
        monthly_retainer=Decimal("1000.00"),
        payment_terms="Net 30",
    )
    db_session.add(org)
    db_session.commit()
    return org


def _make_user(
    db_session: Session,
    organization: models.Organization,
    password_hash: str,
    role: models.UserRole,
    email: str,
    **flags,
) -> models.User:
    user = models.User(
        organization_id=organization.id,
        email=email,
        first_name=role.value.split("_")[0].title(),
        last_name=role.value.split("_")[1].title(),
        password_hash=password_hash,
        role=role,
        **flags,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def portal_users(
    db_session: Session, organization: models.Organization, security_settings: dict
) -> dict[str, models.User]:
    password_hash = security_settings["password_hash"]
    return {
        "provider_admin": _make_user(
            db_session, organization, password_hash, models.UserRole.PROVIDER_ADMIN,
            "admin@provider.test",
        ),
        "provider_staff": _make_user(
            db_session, organization, password_hash, models.UserRole.PROVIDER_STAFF,
            "tech@provider.test",
        ),
        "client_admin": _make_user(
            db_session, organization, password_hash, models.UserRole.CLIENT_ADMIN,
            "office@parish.test", can_pay=True, is_approver=True,
        ),
        "client_approver": _make_user(
            db_session, organization, password_hash, models.UserRole.CLIENT_APPROVER,
            "pastor@parish.test", is_approver=True,
        ),
        "client_viewer": _make_user(
            db_session, organization, password_hash, models.UserRole.CLIENT_VIEWER,
            "viewer@parish.test",
        ),
    }


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def client(
    db_session: Session, portal_users: dict[str, models.User], fixed_now: datetime
) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: fixed_now)
    with TestClient(app) as test_client:
        response = test_client.post(
            "/auth/token",
            json={"email": portal_users["provider_admin"].email, "password": PASSWORD},
        )
        assert response.status_code == 200
        token = response.json()["access_token"]
        test_client.headers.update({"Authorization": f"Bearer {token}"})
        yield test_client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def auth_headers(
    client: TestClient, portal_users: dict[str, models.User]
) -> Callable[[str], dict[str, str]]:
    """Return ``Authorization`` headers for the seeded user with the given role key."""

    def _headers(role_key: str) -> dict[str, str]:
        response = client.post(
            "/auth/token",
            json={"email": portal_users[role_key].email, "password": PASSWORD},
        )
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _headers


@pytest.fixture
def make_work_order(
    db_session: Session, organization: models.Organization, portal_users: dict[str, models.User]
) -> Callable[..., models.WorkOrder]:
    """Insert a work order directly, bypassing the approval workflow."""

    def _make(
        event_date,
        *,
        status: models.WorkOrderStatus = models.WorkOrderStatus.COMPLETED,
        hours: str = "4.00",
        rate: str = "85.00",
        name: str = "Funeral Mass",
    ) -> models.WorkOrder:
        work_order = models.WorkOrder(
            organization_id=organization.id,
            event_name=name,
            event_date=event_date,
            venue=models.Venue.CHURCH,
            event_type=models.EventType.FUNERAL,
            actual_hours=Decimal(hours),
            hourly_rate_snapshot=Decimal(rate),
            status=status,
            created_by_id=portal_users["provider_admin"].id,
        )
        db_session.add(work_order)
        db_session.commit()
        db_session.refresh(work_order)
        return work_order

    return _make


@pytest.fixture
def foreign_work_order(db_session: Session, security_settings: dict) -> models.WorkOrder:
    """A completed work order that belongs to a different organization."""

    other = models.Organization(
        name="Grace Chapel",
        slug="grace-chapel",
        invoice_prefix="GRC",
        next_invoice_number=1,
        hourly_rate=Decimal("90.00"),
        monthly_retainer=Decimal("0.00"),
    )
    db_session.add(other)
    db_session.commit()
    owner = _make_user(
        db_session, other, security_settings["password_hash"], models.UserRole.PROVIDER_ADMIN,
        "admin@grace.test",
    )
    work_order = models.WorkOrder(
        organization_id=other.id,
        event_name="Chapel Concert",
        event_date=date(2026, 1, 18),
        venue=models.Venue.CHURCH,
        event_type=models.EventType.CONCERT,
        actual_hours=Decimal("2.00"),
        hourly_rate_snapshot=Decimal("90.00"),
        status=models.WorkOrderStatus.COMPLETED,
        created_by_id=owner.id,
    )
    db_session.add(work_order)
    db_session.commit()
    db_session.refresh(work_order)
    return work_order
