from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from backend.app import schemas
from backend.app.services import UserService, UserServiceError


def test_read_organization(client):
    response = client.get("/organization")

    assert response.status_code == 200
    data = response.json()
    assert data["slug"] == "st-example"
    assert data["payment_terms"] == "Net 30"
    assert Decimal(str(data["monthly_retainer"])) == Decimal("1000.00")


def test_update_organization_settings(client):
    response = client.put(
        "/organization",
        json={"monthly_retainer": "1200.00", "payment_terms": "Net 15", "invoice_prefix": "STX"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert Decimal(str(data["monthly_retainer"])) == Decimal("1200.00")
    assert data["invoice_prefix"] == "STX"

    draft = client.post("/invoices/draft-for-period", json={"period_key": "2026-01-16"})
    assert draft.json()["invoice"]["invoice_number"] == "STX-00001"
    sent = client.post(f"/invoices/{draft.json()['invoice']['id']}/send")
    assert sent.json()["due_date"] == "2026-02-04"


def test_only_admins_manage_settings(client, auth_headers):
    response = client.put(
        "/organization", json={"hourly_rate": "1.00"}, headers=auth_headers("client_admin")
    )

    assert response.status_code == 403


def test_list_users_in_organization(client):
    response = client.get("/users/")

    assert response.status_code == 200
    assert response.json()["total"] == 5
    emails = {user["email"] for user in response.json()["items"]}
    assert "pastor@parish.test" in emails


def test_client_admin_invites_client_user(client, auth_headers):
    response = client.post(
        "/users/",
        json={
            "email": "Deacon@Parish.test",
            "first_name": "Dan",
            "last_name": "Deacon",
            "role": "client_approver",
            "is_approver": True,
            "password": "deacon-pass-1",
        },
        headers=auth_headers("client_admin"),
    )
    assert response.status_code == 201, response.text
    assert response.json()["email"] == "deacon@parish.test"

    login = client.post(
        "/auth/token", json={"email": "deacon@parish.test", "password": "deacon-pass-1"}
    )
    assert login.status_code == 200


def test_client_admin_cannot_invite_provider_staff(client, auth_headers):
    response = client.post(
        "/users/",
        json={
            "email": "intruder@parish.test",
            "first_name": "In",
            "last_name": "Truder",
            "role": "provider_admin",
        },
        headers=auth_headers("client_admin"),
    )

    assert response.status_code == 403


def test_viewers_cannot_invite_users(client, auth_headers):
    response = client.post(
        "/users/",
        json={"email": "x@parish.test", "first_name": "X", "last_name": "Y"},
        headers=auth_headers("client_viewer"),
    )

    assert response.status_code == 403


class _ConflictingSession:
    def __init__(self):
        self.rolled_back = False

    def add(self, _instance):
        pass

    def commit(self):
        raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed"))

    def rollback(self):
        self.rolled_back = True


def test_duplicate_email_is_a_service_error(portal_users):
    session = _ConflictingSession()
    payload = schemas.UserCreate(
        email="viewer@parish.test", first_name="Dup", last_name="Licate"
    )

    with pytest.raises(UserServiceError, match="already exists"):
        UserService.create_user(session, portal_users["provider_admin"], payload)

    assert session.rolled_back is True


def test_admin_updates_user_role_and_flags(client, portal_users):
    viewer = portal_users["client_viewer"]

    response = client.put(
        f"/users/{viewer.id}",
        json={"role": "client_approver", "is_approver": True, "title": "Deacon"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["role"] == "client_approver"
    assert data["is_approver"] is True
    assert data["title"] == "Deacon"
    assert data["email"] == "viewer@parish.test"


def test_deactivated_user_cannot_sign_in(client, portal_users, security_settings):
    viewer = portal_users["client_viewer"]

    response = client.put(f"/users/{viewer.id}", json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    login = client.post(
        "/auth/token", json={"email": viewer.email, "password": security_settings["password"]}
    )
    assert login.status_code == 401


def test_client_admin_cannot_promote_or_edit_provider_staff(client, auth_headers, portal_users):
    headers = auth_headers("client_admin")

    promoted = client.put(
        f"/users/{portal_users['client_viewer'].id}",
        json={"role": "provider_staff"},
        headers=headers,
    )
    assert promoted.status_code == 403

    edited = client.put(
        f"/users/{portal_users['provider_staff'].id}",
        json={"first_name": "Renamed"},
        headers=headers,
    )
    assert edited.status_code == 403

    allowed = client.put(
        f"/users/{portal_users['client_viewer'].id}", json={"can_pay": True}, headers=headers
    )
    assert allowed.status_code == 200
    assert allowed.json()["can_pay"] is True


def test_users_cannot_deactivate_themselves(client, portal_users):
    response = client.put(
        f"/users/{portal_users['provider_admin'].id}", json={"is_active": False}
    )

    assert response.status_code == 409


def test_update_unknown_user_is_not_found(client, auth_headers):
    missing = client.put("/users/00000000-0000-0000-0000-000000000000", json={"title": "X"})
    assert missing.status_code == 404

    viewer = client.put(
        "/users/00000000-0000-0000-0000-000000000000",
        json={"title": "X"},
        headers=auth_headers("client_viewer"),
    )
    assert viewer.status_code == 403
