from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from backend.app import security
from backend.app.security import (
    SecurityConfigurationError,
    create_access_token,
    generate_password_hash,
    verify_password,
)


def test_password_hash_round_trip():
    stored = generate_password_hash("correct horse", iterations=1_000)

    assert stored.startswith("1000$")
    assert verify_password("correct horse", stored)
    assert not verify_password("wrong horse", stored)


def test_empty_password_is_rejected():
    with pytest.raises(ValueError):
        generate_password_hash("")


def test_login_returns_bearer_token(client, security_settings):
    response = client.post(
        "/auth/token",
        json={"email": "  Office@Parish.test ", "password": security_settings["password"]},
    )

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_login_rejects_bad_credentials(client, db_session, portal_users, security_settings):
    wrong = client.post("/auth/token", json={"email": "office@parish.test", "password": "nope-nope"})
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == "Invalid credentials"

    portal_users["client_viewer"].is_active = False
    db_session.commit()
    inactive = client.post(
        "/auth/token", json={"email": "viewer@parish.test", "password": security_settings["password"]}
    )
    assert inactive.status_code == 401


def test_token_payload_carries_user_and_organization(portal_users):
    user = portal_users["client_admin"]
    token = create_access_token(user)

    payload_segment = token.split(".")[1]
    payload = json.loads(security._b64url_decode(payload_segment))

    assert payload["sub"] == user.id
    assert payload["org"] == user.organization_id
    assert payload["role"] == "client_admin"


def test_expired_token_is_rejected(portal_users):
    issued = datetime.now(timezone.utc) - timedelta(hours=3)
    token = create_access_token(portal_users["provider_staff"], now=issued)

    with pytest.raises(HTTPException) as excinfo:
        security._decode_jwt(token, security._load_jwt_key())

    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == "Token expired"


def test_tampered_token_is_rejected(client):
    token = client.headers["Authorization"].split(" ", 1)[1]
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])

    response = client.get("/organization", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 401


def test_missing_jwt_secret_is_a_configuration_error(monkeypatch, portal_users):
    monkeypatch.delenv("PORTAL_JWT_SECRET", raising=False)

    with pytest.raises(SecurityConfigurationError):
        create_access_token(portal_users["provider_admin"])


def test_invalid_token_lifetime_is_a_configuration_error(monkeypatch, portal_users):
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "soon")

    with pytest.raises(SecurityConfigurationError):
        create_access_token(portal_users["provider_admin"])
