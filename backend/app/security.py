"""Password hashing, access tokens and the authenticated-user dependency."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from . import models
from .database import get_db

JWT_SECRET_ENV = "PORTAL_JWT_SECRET"
ACCESS_TOKEN_EXPIRE_MINUTES_ENV = "ACCESS_TOKEN_EXPIRE_MINUTES"

PBKDF2_DEFAULT_ITERATIONS = 390_000
DEFAULT_TOKEN_LIFETIME = timedelta(minutes=30)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


class SecurityConfigurationError(RuntimeError):
    """Raised when mandatory security settings are missing or invalid."""


def _read_env_var(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise SecurityConfigurationError(f"Environment variable '{name}' is required")
    return value


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def generate_password_hash(password: str, *, iterations: int = PBKDF2_DEFAULT_ITERATIONS) -> str:
    """Return a PBKDF2-based password hash string."""

    if not password:
        raise ValueError("password must not be empty")
    salt = secrets.token_bytes(16)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    components = (
        str(iterations),
        base64.urlsafe_b64encode(salt).decode("ascii"),
        base64.urlsafe_b64encode(derived).decode("ascii"),
    )
    return "$".join(components)


def _split_password_hash(stored_hash: str) -> tuple[int, bytes, bytes]:
    try:
        iterations_str, salt_b64, hash_b64 = stored_hash.split("$")
        iterations = int(iterations_str)
        salt = base64.urlsafe_b64decode(salt_b64)
        digest = base64.urlsafe_b64decode(hash_b64)
    except (ValueError, binascii.Error) as exc:
        raise SecurityConfigurationError("Stored password hash is invalid") from exc
    return iterations, salt, digest


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a stored PBKDF2 hash."""

    iterations, salt, digest = _split_password_hash(stored_hash)
    candidate = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(candidate, digest)


def _load_jwt_key() -> bytes:
    raw_secret = _read_env_var(JWT_SECRET_ENV)
    try:
        return base64.urlsafe_b64decode(raw_secret)
    except (ValueError, binascii.Error):
        return raw_secret.encode("utf-8")


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _encode_jwt(payload: dict[str, Any], key: bytes) -> str:
    header = {"typ": "JWT", "alg": "HS256"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    signature = hmac.new(key, signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{_b64url_encode(signature)}"


def _decode_jwt(token: str, key: bytes, *, now: datetime | None = None) -> dict[str, Any]:
    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
        signature = _b64url_decode(signature_b64)
    except (ValueError, binascii.Error) as exc:
        raise _unauthorized("Invalid token") from exc

    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    expected_signature = hmac.new(key, signing_input, hashlib.sha256).digest()
    if not hmac.compare_digest(signature, expected_signature):
        raise _unauthorized("Invalid token")

    try:
        payload_data = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
        exp = int(payload_data["exp"])
    except (ValueError, KeyError, TypeError, binascii.Error) as exc:
        raise _unauthorized("Invalid token") from exc

    current = now or datetime.now(timezone.utc)
    if current >= datetime.fromtimestamp(exp, tz=timezone.utc):
        raise _unauthorized("Token expired")
    return payload_data


def _resolve_access_token_expiry() -> timedelta:
    raw = os.getenv(ACCESS_TOKEN_EXPIRE_MINUTES_ENV)
    if not raw:
        return DEFAULT_TOKEN_LIFETIME
    try:
        minutes = int(raw)
    except ValueError as exc:
        raise SecurityConfigurationError("ACCESS_TOKEN_EXPIRE_MINUTES must be an integer") from exc
    if minutes <= 0:
        raise SecurityConfigurationError("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
    return timedelta(minutes=minutes)


def authenticate_user(db: Session, email: str, password: str) -> models.User:
    """Return the active user matching the credentials or raise 401."""

    normalized = email.strip().lower()
    user = db.query(models.User).filter(models.User.email == normalized).first()
    if user is None or not user.is_active or not user.password_hash:
        raise _unauthorized("Invalid credentials")
    if not verify_password(password, user.password_hash):
        raise _unauthorized("Invalid credentials")
    return user


def create_access_token(user: models.User, *, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    expiry = issued_at + _resolve_access_token_expiry()
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "org": str(user.organization_id),
        "role": user.role.value,
        "exp": int(expiry.timestamp()),
    }
    return _encode_jwt(payload, _load_jwt_key())


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    payload = _decode_jwt(token, _load_jwt_key())
    user_id = payload.get("sub")
    if not isinstance(user_id, str):
        raise _unauthorized("Invalid token")
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if user is None or not user.is_active:
        raise _unauthorized("Invalid token")
    if payload.get("org") != str(user.organization_id):
        raise _unauthorized("Invalid token")
    return user


def require_roles(*roles: models.UserRole) -> Callable[..., models.User]:
    """Build a dependency that only admits users holding one of ``roles``."""

    allowed = frozenset(roles)

    def _dependency(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
        return user

    return _dependency


require_provider_staff = require_roles(*models.PROVIDER_ROLES)
