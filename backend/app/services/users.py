"""User administration inside an organization."""

from __future__ import annotations

import logging
from typing import Iterable, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..permissions import PermissionDeniedError, can_manage_staff, ensure, is_provider_user
from ..security import generate_password_hash
from .errors import ResourceNotFoundError, ServiceStateError

LOGGER = logging.getLogger(__name__)

NULLABLE_FIELDS = frozenset({"title", "phone"})


class UserServiceError(ServiceStateError):
    """Raised when a user cannot be created or updated."""


class UserService:
    """List, invite and edit users of the caller's organization."""

    @staticmethod
    def list_users(
        db: Session,
        user: models.User,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[Iterable[models.User], int]:
        query = db.query(models.User).filter(
            models.User.organization_id == user.organization_id
        )
        total = query.count()
        items = (
            query.order_by(models.User.last_name, models.User.first_name)
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def create_user(
        db: Session, user: models.User, data: schemas.UserCreate
    ) -> models.User:
        ensure(can_manage_staff, user, "You do not have permission to manage users")
        if data.role in models.PROVIDER_ROLES and not is_provider_user(user):
            raise PermissionDeniedError("Client administrators can only invite client users")

        values = data.model_dump(exclude={"password"})
        new_user = models.User(organization_id=user.organization_id, **values)
        if data.password:
            new_user.password_hash = generate_password_hash(data.password)
        db.add(new_user)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise UserServiceError("A user with that email already exists") from exc
        db.refresh(new_user)
        LOGGER.info("Created %s user %s", new_user.role.value, new_user.email)
        return new_user

    @staticmethod
    def get_user(db: Session, user: models.User, user_id: str) -> models.User:
        target = (
            db.query(models.User)
            .filter(
                models.User.id == user_id,
                models.User.organization_id == user.organization_id,
            )
            .first()
        )
        if target is None:
            raise ResourceNotFoundError("User not found")
        return target

    @classmethod
    def update_user(
        cls, db: Session, user: models.User, user_id: str, data: schemas.UserUpdate
    ) -> models.User:
        ensure(can_manage_staff, user, "You do not have permission to manage users")
        target = cls.get_user(db, user, user_id)
        updates = data.model_dump(exclude_unset=True)

        if target.role in models.PROVIDER_ROLES and user.role != models.UserRole.PROVIDER_ADMIN:
            raise PermissionDeniedError("Only provider administrators can edit provider staff")
        if updates.get("role") in models.PROVIDER_ROLES and not is_provider_user(user):
            raise PermissionDeniedError("Client administrators can only assign client roles")
        if target.id == user.id and updates.get("is_active") is False:
            raise UserServiceError("You cannot deactivate your own account")

        for field, value in updates.items():
            if value is None and field not in NULLABLE_FIELDS:
                continue
            setattr(target, field, value)
        db.add(target)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise UserServiceError("A user with that email already exists") from exc
        db.refresh(target)
        LOGGER.info("Updated user %s (%s)", target.email, ", ".join(sorted(updates)) or "no changes")
        return target
