"""Organization settings."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .. import models, schemas
from ..permissions import can_manage_settings, ensure
from .errors import ResourceNotFoundError

LOGGER = logging.getLogger(__name__)


class OrganizationService:
    """Read and edit the caller's organization."""

    @staticmethod
    def get_organization(db: Session, user: models.User) -> models.Organization:
        organization = db.get(models.Organization, user.organization_id)
        if organization is None:
            raise ResourceNotFoundError("Organization not found")
        return organization

    @classmethod
    def update_organization(
        cls, db: Session, user: models.User, data: schemas.OrganizationUpdate
    ) -> models.Organization:
        ensure(can_manage_settings, user, "You do not have permission to manage settings")
        organization = cls.get_organization(db, user)
        updates = data.model_dump(exclude_unset=True)
        for field, value in updates.items():
            if value is None and field not in {"address", "phone", "email"}:
                continue
            setattr(organization, field, value)
        db.add(organization)
        db.commit()
        db.refresh(organization)
        LOGGER.info("Updated settings for organization %s: %s", organization.id, sorted(updates))
        return organization
