"""Router exposing the caller's organization settings."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..security import get_current_user
from ..services import OrganizationService
from .errors import service_errors

router = APIRouter()


@router.get("", response_model=schemas.OrganizationRead)
def read_organization(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.OrganizationRead:
    with service_errors("load the organization"):
        return OrganizationService.get_organization(db, user)


@router.put("", response_model=schemas.OrganizationRead)
def update_organization(
    organization_in: schemas.OrganizationUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.OrganizationRead:
    with service_errors("update the organization"):
        return OrganizationService.update_organization(db, user, organization_in)
