"""Authentication endpoints for portal users."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..security import authenticate_user, create_access_token

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/token", response_model=schemas.TokenResponse)
def obtain_access_token(
    payload: schemas.LoginRequest, db: Session = Depends(get_db)
) -> schemas.TokenResponse:
    """Authenticate a user by e-mail and password and return an access token."""

    user = authenticate_user(db, payload.email, payload.password)
    LOGGER.info("Issued access token for %s", user.email)
    return schemas.TokenResponse(access_token=create_access_token(user))
