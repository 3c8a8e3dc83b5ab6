"""Router exposing organization users."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..security import get_current_user
from ..services import UserService
from .errors import service_errors

router = APIRouter()


@router.get("/", response_model=schemas.UserListResponse)
def list_users(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> schemas.UserListResponse:
    items, total = UserService.list_users(db, user, skip=skip, limit=limit)
    return schemas.UserListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("/", response_model=schemas.UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: schemas.UserCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.UserRead:
    with service_errors("create the user"):
        return UserService.create_user(db, user, user_in)


@router.put("/{user_id}", response_model=schemas.UserRead)
def update_user(
    user_id: str,
    user_in: schemas.UserUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.UserRead:
    with service_errors("update the user"):
        return UserService.update_user(db, user, user_id, user_in)
