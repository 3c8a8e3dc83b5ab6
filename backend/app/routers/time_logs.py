"""Router exposing time log operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..security import get_current_user
from ..services import TimeLogService
from .errors import service_errors

router = APIRouter()


@router.get("/", response_model=schemas.TimeLogListResponse)
def list_time_logs(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    work_order_id: Optional[str] = Query(None, description="Filter by work order"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> schemas.TimeLogListResponse:
    items, total = TimeLogService.list_time_logs(
        db, user, work_order_id=work_order_id, skip=skip, limit=limit
    )
    return schemas.TimeLogListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("/", response_model=schemas.TimeLogRead, status_code=status.HTTP_201_CREATED)
def create_time_log(
    time_log_in: schemas.TimeLogCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.TimeLogRead:
    with service_errors("log time"):
        return TimeLogService.create_time_log(db, user, time_log_in)


@router.put("/{time_log_id}", response_model=schemas.TimeLogRead)
def update_time_log(
    time_log_id: str,
    time_log_in: schemas.TimeLogUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.TimeLogRead:
    with service_errors("update the time log"):
        return TimeLogService.update_time_log(db, user, time_log_id, time_log_in)


@router.delete("/{time_log_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_log(
    time_log_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> None:
    with service_errors("delete the time log"):
        TimeLogService.delete_time_log(db, user, time_log_id)
