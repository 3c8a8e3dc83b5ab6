"""Router exposing work order operations."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..security import get_current_user
from ..services import WorkOrderService
from .errors import service_errors

router = APIRouter()


@router.get("/", response_model=schemas.WorkOrderListResponse)
def list_work_orders(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    skip: int = Query(0, ge=0, description="Number of work orders to skip"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of work orders to return"),
    status_filter: Optional[models.WorkOrderStatus] = Query(
        None, alias="status", description="Filter by status"
    ),
    start_date: Optional[date] = Query(None, description="Events on or after this date"),
    end_date: Optional[date] = Query(None, description="Events on or before this date"),
    uninvoiced: bool = Query(False, description="Only work orders not attached to an invoice"),
) -> schemas.WorkOrderListResponse:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date cannot be after end_date",
        )
    items, total = WorkOrderService.list_work_orders(
        db,
        user,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        uninvoiced_only=uninvoiced,
        skip=skip,
        limit=limit,
    )
    return schemas.WorkOrderListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("/", response_model=schemas.WorkOrderRead, status_code=status.HTTP_201_CREATED)
def create_work_order(
    work_order_in: schemas.WorkOrderCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.WorkOrderRead:
    with service_errors("create the work order"):
        return WorkOrderService.create_work_order(db, user, work_order_in)


@router.get("/{work_order_id}", response_model=schemas.WorkOrderRead)
def get_work_order(
    work_order_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.WorkOrderRead:
    with service_errors("load the work order"):
        return WorkOrderService.get_work_order(db, user, work_order_id)


@router.put("/{work_order_id}", response_model=schemas.WorkOrderRead)
def update_work_order(
    work_order_id: str,
    work_order_in: schemas.WorkOrderCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.WorkOrderRead:
    with service_errors("update the work order"):
        return WorkOrderService.update_work_order(db, user, work_order_id, work_order_in)


@router.delete("/{work_order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_work_order(
    work_order_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> None:
    with service_errors("delete the work order"):
        WorkOrderService.delete_work_order(db, user, work_order_id)


@router.post("/{work_order_id}/submit", response_model=schemas.WorkOrderRead)
def submit_work_order(
    work_order_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.WorkOrderRead:
    with service_errors("submit the work order"):
        return WorkOrderService.submit_for_approval(db, user, work_order_id)


@router.post("/{work_order_id}/approve", response_model=schemas.WorkOrderRead)
def approve_work_order(
    work_order_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.WorkOrderRead:
    with service_errors("approve the work order"):
        return WorkOrderService.approve(db, user, work_order_id)


@router.post("/{work_order_id}/start", response_model=schemas.WorkOrderRead)
def start_work_order(
    work_order_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.WorkOrderRead:
    with service_errors("start the work order"):
        return WorkOrderService.start(db, user, work_order_id)


@router.post("/{work_order_id}/complete", response_model=schemas.WorkOrderRead)
def complete_work_order(
    work_order_id: str,
    request: Optional[schemas.WorkOrderCompleteRequest] = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.WorkOrderRead:
    with service_errors("complete the work order"):
        return WorkOrderService.complete(
            db, user, work_order_id, notes=request.notes if request else None
        )
