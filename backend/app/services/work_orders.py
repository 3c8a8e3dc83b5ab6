"""Business logic for work orders."""

from __future__ import annotations

import logging
import os
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from .. import models, schemas
from ..permissions import (
    can_approve,
    can_create_work_orders,
    can_delete_work_orders,
    can_edit_work_orders,
    ensure,
)
from .errors import ResourceNotFoundError, ServiceStateError

LOGGER = logging.getLogger(__name__)

DEFAULT_HOURLY_RATE_ENV = "DEFAULT_HOURLY_RATE"
FALLBACK_HOURLY_RATE = Decimal("75.00")

EDITABLE_STATUSES = frozenset(
    {models.WorkOrderStatus.DRAFT, models.WorkOrderStatus.PENDING_APPROVAL}
)
COMPLETABLE_STATUSES = frozenset(
    {models.WorkOrderStatus.APPROVED, models.WorkOrderStatus.IN_PROGRESS}
)


class WorkOrderServiceError(ServiceStateError):
    """Raised when a work order transition is not allowed."""


def _default_hourly_rate() -> Decimal:
    raw = os.getenv(DEFAULT_HOURLY_RATE_ENV)
    if not raw:
        return FALLBACK_HOURLY_RATE
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError(f"{DEFAULT_HOURLY_RATE_ENV} must be a decimal number") from exc


class WorkOrderService:
    """CRUD and lifecycle transitions for work orders."""

    @staticmethod
    def list_work_orders(
        db: Session,
        user: models.User,
        *,
        status: Optional[models.WorkOrderStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        uninvoiced_only: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[Iterable[models.WorkOrder], int]:
        query = db.query(models.WorkOrder).filter(
            models.WorkOrder.organization_id == user.organization_id
        )
        if status:
            query = query.filter(models.WorkOrder.status == status)
        if start_date:
            query = query.filter(models.WorkOrder.event_date >= start_date)
        if end_date:
            query = query.filter(models.WorkOrder.event_date <= end_date)
        if uninvoiced_only:
            query = query.filter(models.WorkOrder.invoice_id.is_(None))

        total = query.count()
        items = (
            query.order_by(models.WorkOrder.event_date.desc(), models.WorkOrder.created_at.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_work_order(db: Session, user: models.User, work_order_id: str) -> models.WorkOrder:
        work_order = (
            db.query(models.WorkOrder)
            .filter(
                models.WorkOrder.id == work_order_id,
                models.WorkOrder.organization_id == user.organization_id,
            )
            .first()
        )
        if work_order is None:
            raise ResourceNotFoundError("Work order not found")
        return work_order

    @staticmethod
    def _apply_fields(work_order: models.WorkOrder, data: schemas.WorkOrderCreate) -> None:
        values = data.model_dump()
        if values["venue"] != models.Venue.OTHER:
            values["venue_other"] = None
        if values["event_type"] != models.EventType.OTHER:
            values["event_type_other"] = None
        if values["requested_by_id"]:
            values["requested_by_name"] = None
        for field, value in values.items():
            setattr(work_order, field, value)

    @classmethod
    def create_work_order(
        cls, db: Session, user: models.User, data: schemas.WorkOrderCreate
    ) -> models.WorkOrder:
        ensure(can_create_work_orders, user, "You do not have permission to create work orders")

        organization = db.get(models.Organization, user.organization_id)
        rate = Decimal(organization.hourly_rate or 0) if organization else Decimal("0")
        if rate <= 0:
            rate = _default_hourly_rate()

        work_order = models.WorkOrder(
            organization_id=user.organization_id,
            hourly_rate_snapshot=rate,
            actual_hours=Decimal("0"),
            status=models.WorkOrderStatus.DRAFT,
            created_by_id=user.id,
        )
        cls._apply_fields(work_order, data)
        db.add(work_order)
        db.commit()
        db.refresh(work_order)
        LOGGER.info("Created work order %s for organization %s", work_order.id, user.organization_id)
        return work_order

    @classmethod
    def update_work_order(
        cls,
        db: Session,
        user: models.User,
        work_order_id: str,
        data: schemas.WorkOrderCreate,
    ) -> models.WorkOrder:
        ensure(can_edit_work_orders, user, "You do not have permission to edit work orders")
        work_order = cls.get_work_order(db, user, work_order_id)
        if work_order.status not in EDITABLE_STATUSES:
            raise WorkOrderServiceError(
                "Cannot edit approved work orders. Create a change order instead."
            )
        cls._apply_fields(work_order, data)
        db.add(work_order)
        db.commit()
        db.refresh(work_order)
        return work_order

    @classmethod
    def delete_work_order(cls, db: Session, user: models.User, work_order_id: str) -> None:
        ensure(can_delete_work_orders, user, "You do not have permission to delete work orders")
        work_order = cls.get_work_order(db, user, work_order_id)
        if work_order.status != models.WorkOrderStatus.DRAFT:
            raise WorkOrderServiceError("Can only delete draft work orders")
        db.delete(work_order)
        db.commit()

    @classmethod
    def _transition(
        cls,
        db: Session,
        work_order: models.WorkOrder,
        allowed_from: Iterable[models.WorkOrderStatus],
        target: models.WorkOrderStatus,
        message: str,
    ) -> models.WorkOrder:
        if work_order.status not in set(allowed_from):
            raise WorkOrderServiceError(message)
        LOGGER.info(
            "Work order %s: %s -> %s", work_order.id, work_order.status.value, target.value
        )
        work_order.status = target
        db.add(work_order)
        db.commit()
        db.refresh(work_order)
        return work_order

    @classmethod
    def submit_for_approval(
        cls, db: Session, user: models.User, work_order_id: str
    ) -> models.WorkOrder:
        ensure(can_create_work_orders, user, "You do not have permission to submit work orders")
        work_order = cls.get_work_order(db, user, work_order_id)
        return cls._transition(
            db,
            work_order,
            {models.WorkOrderStatus.DRAFT},
            models.WorkOrderStatus.PENDING_APPROVAL,
            "Work order has already been submitted",
        )

    @classmethod
    def approve(cls, db: Session, user: models.User, work_order_id: str) -> models.WorkOrder:
        ensure(can_approve, user, "You do not have permission to approve work orders")
        work_order = cls.get_work_order(db, user, work_order_id)
        return cls._transition(
            db,
            work_order,
            {models.WorkOrderStatus.PENDING_APPROVAL},
            models.WorkOrderStatus.APPROVED,
            "Work order is not awaiting approval",
        )

    @classmethod
    def start(cls, db: Session, user: models.User, work_order_id: str) -> models.WorkOrder:
        ensure(can_create_work_orders, user, "You do not have permission to start work orders")
        work_order = cls.get_work_order(db, user, work_order_id)
        return cls._transition(
            db,
            work_order,
            {models.WorkOrderStatus.APPROVED},
            models.WorkOrderStatus.IN_PROGRESS,
            "Work order must be approved to start",
        )

    @classmethod
    def complete(
        cls,
        db: Session,
        user: models.User,
        work_order_id: str,
        *,
        notes: Optional[str] = None,
    ) -> models.WorkOrder:
        ensure(can_create_work_orders, user, "You do not have permission to complete work orders")
        work_order = cls.get_work_order(db, user, work_order_id)
        if notes and work_order.status in COMPLETABLE_STATUSES:
            prefix = f"{work_order.notes}\n\n" if work_order.notes else ""
            work_order.notes = f"{prefix}Completion notes: {notes}"
        return cls._transition(
            db,
            work_order,
            COMPLETABLE_STATUSES,
            models.WorkOrderStatus.COMPLETED,
            "Work order must be approved or in progress to mark as complete",
        )
