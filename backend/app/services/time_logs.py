"""Business logic for time logs and work order hour totals."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas
from ..permissions import can_create_time_logs, ensure
from .errors import ResourceNotFoundError, ServiceStateError
from .work_orders import WorkOrderService

LOGGABLE_STATUSES = frozenset(
    {
        models.WorkOrderStatus.DRAFT,
        models.WorkOrderStatus.PENDING_APPROVAL,
        models.WorkOrderStatus.APPROVED,
        models.WorkOrderStatus.IN_PROGRESS,
        models.WorkOrderStatus.COMPLETED,
    }
)


class TimeLogServiceError(ServiceStateError):
    """Raised when time cannot be logged against a work order."""


class TimeLogService:
    """Create, edit and list time logs, keeping ``actual_hours`` in sync."""

    @staticmethod
    def refresh_actual_hours(db: Session, work_order: models.WorkOrder) -> Decimal:
        db.flush()
        total = (
            db.query(func.coalesce(func.sum(models.TimeLog.hours), 0))
            .filter(models.TimeLog.work_order_id == work_order.id)
            .scalar()
        )
        work_order.actual_hours = Decimal(str(total)).quantize(Decimal("0.01"))
        db.add(work_order)
        return work_order.actual_hours

    @staticmethod
    def list_time_logs(
        db: Session,
        user: models.User,
        *,
        work_order_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[Iterable[models.TimeLog], int]:
        query = (
            db.query(models.TimeLog)
            .join(models.TimeLog.work_order)
            .filter(models.WorkOrder.organization_id == user.organization_id)
        )
        if work_order_id:
            query = query.filter(models.TimeLog.work_order_id == work_order_id)

        total = query.count()
        items = (
            query.order_by(models.TimeLog.log_date.desc(), models.TimeLog.created_at.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_time_log(db: Session, user: models.User, time_log_id: str) -> models.TimeLog:
        time_log = (
            db.query(models.TimeLog)
            .join(models.TimeLog.work_order)
            .filter(
                models.TimeLog.id == time_log_id,
                models.WorkOrder.organization_id == user.organization_id,
            )
            .first()
        )
        if time_log is None:
            raise ResourceNotFoundError("Time log not found")
        return time_log

    @classmethod
    def create_time_log(
        cls, db: Session, user: models.User, data: schemas.TimeLogCreate
    ) -> models.TimeLog:
        ensure(can_create_time_logs, user, "You do not have permission to log time")
        work_order = WorkOrderService.get_work_order(db, user, data.work_order_id)
        if work_order.status not in LOGGABLE_STATUSES:
            raise TimeLogServiceError("Cannot add time logs to this work order")

        time_log = models.TimeLog(**data.model_dump(), logged_by_id=user.id)
        db.add(time_log)
        cls.refresh_actual_hours(db, work_order)
        db.commit()
        db.refresh(time_log)
        return time_log

    @classmethod
    def update_time_log(
        cls,
        db: Session,
        user: models.User,
        time_log_id: str,
        data: schemas.TimeLogUpdate,
    ) -> models.TimeLog:
        ensure(can_create_time_logs, user, "You do not have permission to edit time logs")
        time_log = cls.get_time_log(db, user, time_log_id)
        updates = data.model_dump(exclude_unset=True)

        start = updates.get("start_time", time_log.start_time)
        end = updates.get("end_time", time_log.end_time)
        if start and end and end <= start:
            raise ValueError("end_time must be after start_time")

        for field, value in updates.items():
            if field in {"hours", "category", "log_date"} and value is None:
                continue
            setattr(time_log, field, value)
        db.add(time_log)
        cls.refresh_actual_hours(db, time_log.work_order)
        db.commit()
        db.refresh(time_log)
        return time_log

    @classmethod
    def delete_time_log(cls, db: Session, user: models.User, time_log_id: str) -> None:
        ensure(can_create_time_logs, user, "You do not have permission to delete time logs")
        time_log = cls.get_time_log(db, user, time_log_id)
        work_order = time_log.work_order
        work_order.time_logs.remove(time_log)
        cls.refresh_actual_hours(db, work_order)
        db.commit()
