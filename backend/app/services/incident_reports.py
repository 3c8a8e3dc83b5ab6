"""Business logic for incident reports filed against work orders."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from .. import models, schemas
from ..permissions import can_manage_incident_reports, ensure
from .billing_periods import Clock, DateLike, resolve_now
from .errors import ResourceNotFoundError
from .work_orders import WorkOrderService

LOGGER = logging.getLogger(__name__)

REQUIRED_FIELDS = frozenset({"incident_type", "root_cause", "mitigation", "outcome"})


class IncidentReportService:
    """File, amend and list incident reports of the caller's organization."""

    @staticmethod
    def _scoped_query(db: Session, user: models.User):
        return (
            db.query(models.IncidentReport)
            .join(models.IncidentReport.work_order)
            .options(joinedload(models.IncidentReport.work_order))
            .filter(models.WorkOrder.organization_id == user.organization_id)
        )

    @classmethod
    def list_incident_reports(
        cls,
        db: Session,
        user: models.User,
        *,
        work_order_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[Iterable[models.IncidentReport], int]:
        query = cls._scoped_query(db, user)
        if work_order_id:
            query = query.filter(models.IncidentReport.work_order_id == work_order_id)

        total = query.count()
        items = (
            query.order_by(models.IncidentReport.created_at.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @classmethod
    def get_incident_report(
        cls, db: Session, user: models.User, report_id: str
    ) -> models.IncidentReport:
        report = cls._scoped_query(db, user).filter(models.IncidentReport.id == report_id).first()
        if report is None:
            raise ResourceNotFoundError("Incident report not found")
        return report

    @staticmethod
    def create_incident_report(
        db: Session,
        user: models.User,
        data: schemas.IncidentReportCreate,
        *,
        now: DateLike | Clock | None = None,
    ) -> models.IncidentReport:
        ensure(can_manage_incident_reports, user, "You do not have permission to report incidents")
        work_order = WorkOrderService.get_work_order(db, user, data.work_order_id)

        values = data.model_dump(exclude={"work_order_id"})
        if data.incident_type != models.IncidentType.OTHER:
            values["incident_type_other"] = None
        report = models.IncidentReport(
            **values,
            work_order_id=work_order.id,
            client_notified_at=resolve_now(now) if data.client_notified else None,
            reported_by_id=user.id,
        )
        db.add(report)
        db.commit()
        db.refresh(report)
        LOGGER.info(
            "Incident %s reported on work order %s", report.incident_type.value, work_order.id
        )
        return report

    @classmethod
    def update_incident_report(
        cls,
        db: Session,
        user: models.User,
        report_id: str,
        data: schemas.IncidentReportUpdate,
        *,
        now: DateLike | Clock | None = None,
    ) -> models.IncidentReport:
        ensure(can_manage_incident_reports, user, "You do not have permission to edit incidents")
        report = cls.get_incident_report(db, user, report_id)
        updates = data.model_dump(exclude_unset=True)

        notified = updates.pop("client_notified", None)
        incident_type = updates.get("incident_type") or report.incident_type
        other = updates.get("incident_type_other", report.incident_type_other)
        if incident_type == models.IncidentType.OTHER and not other:
            raise ValueError("Describe the incident when its type is 'other'")

        for field, value in updates.items():
            if field in REQUIRED_FIELDS and value is None:
                continue
            setattr(report, field, value)
        if report.incident_type != models.IncidentType.OTHER:
            report.incident_type_other = None
        if notified is not None:
            if notified and not report.client_notified:
                report.client_notified_at = resolve_now(now)
            report.client_notified = notified

        db.add(report)
        db.commit()
        db.refresh(report)
        return report

    @classmethod
    def mark_client_notified(
        cls,
        db: Session,
        user: models.User,
        report_id: str,
        *,
        now: DateLike | Clock | None = None,
    ) -> models.IncidentReport:
        ensure(can_manage_incident_reports, user, "You do not have permission to edit incidents")
        report = cls.get_incident_report(db, user, report_id)
        report.client_notified = True
        report.client_notified_at = resolve_now(now)
        db.add(report)
        db.commit()
        db.refresh(report)
        return report

    @classmethod
    def delete_incident_report(cls, db: Session, user: models.User, report_id: str) -> None:
        ensure(can_manage_incident_reports, user, "You do not have permission to delete incidents")
        report = cls.get_incident_report(db, user, report_id)
        report.work_order.incident_reports.remove(report)
        db.commit()
