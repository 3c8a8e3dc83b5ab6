"""Router exposing incident report operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..security import get_current_user
from ..services import IncidentReportService
from ..services.billing_periods import Clock, get_clock
from .errors import service_errors

router = APIRouter()


@router.get("/", response_model=schemas.IncidentReportListResponse)
def list_incident_reports(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    work_order_id: Optional[str] = Query(None, description="Filter by work order"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> schemas.IncidentReportListResponse:
    items, total = IncidentReportService.list_incident_reports(
        db, user, work_order_id=work_order_id, skip=skip, limit=limit
    )
    return schemas.IncidentReportListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post(
    "/", response_model=schemas.IncidentReportRead, status_code=status.HTTP_201_CREATED
)
def create_incident_report(
    report_in: schemas.IncidentReportCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.IncidentReportRead:
    with service_errors("report the incident"):
        return IncidentReportService.create_incident_report(db, user, report_in, now=clock)


@router.get("/{report_id}", response_model=schemas.IncidentReportRead)
def get_incident_report(
    report_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.IncidentReportRead:
    with service_errors("load the incident report"):
        return IncidentReportService.get_incident_report(db, user, report_id)


@router.put("/{report_id}", response_model=schemas.IncidentReportRead)
def update_incident_report(
    report_id: str,
    report_in: schemas.IncidentReportUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.IncidentReportRead:
    with service_errors("update the incident report"):
        return IncidentReportService.update_incident_report(
            db, user, report_id, report_in, now=clock
        )


@router.post("/{report_id}/client-notified", response_model=schemas.IncidentReportRead)
def mark_client_notified(
    report_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.IncidentReportRead:
    with service_errors("update the incident report"):
        return IncidentReportService.mark_client_notified(db, user, report_id, now=clock)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_incident_report(
    report_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> None:
    with service_errors("delete the incident report"):
        IncidentReportService.delete_incident_report(db, user, report_id)
