"""Schemas for incident reports."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.incident_report import IncidentOutcome, IncidentType, RootCause
from .common import PaginatedResponse


class IncidentReportCreate(BaseModel):
    work_order_id: str
    incident_type: IncidentType
    incident_type_other: Optional[str] = Field(default=None, max_length=255)
    root_cause: RootCause
    mitigation: str = Field(..., min_length=1)
    outcome: IncidentOutcome
    notes: Optional[str] = None
    client_notified: bool = False

    @model_validator(mode="after")
    def _validate(self):
        if self.incident_type == IncidentType.OTHER and not self.incident_type_other:
            raise ValueError("Describe the incident when its type is 'other'")
        return self


class IncidentReportUpdate(BaseModel):
    incident_type: Optional[IncidentType] = None
    incident_type_other: Optional[str] = Field(default=None, max_length=255)
    root_cause: Optional[RootCause] = None
    mitigation: Optional[str] = Field(default=None, min_length=1)
    outcome: Optional[IncidentOutcome] = None
    notes: Optional[str] = None
    client_notified: Optional[bool] = None


class IncidentReportRead(BaseModel):
    id: str
    work_order_id: str
    work_order_event_name: str
    work_order_event_date: date
    incident_type: IncidentType
    incident_type_other: Optional[str] = None
    root_cause: RootCause
    mitigation: str
    outcome: IncidentOutcome
    notes: Optional[str] = None
    client_notified: bool
    client_notified_at: Optional[datetime] = None
    reported_by_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class IncidentReportListResponse(PaginatedResponse[IncidentReportRead]):
    pass
