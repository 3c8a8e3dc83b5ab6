"""Schemas for work orders and time logs."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.work_order import (
    EstimateType,
    EventType,
    TimeLogCategory,
    Venue,
    WorkOrderStatus,
)
from .common import PaginatedResponse


class WorkOrderBase(BaseModel):
    event_name: str = Field(..., min_length=1, max_length=255)
    event_date: date
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    venue: Venue
    venue_other: Optional[str] = Field(default=None, max_length=255)
    event_type: EventType
    event_type_other: Optional[str] = Field(default=None, max_length=255)
    requested_by_id: Optional[str] = None
    requested_by_name: Optional[str] = Field(default=None, max_length=255)
    authorized_approver_id: Optional[str] = None
    estimate_type: EstimateType = EstimateType.RANGE
    estimated_hours_min: Optional[Decimal] = Field(default=None, ge=0)
    estimated_hours_max: Optional[Decimal] = Field(default=None, ge=0)
    estimated_hours_fixed: Optional[Decimal] = Field(default=None, ge=0)
    estimated_hours_nte: Optional[Decimal] = Field(default=None, ge=0)
    custom_scope: Optional[str] = None
    notes: Optional[str] = None
    internal_notes: Optional[str] = None


class WorkOrderCreate(WorkOrderBase):
    """Schema used to create or fully replace a work order."""

    @model_validator(mode="after")
    def _validate(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if (
            self.estimate_type == EstimateType.RANGE
            and self.estimated_hours_min is not None
            and self.estimated_hours_max is not None
            and self.estimated_hours_min > self.estimated_hours_max
        ):
            raise ValueError("estimated_hours_min cannot exceed estimated_hours_max")
        return self


class WorkOrderRead(WorkOrderBase):
    id: str
    organization_id: str
    status: WorkOrderStatus
    actual_hours: Decimal
    hourly_rate_snapshot: Decimal
    invoice_id: Optional[str] = None
    created_by_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkOrderListResponse(PaginatedResponse[WorkOrderRead]):
    pass


class WorkOrderCompleteRequest(BaseModel):
    notes: Optional[str] = None


def _check_times(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start and end and end <= start:
        raise ValueError("end_time must be after start_time")


class TimeLogCreate(BaseModel):
    work_order_id: str
    log_date: date
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    hours: Decimal = Field(..., gt=0, le=24)
    category: TimeLogCategory
    description: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _validate(self):
        _check_times(self.start_time, self.end_time)
        return self


class TimeLogUpdate(BaseModel):
    log_date: Optional[date] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    hours: Optional[Decimal] = Field(default=None, gt=0, le=24)
    category: Optional[TimeLogCategory] = None
    description: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _validate(self):
        _check_times(self.start_time, self.end_time)
        return self


class TimeLogRead(BaseModel):
    id: str
    work_order_id: str
    log_date: date
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    hours: Decimal
    category: TimeLogCategory
    description: Optional[str] = None
    notes: Optional[str] = None
    logged_by_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TimeLogListResponse(PaginatedResponse[TimeLogRead]):
    pass
