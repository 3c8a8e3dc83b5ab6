"""Schemas describing semi-monthly billing periods."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .invoice import InvoiceRead


class BillingPeriodRead(BaseModel):
    start: date
    end: date
    label: str = Field(..., description="Human readable label, e.g. 'Jan 1-15, 2026'")
    key: str = Field(..., description="Stable identifier, the start date as YYYY-MM-DD")

    model_config = ConfigDict(from_attributes=True)


class PeriodBoundsRead(BaseModel):
    key: str
    start: date
    end: date


class PeriodCountRead(BaseModel):
    start: date
    end: date
    count: int = Field(..., ge=0, description="Half-month periods touched by the range")


class PeriodProjection(BaseModel):
    """Billing snapshot for one period on the dashboard."""

    period: BillingPeriodRead
    projected: Decimal = Field(..., description="Half retainer plus uninvoiced completed work")
    work_order_count: int = Field(..., ge=0)
    invoice: Optional[InvoiceRead] = None


class BillingPeriodOverview(BaseModel):
    current: PeriodProjection
    next: PeriodProjection
