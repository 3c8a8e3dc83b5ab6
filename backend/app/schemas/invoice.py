"""Schemas for invoices, line items and payments."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.invoice import DiscountType, InvoiceStatus
from .common import PaginatedResponse


class LineItemInput(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(..., description="Hours or units billed")
    unit_price: Decimal = Field(..., description="Price per unit in USD")
    work_order_id: Optional[str] = None
    is_retainer: bool = False
    is_custom: bool = False

    @field_validator("work_order_id")
    @classmethod
    def _normalize_work_order_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            return str(UUID(value))
        except ValueError as exc:
            raise ValueError("work_order_id must be a UUID") from exc


def _check_period(start: Optional[date], end: Optional[date]) -> None:
    if start and end and start > end:
        raise ValueError("period_start cannot be after period_end")


def _check_discount(discount_type: Optional[DiscountType], value: Optional[Decimal]) -> None:
    if discount_type == DiscountType.PERCENTAGE and value is not None and value > 100:
        raise ValueError("A percentage discount cannot exceed 100")


class InvoiceCreate(BaseModel):
    """Payload to create an invoice from explicit line items."""

    period_start: Optional[date] = None
    period_end: Optional[date] = None
    work_order_ids: list[str] = Field(default_factory=list)
    line_items: list[LineItemInput] = Field(default_factory=list)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, ge=0)
    include_retainer: bool = Field(
        default=False,
        description="Append the retainer pro-rated over the half-month periods of the window",
    )
    notes: Optional[str] = None
    internal_notes: Optional[str] = None

    @model_validator(mode="after")
    def _validate(self):
        _check_period(self.period_start, self.period_end)
        _check_discount(self.discount_type, self.discount_value)
        if self.include_retainer and not (self.period_start and self.period_end):
            raise ValueError("A billing window is required to include the retainer")
        return self


class InvoiceUpdate(BaseModel):
    """Partial update of a draft invoice."""

    period_start: Optional[date] = None
    period_end: Optional[date] = None
    due_date: Optional[date] = None
    line_items: Optional[list[LineItemInput]] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    internal_notes: Optional[str] = None

    @model_validator(mode="after")
    def _validate(self):
        _check_period(self.period_start, self.period_end)
        _check_discount(self.discount_type, self.discount_value)
        return self


class LineItemRead(BaseModel):
    id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    work_order_id: Optional[str] = None
    is_retainer: bool
    is_custom: bool
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class InvoicePaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_method: Optional[str] = Field(default=None, max_length=50)
    reference: Optional[str] = Field(default=None, max_length=255)


class InvoicePaymentRead(InvoicePaymentCreate):
    id: str
    invoice_id: str
    paid_by_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceRead(BaseModel):
    id: str
    organization_id: str
    invoice_number: str
    invoice_date: date
    due_date: Optional[date] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    subtotal: Decimal
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = None
    discount_amount: Decimal
    total: Decimal
    amount_paid: Decimal
    amount_due: Decimal
    status: InvoiceStatus
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    line_items: list[LineItemRead] = Field(default_factory=list)
    payments: list[InvoicePaymentRead] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceListResponse(PaginatedResponse[InvoiceRead]):
    """Paginated invoice listing."""

    pass


class DraftForPeriodRequest(BaseModel):
    """Identify a billing window either by period key or explicit bounds."""

    period_key: Optional[str] = Field(default=None, description="Period start as YYYY-MM-DD")
    start: Optional[date] = None
    end: Optional[date] = None

    @model_validator(mode="after")
    def _validate(self):
        if self.period_key is None and (self.start is None or self.end is None):
            raise ValueError("Provide period_key or both start and end")
        _check_period(self.start, self.end)
        return self


class DraftForPeriodResponse(BaseModel):
    invoice: InvoiceRead
    created: bool


class AddCompletedWorkResponse(BaseModel):
    added: int = Field(..., ge=0)
    invoice: InvoiceRead


class MarkPastDueResponse(BaseModel):
    updated: int = Field(..., ge=0)


class InvoiceCommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: Optional[str] = None
    line_item_id: Optional[str] = None
    is_internal: bool = False


class InvoiceCommentRead(BaseModel):
    id: str
    invoice_id: str
    line_item_id: Optional[str] = None
    parent_id: Optional[str] = None
    author_user_id: str
    author_name: str
    content: str
    is_internal: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
