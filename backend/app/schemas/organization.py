from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OrganizationRead(BaseModel):
    id: str
    name: str
    slug: str
    invoice_prefix: str
    next_invoice_number: int
    hourly_rate: Decimal
    monthly_retainer: Decimal
    payment_terms: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrganizationUpdate(BaseModel):
    """Billing and contact settings editable by provider administrators."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    invoice_prefix: Optional[str] = Field(default=None, min_length=1, max_length=10)
    next_invoice_number: Optional[int] = Field(default=None, ge=1)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    monthly_retainer: Optional[Decimal] = Field(default=None, ge=0)
    payment_terms: Optional[str] = Field(default=None, min_length=1, max_length=100)
    address: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
