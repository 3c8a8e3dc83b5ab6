"""Models for invoices, their line items and recorded payments."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, generate_uuid


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    PAST_DUE = "past_due"


class DiscountType(str, enum.Enum):
    FLAT = "flat"
    PERCENTAGE = "percentage"


class Invoice(Base):
    """An invoice issued to an organization, optionally tied to a billing window."""

    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint(
            "period_start IS NULL OR period_end IS NULL OR period_end >= period_start",
            name="ck_invoices_valid_period",
        ),
        CheckConstraint("amount_paid >= 0", name="ck_invoices_amount_paid_non_negative"),
        UniqueConstraint("organization_id", "invoice_number", name="uq_invoices_org_number"),
    )

    id = Column("invoice_id", GUID(), primary_key=True, default=generate_uuid)
    organization_id = Column(
        GUID(),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
    )

    invoice_number = Column(String(50), nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    period_start = Column(Date, nullable=True)
    period_end = Column(Date, nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    discount_type = Column(
        Enum(
            DiscountType,
            name="discount_type_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=True,
    )
    discount_value = Column(Numeric(10, 2), nullable=True)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(10, 2), nullable=False, default=0)
    amount_due = Column(Numeric(10, 2), nullable=False, default=0)

    status = Column(
        Enum(
            InvoiceStatus,
            name="invoice_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=InvoiceStatus.DRAFT,
    )
    notes = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)

    created_by_id = Column(GUID(), ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    organization = relationship("Organization", back_populates="invoices")
    line_items = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.sort_order",
    )
    payments = relationship(
        "InvoicePayment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoicePayment.created_at",
    )
    comments = relationship(
        "InvoiceComment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceComment.created_at",
    )
    work_orders = relationship("WorkOrder", back_populates="invoice")


Index("invoices_org_idx", Invoice.organization_id)
Index("invoices_status_idx", Invoice.status)
Index("invoices_period_idx", Invoice.organization_id, Invoice.period_start, Invoice.period_end)


class InvoiceLineItem(Base):
    """A single billable row on an invoice."""

    __tablename__ = "invoice_line_items"

    id = Column("line_item_id", GUID(), primary_key=True, default=generate_uuid)
    invoice_id = Column(
        GUID(),
        ForeignKey("invoices.invoice_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description = Column(String(500), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)

    work_order_id = Column(
        GUID(),
        ForeignKey("work_orders.work_order_id", ondelete="SET NULL"),
        nullable=True,
    )
    is_retainer = Column(Boolean, nullable=False, default=False)
    is_custom = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    invoice = relationship("Invoice", back_populates="line_items")


class InvoicePayment(Base):
    """A payment applied against an invoice balance."""

    __tablename__ = "invoice_payments"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_invoice_payments_amount_positive"),)

    id = Column("payment_id", GUID(), primary_key=True, default=generate_uuid)
    invoice_id = Column(
        GUID(),
        ForeignKey("invoices.invoice_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(50), nullable=True)
    reference = Column(String(255), nullable=True)
    paid_by_id = Column(GUID(), ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    invoice = relationship("Invoice", back_populates="payments")


class InvoiceComment(Base):
    """A threaded remark on an invoice or one of its lines.

    Internal comments are visible to provider staff only.
    """

    __tablename__ = "invoice_comments"

    id = Column("comment_id", GUID(), primary_key=True, default=generate_uuid)
    invoice_id = Column(
        GUID(),
        ForeignKey("invoices.invoice_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_item_id = Column(
        GUID(),
        ForeignKey("invoice_line_items.line_item_id", ondelete="SET NULL"),
        nullable=True,
    )
    parent_id = Column(
        GUID(),
        ForeignKey("invoice_comments.comment_id", ondelete="SET NULL"),
        nullable=True,
    )
    author_user_id = Column(GUID(), ForeignKey("users.user_id"), nullable=False)
    author_name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    is_internal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    invoice = relationship("Invoice", back_populates="comments")
