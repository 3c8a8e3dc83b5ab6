"""SQLAlchemy model for client organizations (tenants)."""

from __future__ import annotations


from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, generate_uuid


class Organization(Base):
    """A client organization; every user, work order and invoice belongs to one."""

    __tablename__ = "organizations"
    __table_args__ = (
        CheckConstraint("next_invoice_number >= 1", name="ck_organizations_next_invoice_number"),
        CheckConstraint("hourly_rate >= 0", name="ck_organizations_hourly_rate_non_negative"),
        CheckConstraint(
            "monthly_retainer >= 0", name="ck_organizations_monthly_retainer_non_negative"
        ),
    )

    id = Column("organization_id", GUID(), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)

    invoice_prefix = Column(String(10), nullable=False, default="INV")
    next_invoice_number = Column(Integer, nullable=False, default=1)
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    monthly_retainer = Column(Numeric(10, 2), nullable=False, default=0)
    payment_terms = Column(String(100), nullable=False, default="Due on Receipt")

    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    users = relationship("User", back_populates="organization")
    work_orders = relationship("WorkOrder", back_populates="organization")
    invoices = relationship("Invoice", back_populates="organization")
