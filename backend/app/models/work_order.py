"""Models describing work orders and the time logged against them."""

from __future__ import annotations

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, generate_uuid


def _enum_column_type(enum_cls: type[enum.Enum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
    )


class WorkOrderStatus(str, enum.Enum):
    """Lifecycle of a work order from request to payment."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    INVOICED = "invoiced"
    PAID = "paid"


class Venue(str, enum.Enum):
    CHURCH = "church"
    MEANEY_HALL_GYM = "meaney_hall_gym"
    LIBRARY = "library"
    ROOM_102_103 = "room_102_103"
    OTHER = "other"


class EventType(str, enum.Enum):
    FUNERAL = "funeral"
    MASS_ADDITIONAL = "mass_additional"
    CONCERT = "concert"
    RETREAT = "retreat"
    CHRISTLIFE = "christlife"
    MAINTENANCE = "maintenance"
    EMERGENCY = "emergency"
    OTHER = "other"


class EstimateType(str, enum.Enum):
    RANGE = "range"
    FIXED = "fixed"
    NOT_TO_EXCEED = "not_to_exceed"


class TimeLogCategory(str, enum.Enum):
    ON_SITE = "on_site"
    REMOTE = "remote"
    POST_PRODUCTION = "post_production"
    ADMIN = "admin"


class WorkOrder(Base):
    """An event the provider staffs for a client organization."""

    __tablename__ = "work_orders"
    __table_args__ = (
        CheckConstraint("actual_hours >= 0", name="ck_work_orders_actual_hours_non_negative"),
        CheckConstraint(
            "hourly_rate_snapshot >= 0", name="ck_work_orders_hourly_rate_non_negative"
        ),
    )

    id = Column("work_order_id", GUID(), primary_key=True, default=generate_uuid)
    organization_id = Column(
        GUID(),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
    )

    event_name = Column(String(255), nullable=False)
    event_date = Column(Date, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    venue = Column(_enum_column_type(Venue, "venue_enum"), nullable=False)
    venue_other = Column(String(255), nullable=True)
    event_type = Column(_enum_column_type(EventType, "event_type_enum"), nullable=False)
    event_type_other = Column(String(255), nullable=True)

    requested_by_id = Column(GUID(), ForeignKey("users.user_id"), nullable=True)
    requested_by_name = Column(String(255), nullable=True)
    authorized_approver_id = Column(GUID(), ForeignKey("users.user_id"), nullable=True)

    estimate_type = Column(
        _enum_column_type(EstimateType, "estimate_type_enum"),
        nullable=False,
        default=EstimateType.RANGE,
    )
    estimated_hours_min = Column(Numeric(5, 2), nullable=True)
    estimated_hours_max = Column(Numeric(5, 2), nullable=True)
    estimated_hours_fixed = Column(Numeric(5, 2), nullable=True)
    estimated_hours_nte = Column(Numeric(5, 2), nullable=True)
    custom_scope = Column(Text, nullable=True)

    actual_hours = Column(Numeric(10, 2), nullable=False, default=0)
    hourly_rate_snapshot = Column(Numeric(10, 2), nullable=False)

    notes = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)
    status = Column(
        _enum_column_type(WorkOrderStatus, "work_order_status_enum"),
        nullable=False,
        default=WorkOrderStatus.DRAFT,
    )

    invoice_id = Column(
        GUID(),
        ForeignKey("invoices.invoice_id", ondelete="SET NULL"),
        nullable=True,
    )
    created_by_id = Column(GUID(), ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    organization = relationship("Organization", back_populates="work_orders")
    invoice = relationship("Invoice", back_populates="work_orders")
    created_by = relationship("User", foreign_keys=[created_by_id])
    time_logs = relationship(
        "TimeLog",
        back_populates="work_order",
        cascade="all, delete-orphan",
        order_by="TimeLog.log_date",
    )
    incident_reports = relationship(
        "IncidentReport",
        back_populates="work_order",
        cascade="all, delete-orphan",
        order_by="IncidentReport.created_at",
    )


Index("work_orders_org_idx", WorkOrder.organization_id)
Index("work_orders_status_idx", WorkOrder.status)
Index("work_orders_date_idx", WorkOrder.event_date)


class TimeLog(Base):
    """Hours a staff member spent on a work order on a given day."""

    __tablename__ = "time_logs"
    __table_args__ = (CheckConstraint("hours > 0", name="ck_time_logs_hours_positive"),)

    id = Column("time_log_id", GUID(), primary_key=True, default=generate_uuid)
    work_order_id = Column(
        GUID(),
        ForeignKey("work_orders.work_order_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    log_date = Column(Date, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    hours = Column(Numeric(5, 2), nullable=False)
    category = Column(
        _enum_column_type(TimeLogCategory, "time_log_category_enum"), nullable=False
    )
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    logged_by_id = Column(GUID(), ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    work_order = relationship("WorkOrder", back_populates="time_logs")
    logged_by = relationship("User")
