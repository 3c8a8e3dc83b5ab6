"""Expose SQLAlchemy models for convenient imports."""

from .incident_report import IncidentOutcome, IncidentReport, IncidentType, RootCause
from .invoice import (
    DiscountType,
    Invoice,
    InvoiceComment,
    InvoiceLineItem,
    InvoicePayment,
    InvoiceStatus,
)
from .organization import Organization
from .user import CLIENT_ROLES, PROVIDER_ROLES, User, UserRole
from .work_order import (
    EstimateType,
    EventType,
    TimeLog,
    TimeLogCategory,
    Venue,
    WorkOrder,
    WorkOrderStatus,
)

__all__ = [
    "CLIENT_ROLES",
    "DiscountType",
    "EstimateType",
    "EventType",
    "IncidentOutcome",
    "IncidentReport",
    "IncidentType",
    "Invoice",
    "InvoiceComment",
    "InvoiceLineItem",
    "InvoicePayment",
    "InvoiceStatus",
    "Organization",
    "PROVIDER_ROLES",
    "RootCause",
    "TimeLog",
    "TimeLogCategory",
    "User",
    "UserRole",
    "Venue",
    "WorkOrder",
    "WorkOrderStatus",
]
