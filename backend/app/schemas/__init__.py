"""Expose Pydantic schemas for convenient imports."""

from .auth import LoginRequest, TokenResponse
from .common import PaginatedResponse
from .incident_report import (
    IncidentReportCreate,
    IncidentReportListResponse,
    IncidentReportRead,
    IncidentReportUpdate,
)
from .invoice import (
    AddCompletedWorkResponse,
    DraftForPeriodRequest,
    DraftForPeriodResponse,
    InvoiceCommentCreate,
    InvoiceCommentRead,
    InvoiceCreate,
    InvoiceListResponse,
    InvoicePaymentCreate,
    InvoicePaymentRead,
    InvoiceRead,
    InvoiceUpdate,
    LineItemInput,
    LineItemRead,
    MarkPastDueResponse,
)
from .billing_period import (
    BillingPeriodOverview,
    BillingPeriodRead,
    PeriodBoundsRead,
    PeriodCountRead,
    PeriodProjection,
)
from .organization import OrganizationRead, OrganizationUpdate
from .user import UserCreate, UserListResponse, UserRead, UserUpdate
from .work_order import (
    TimeLogCreate,
    TimeLogListResponse,
    TimeLogRead,
    TimeLogUpdate,
    WorkOrderCompleteRequest,
    WorkOrderCreate,
    WorkOrderListResponse,
    WorkOrderRead,
)

__all__ = [
    "AddCompletedWorkResponse",
    "BillingPeriodOverview",
    "BillingPeriodRead",
    "DraftForPeriodRequest",
    "DraftForPeriodResponse",
    "IncidentReportCreate",
    "IncidentReportListResponse",
    "IncidentReportRead",
    "IncidentReportUpdate",
    "InvoiceCommentCreate",
    "InvoiceCommentRead",
    "InvoiceCreate",
    "InvoiceListResponse",
    "InvoicePaymentCreate",
    "InvoicePaymentRead",
    "InvoiceRead",
    "InvoiceUpdate",
    "LineItemInput",
    "LineItemRead",
    "LoginRequest",
    "MarkPastDueResponse",
    "OrganizationRead",
    "OrganizationUpdate",
    "PaginatedResponse",
    "PeriodBoundsRead",
    "PeriodCountRead",
    "PeriodProjection",
    "TimeLogCreate",
    "TimeLogListResponse",
    "TimeLogRead",
    "TimeLogUpdate",
    "TokenResponse",
    "UserCreate",
    "UserListResponse",
    "UserRead",
    "UserUpdate",
    "WorkOrderCompleteRequest",
    "WorkOrderCreate",
    "WorkOrderListResponse",
    "WorkOrderRead",
]
