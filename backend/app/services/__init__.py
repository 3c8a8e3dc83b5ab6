"""Service layer encapsulating business logic for API routers."""

from .billing_periods import BillingPeriodService, InvalidPeriodKeyError
from .errors import ResourceNotFoundError, ServiceStateError
from .incident_reports import IncidentReportService
from .invoices import InvoiceService, InvoiceServiceError, InvoiceTotals
from .organizations import OrganizationService
from .time_logs import TimeLogService, TimeLogServiceError
from .users import UserService, UserServiceError
from .work_orders import WorkOrderService, WorkOrderServiceError

__all__ = [
    "BillingPeriodService",
    "IncidentReportService",
    "InvalidPeriodKeyError",
    "InvoiceService",
    "InvoiceServiceError",
    "InvoiceTotals",
    "OrganizationService",
    "ResourceNotFoundError",
    "ServiceStateError",
    "TimeLogService",
    "TimeLogServiceError",
    "UserService",
    "UserServiceError",
    "WorkOrderService",
    "WorkOrderServiceError",
]
