"""Routers package."""

from .auth import router as auth_router
from .billing_periods import router as billing_periods_router
from .incident_reports import router as incident_reports_router
from .invoices import router as invoices_router
from .organization import router as organization_router
from .time_logs import router as time_logs_router
from .users import router as users_router
from .work_orders import router as work_orders_router

__all__ = [
    "auth_router",
    "billing_periods_router",
    "incident_reports_router",
    "invoices_router",
    "organization_router",
    "time_logs_router",
    "users_router",
    "work_orders_router",
]
