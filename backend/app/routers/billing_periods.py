"""Router exposing semi-monthly billing period lookups."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..security import get_current_user
from ..services import BillingPeriodService, InvoiceService
from ..services.billing_periods import Clock, get_clock
from .errors import service_errors

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/current", response_model=schemas.BillingPeriodRead)
def read_current_period(clock: Clock = Depends(get_clock)) -> schemas.BillingPeriodRead:
    return schemas.BillingPeriodRead.model_validate(BillingPeriodService.current_period(clock))


@router.get("/next", response_model=schemas.BillingPeriodRead)
def read_next_period(clock: Clock = Depends(get_clock)) -> schemas.BillingPeriodRead:
    return schemas.BillingPeriodRead.model_validate(BillingPeriodService.next_period(clock))


@router.get("/for-date", response_model=schemas.BillingPeriodRead)
def read_period_for_date(
    target: date = Query(..., alias="date", description="Calendar date (YYYY-MM-DD)"),
) -> schemas.BillingPeriodRead:
    return schemas.BillingPeriodRead.model_validate(BillingPeriodService.period_for_date(target))


@router.get("/count", response_model=schemas.PeriodCountRead)
def count_periods(
    start: date = Query(..., description="First day of the range (inclusive)"),
    end: date = Query(..., description="Last day of the range (inclusive)"),
) -> schemas.PeriodCountRead:
    """Return how many half-month periods the range touches."""

    with service_errors("count billing periods"):
        start, end = BillingPeriodService.parse_range(start, end)
    count = BillingPeriodService.count_overlapping_periods(start, end)
    return schemas.PeriodCountRead(start=start, end=end, count=count)


@router.get("/overview", response_model=schemas.BillingPeriodOverview)
def read_billing_overview(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.BillingPeriodOverview:
    """Projected billing for the current and next periods."""

    with service_errors("load the billing overview"):
        overview = InvoiceService.billing_period_overview(db, user, now=clock)

    def _projection(entry: dict) -> schemas.PeriodProjection:
        invoice = entry["invoice"]
        return schemas.PeriodProjection(
            period=schemas.BillingPeriodRead.model_validate(entry["period"]),
            projected=entry["projected"],
            work_order_count=entry["work_order_count"],
            invoice=schemas.InvoiceRead.model_validate(invoice) if invoice else None,
        )

    return schemas.BillingPeriodOverview(
        current=_projection(overview["current"]),
        next=_projection(overview["next"]),
    )


@router.get("/{period_key}", response_model=schemas.PeriodBoundsRead)
def read_period_bounds(period_key: str) -> schemas.PeriodBoundsRead:
    """Resolve a period key (its start date) into inclusive bounds."""

    with service_errors("resolve the billing period"):
        start, end = BillingPeriodService.resolve_period_bounds(period_key)
    return schemas.PeriodBoundsRead(key=start.isoformat(), start=start, end=end)
