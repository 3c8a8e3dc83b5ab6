"""Router exposing invoice operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..permissions import can_create_invoices, ensure
from ..security import get_current_user
from ..services import BillingPeriodService, InvoiceService
from ..services.billing_periods import Clock, get_clock, to_local_date
from .errors import service_errors

router = APIRouter()


@router.get("/", response_model=schemas.InvoiceListResponse)
def list_invoices(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    skip: int = Query(0, ge=0, description="Number of invoices to skip"),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of invoices to return"),
    status_filter: Optional[models.InvoiceStatus] = Query(
        None, alias="status", description="Filter by invoice status"
    ),
) -> schemas.InvoiceListResponse:
    with service_errors("list invoices"):
        items, total = InvoiceService.list_invoices(
            db, user, status=status_filter, skip=skip, limit=limit
        )
    return schemas.InvoiceListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("/", response_model=schemas.InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_in: schemas.InvoiceCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.InvoiceRead:
    with service_errors("create the invoice"):
        return InvoiceService.create_invoice(db, user, invoice_in, now=clock)


@router.post(
    "/draft-for-period",
    response_model=schemas.DraftForPeriodResponse,
)
def draft_for_period(
    request: schemas.DraftForPeriodRequest,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.DraftForPeriodResponse:
    """Return the draft invoice for a billing window, creating it if needed."""

    with service_errors("prepare the draft invoice"):
        if request.period_key is not None:
            start, end = BillingPeriodService.resolve_period_bounds(request.period_key)
        else:
            start, end = BillingPeriodService.parse_range(request.start, request.end)
        invoice, created = InvoiceService.get_or_create_draft_for_period(
            db, user, start, end, now=clock
        )
    return schemas.DraftForPeriodResponse(
        invoice=schemas.InvoiceRead.model_validate(invoice), created=created
    )


@router.post("/mark-past-due", response_model=schemas.MarkPastDueResponse)
def mark_past_due(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.MarkPastDueResponse:
    with service_errors("mark invoices past due"):
        ensure(can_create_invoices, user, "You do not have permission to manage invoices")
        updated = InvoiceService.mark_past_due(
            db, to_local_date(clock()), organization_id=user.organization_id
        )
    return schemas.MarkPastDueResponse(updated=updated)


@router.get("/{invoice_id}", response_model=schemas.InvoiceRead)
def get_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.InvoiceRead:
    with service_errors("load the invoice"):
        return InvoiceService.get_invoice(db, user, invoice_id)


@router.put("/{invoice_id}", response_model=schemas.InvoiceRead)
def update_invoice(
    invoice_id: str,
    invoice_in: schemas.InvoiceUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.InvoiceRead:
    with service_errors("update the invoice"):
        return InvoiceService.update_invoice(db, user, invoice_id, invoice_in)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> None:
    with service_errors("delete the invoice"):
        InvoiceService.delete_invoice(db, user, invoice_id)


@router.post("/{invoice_id}/add-completed-work", response_model=schemas.AddCompletedWorkResponse)
def add_completed_work(
    invoice_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.AddCompletedWorkResponse:
    with service_errors("add completed work"):
        added, invoice = InvoiceService.add_completed_work(db, user, invoice_id)
    return schemas.AddCompletedWorkResponse(
        added=added, invoice=schemas.InvoiceRead.model_validate(invoice)
    )


@router.post("/{invoice_id}/send", response_model=schemas.InvoiceRead)
def send_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> schemas.InvoiceRead:
    with service_errors("send the invoice"):
        return InvoiceService.send_invoice(db, user, invoice_id, now=clock)


@router.post("/{invoice_id}/payments", response_model=schemas.InvoiceRead)
def record_payment(
    invoice_id: str,
    payment_in: schemas.InvoicePaymentCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.InvoiceRead:
    with service_errors("record the payment"):
        return InvoiceService.record_payment(db, user, invoice_id, payment_in)


@router.get("/{invoice_id}/comments", response_model=list[schemas.InvoiceCommentRead])
def list_invoice_comments(
    invoice_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> list[schemas.InvoiceCommentRead]:
    with service_errors("list invoice comments"):
        return InvoiceService.list_comments(db, user, invoice_id)


@router.post(
    "/{invoice_id}/comments",
    response_model=schemas.InvoiceCommentRead,
    status_code=status.HTTP_201_CREATED,
)
def add_invoice_comment(
    invoice_id: str,
    comment_in: schemas.InvoiceCommentCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> schemas.InvoiceCommentRead:
    with service_errors("add the comment"):
        return InvoiceService.add_comment(db, user, invoice_id, comment_in)
