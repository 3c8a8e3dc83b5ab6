"""Business logic for invoices, retainer pro-rating and period drafts."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..permissions import (
    can_create_invoices,
    can_pay,
    can_see_internal_comments,
    can_view_invoices,
    ensure,
)
from .billing_periods import (
    BillingPeriod,
    Clock,
    DateLike,
    count_overlapping_periods,
    current_period,
    next_period,
    period_for_date,
    resolve_now,
    to_local_date,
)
from .errors import ResourceNotFoundError, ServiceStateError

LOGGER = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
NET_TERMS_PATTERN = re.compile(r"^\s*net\s+(\d+)\s*$", re.IGNORECASE)
PAYABLE_STATUSES = frozenset({models.InvoiceStatus.SENT, models.InvoiceStatus.PAST_DUE})


class InvoiceServiceError(ServiceStateError):
    """Raised when an invoice operation violates its lifecycle rules."""


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_line_amount(quantity, unit_price) -> Decimal:
    """Return ``quantity * unit_price`` rounded half-up to cents."""

    return _money(Decimal(str(quantity)) * Decimal(str(unit_price)))


def compute_totals(
    amounts: Iterable,
    discount_type: Optional[models.DiscountType] = None,
    discount_value=None,
) -> InvoiceTotals:
    """Compute subtotal, discount and total for a set of line amounts.

    The discount never exceeds the subtotal, so the total is never negative.
    """

    subtotal = _money(sum((Decimal(str(amount)) for amount in amounts), Decimal("0")))
    discount = ZERO
    if discount_type is not None and discount_value is not None:
        value = Decimal(str(discount_value))
        if value < 0:
            raise ValueError("Discount value cannot be negative")
        if discount_type == models.DiscountType.PERCENTAGE:
            if value > 100:
                raise ValueError("A percentage discount cannot exceed 100")
            discount = _money(subtotal * value / Decimal("100"))
        else:
            discount = _money(value)
    discount = min(discount, subtotal)
    return InvoiceTotals(subtotal=subtotal, discount_amount=discount, total=subtotal - discount)


def build_retainer_line(
    monthly_retainer, start: DateLike, end: DateLike
) -> Optional[schemas.LineItemInput]:
    """Return the retainer line for an invoice window, or ``None``.

    Each half-month period touched by the window bills half of the monthly
    retainer.
    """

    retainer = Decimal(str(monthly_retainer or 0))
    if retainer <= 0:
        return None
    periods = count_overlapping_periods(start, end)
    if periods <= 0:
        return None

    if periods == 1:
        description = f"Monthly Retainer ({period_for_date(start).label})"
    else:
        description = f"Monthly Retainer ({periods} half-month periods)"
    return schemas.LineItemInput(
        description=description,
        quantity=Decimal(periods),
        unit_price=_money(retainer / 2),
        is_retainer=True,
    )


def _work_order_line(work_order: models.WorkOrder) -> schemas.LineItemInput:
    return schemas.LineItemInput(
        description=f"{work_order.event_name} ({work_order.event_date.isoformat()})",
        quantity=Decimal(str(work_order.actual_hours or 0)),
        unit_price=Decimal(str(work_order.hourly_rate_snapshot or 0)),
        work_order_id=work_order.id,
    )


def resolve_due_date(payment_terms: Optional[str], invoice_date: date) -> date:
    """Translate ``"Net N"`` payment terms into a due date."""

    match = NET_TERMS_PATTERN.match(payment_terms or "")
    if match:
        return invoice_date + timedelta(days=int(match.group(1)))
    return invoice_date


class InvoiceService:
    """Create, bill and settle organization invoices."""

    @staticmethod
    def _organization(db: Session, organization_id: str) -> models.Organization:
        organization = db.get(models.Organization, organization_id)
        if organization is None:
            raise ResourceNotFoundError("Organization not found")
        return organization

    @staticmethod
    def _allocate_number(organization: models.Organization) -> str:
        number = organization.next_invoice_number or 1
        organization.next_invoice_number = number + 1
        return f"{organization.invoice_prefix}-{number:05d}"

    @staticmethod
    def _apply_totals(invoice: models.Invoice) -> None:
        totals = compute_totals(
            (item.amount for item in invoice.line_items),
            invoice.discount_type,
            invoice.discount_value,
        )
        invoice.subtotal = totals.subtotal
        invoice.discount_amount = totals.discount_amount
        invoice.total = totals.total
        invoice.amount_due = totals.total - _money(invoice.amount_paid)

    @staticmethod
    def _append_lines(
        invoice: models.Invoice, lines: Sequence[schemas.LineItemInput]
    ) -> None:
        offset = len(invoice.line_items)
        for index, line in enumerate(lines):
            invoice.line_items.append(
                models.InvoiceLineItem(
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    amount=compute_line_amount(line.quantity, line.unit_price),
                    work_order_id=line.work_order_id,
                    is_retainer=line.is_retainer,
                    is_custom=line.is_custom,
                    sort_order=offset + index,
                )
            )

    @staticmethod
    def _link_work_orders(
        invoice: models.Invoice, work_orders: Iterable[models.WorkOrder]
    ) -> None:
        for work_order in work_orders:
            work_order.invoice = invoice
            work_order.status = models.WorkOrderStatus.INVOICED

    @staticmethod
    def _claim_work_order(
        db: Session,
        organization_id: str,
        work_order_id: str,
        invoice: Optional[models.Invoice] = None,
    ) -> models.WorkOrder:
        """Load a work order of the organization that ``invoice`` may bill."""

        work_order = (
            db.query(models.WorkOrder)
            .filter(
                models.WorkOrder.id == work_order_id,
                models.WorkOrder.organization_id == organization_id,
            )
            .first()
        )
        if work_order is None:
            raise ResourceNotFoundError("Work order not found")
        if invoice is not None and invoice.id and work_order.invoice_id == invoice.id:
            return work_order
        if work_order.status != models.WorkOrderStatus.COMPLETED or work_order.invoice_id:
            raise InvoiceServiceError(
                f"Work order {work_order.event_name} is not ready to be invoiced"
            )
        return work_order

    @classmethod
    def _claim_work_orders(
        cls,
        db: Session,
        organization_id: str,
        work_order_ids: Iterable[str],
        invoice: Optional[models.Invoice] = None,
    ) -> List[models.WorkOrder]:
        claimed: dict = {}
        for work_order_id in work_order_ids:
            work_order = cls._claim_work_order(db, organization_id, work_order_id, invoice)
            claimed.setdefault(work_order.id, work_order)
        return list(claimed.values())

    @staticmethod
    def _release_work_orders(work_orders: Iterable[models.WorkOrder]) -> None:
        for work_order in list(work_orders):
            work_order.invoice = None
            work_order.status = models.WorkOrderStatus.COMPLETED

    @staticmethod
    def _billable_work_orders(
        db: Session,
        organization_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[models.WorkOrder]:
        query = db.query(models.WorkOrder).filter(
            models.WorkOrder.organization_id == organization_id,
            models.WorkOrder.status == models.WorkOrderStatus.COMPLETED,
            models.WorkOrder.invoice_id.is_(None),
        )
        if start is not None:
            query = query.filter(models.WorkOrder.event_date >= start)
        if end is not None:
            query = query.filter(models.WorkOrder.event_date <= end)
        return query.order_by(models.WorkOrder.event_date, models.WorkOrder.created_at).all()

    @staticmethod
    def list_invoices(
        db: Session,
        user: models.User,
        *,
        status: Optional[models.InvoiceStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[models.Invoice], int]:
        ensure(can_view_invoices, user, "You do not have permission to view invoices")
        query = db.query(models.Invoice).filter(
            models.Invoice.organization_id == user.organization_id
        )
        if status:
            query = query.filter(models.Invoice.status == status)

        total = query.count()
        items = (
            query.options(
                selectinload(models.Invoice.line_items),
                selectinload(models.Invoice.payments),
            )
            .order_by(models.Invoice.invoice_date.desc(), models.Invoice.created_at.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_invoice(db: Session, user: models.User, invoice_id: str) -> models.Invoice:
        ensure(can_view_invoices, user, "You do not have permission to view invoices")
        invoice = (
            db.query(models.Invoice)
            .filter(
                models.Invoice.id == invoice_id,
                models.Invoice.organization_id == user.organization_id,
            )
            .first()
        )
        if invoice is None:
            raise ResourceNotFoundError("Invoice not found")
        return invoice

    @classmethod
    def _get_draft(cls, db: Session, user: models.User, invoice_id: str) -> models.Invoice:
        invoice = cls.get_invoice(db, user, invoice_id)
        if invoice.status != models.InvoiceStatus.DRAFT:
            raise InvoiceServiceError("Only draft invoices can be modified")
        return invoice

    @classmethod
    def create_invoice(
        cls,
        db: Session,
        user: models.User,
        payload: schemas.InvoiceCreate,
        *,
        now: DateLike | Clock | None = None,
    ) -> models.Invoice:
        ensure(can_create_invoices, user, "You do not have permission to create invoices")
        organization = cls._organization(db, user.organization_id)

        lines = list(payload.line_items)
        referenced = {line.work_order_id for line in lines if line.work_order_id}
        work_orders = cls._claim_work_orders(
            db, organization.id, [*payload.work_order_ids, *referenced]
        )
        lines.extend(_work_order_line(wo) for wo in work_orders if wo.id not in referenced)
        if payload.include_retainer:
            retainer_line = build_retainer_line(
                organization.monthly_retainer, payload.period_start, payload.period_end
            )
            if retainer_line is not None:
                lines.append(retainer_line)

        invoice = models.Invoice(
            organization_id=organization.id,
            invoice_number=cls._allocate_number(organization),
            invoice_date=to_local_date(resolve_now(now)),
            period_start=payload.period_start,
            period_end=payload.period_end,
            discount_type=payload.discount_type,
            discount_value=payload.discount_value,
            amount_paid=ZERO,
            status=models.InvoiceStatus.DRAFT,
            notes=payload.notes,
            internal_notes=payload.internal_notes,
            created_by_id=user.id,
        )
        cls._append_lines(invoice, lines)
        cls._apply_totals(invoice)
        cls._link_work_orders(invoice, work_orders)

        db.add(invoice)
        db.add(organization)
        db.commit()
        db.refresh(invoice)
        LOGGER.info(
            "Created invoice %s (%s) for organization %s",
            invoice.invoice_number,
            invoice.total,
            organization.id,
        )
        return invoice

    @classmethod
    def update_invoice(
        cls,
        db: Session,
        user: models.User,
        invoice_id: str,
        payload: schemas.InvoiceUpdate,
    ) -> models.Invoice:
        ensure(can_create_invoices, user, "You do not have permission to edit invoices")
        invoice = cls._get_draft(db, user, invoice_id)
        updates = payload.model_dump(exclude_unset=True, exclude={"line_items"})

        period_start = updates.get("period_start", invoice.period_start)
        period_end = updates.get("period_end", invoice.period_end)
        if period_start and period_end and period_start > period_end:
            raise ValueError("period_start cannot be after period_end")

        for field, value in updates.items():
            setattr(invoice, field, value)

        if payload.line_items is not None:
            work_orders = cls._claim_work_orders(
                db,
                invoice.organization_id,
                [line.work_order_id for line in payload.line_items if line.work_order_id],
                invoice,
            )
            kept = {work_order.id for work_order in work_orders}
            cls._release_work_orders(
                work_order for work_order in invoice.work_orders if work_order.id not in kept
            )
            invoice.line_items.clear()
            db.flush()
            cls._append_lines(invoice, payload.line_items)
            cls._link_work_orders(invoice, work_orders)

        cls._apply_totals(invoice)
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        return invoice

    @classmethod
    def delete_invoice(cls, db: Session, user: models.User, invoice_id: str) -> None:
        ensure(can_create_invoices, user, "You do not have permission to delete invoices")
        invoice = cls._get_draft(db, user, invoice_id)
        cls._release_work_orders(invoice.work_orders)
        db.delete(invoice)
        db.commit()
        LOGGER.info("Deleted draft invoice %s", invoice.invoice_number)

    @classmethod
    def send_invoice(
        cls,
        db: Session,
        user: models.User,
        invoice_id: str,
        *,
        now: DateLike | Clock | None = None,
    ) -> models.Invoice:
        ensure(can_create_invoices, user, "You do not have permission to send invoices")
        invoice = cls.get_invoice(db, user, invoice_id)
        if invoice.status != models.InvoiceStatus.DRAFT:
            raise InvoiceServiceError("Invoice has already been sent")

        if invoice.due_date is None:
            organization = cls._organization(db, invoice.organization_id)
            invoice.due_date = resolve_due_date(organization.payment_terms, invoice.invoice_date)
        invoice.status = models.InvoiceStatus.SENT
        invoice.sent_at = resolve_now(now)
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        LOGGER.info("Sent invoice %s due %s", invoice.invoice_number, invoice.due_date)
        return invoice

    @classmethod
    def record_payment(
        cls,
        db: Session,
        user: models.User,
        invoice_id: str,
        payload: schemas.InvoicePaymentCreate,
    ) -> models.Invoice:
        ensure(can_pay, user, "You do not have permission to pay invoices")
        invoice = cls.get_invoice(db, user, invoice_id)
        if invoice.status not in PAYABLE_STATUSES:
            raise InvoiceServiceError("Invoice is not awaiting payment")

        amount = _money(payload.amount)
        if amount <= 0:
            raise ValueError("Payment amount must be positive")
        if amount > _money(invoice.amount_due):
            raise ValueError("Payment amount exceeds the amount due")

        invoice.payments.append(
            models.InvoicePayment(
                amount=amount,
                payment_method=payload.payment_method,
                reference=payload.reference,
                paid_by_id=user.id,
            )
        )
        invoice.amount_paid = _money(invoice.amount_paid) + amount
        invoice.amount_due = _money(invoice.total) - invoice.amount_paid
        if invoice.amount_due <= 0:
            invoice.amount_due = ZERO
            invoice.status = models.InvoiceStatus.PAID
            for work_order in invoice.work_orders:
                work_order.status = models.WorkOrderStatus.PAID

        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        LOGGER.info(
            "Recorded payment of %s on invoice %s (remaining %s)",
            amount,
            invoice.invoice_number,
            invoice.amount_due,
        )
        return invoice

    @staticmethod
    def mark_past_due(
        db: Session,
        today: DateLike,
        *,
        organization_id: Optional[str] = None,
    ) -> int:
        """Flag sent invoices whose due date has passed; return how many changed."""

        cutoff = to_local_date(today)
        query = db.query(models.Invoice).filter(
            models.Invoice.status == models.InvoiceStatus.SENT,
            models.Invoice.due_date.isnot(None),
            models.Invoice.due_date < cutoff,
        )
        if organization_id is not None:
            query = query.filter(models.Invoice.organization_id == organization_id)

        updated = 0
        for invoice in query.all():
            invoice.status = models.InvoiceStatus.PAST_DUE
            db.add(invoice)
            updated += 1
        db.commit()
        if updated:
            LOGGER.info("Marked %s invoice(s) past due as of %s", updated, cutoff)
        return updated

    @classmethod
    def get_or_create_draft_for_period(
        cls,
        db: Session,
        user: models.User,
        start: date,
        end: date,
        *,
        now: DateLike | Clock | None = None,
    ) -> Tuple[models.Invoice, bool]:
        """Return the draft covering ``start..end``, creating it when missing."""

        ensure(can_create_invoices, user, "You do not have permission to create invoices")
        if start > end:
            raise ValueError("start cannot be after end")

        existing = (
            db.query(models.Invoice)
            .filter(
                models.Invoice.organization_id == user.organization_id,
                models.Invoice.status == models.InvoiceStatus.DRAFT,
                models.Invoice.period_start == start,
                models.Invoice.period_end == end,
            )
            .first()
        )
        if existing is not None:
            return existing, False

        organization = cls._organization(db, user.organization_id)
        work_orders = cls._billable_work_orders(db, organization.id, start, end)
        lines: List[schemas.LineItemInput] = []
        retainer_line = build_retainer_line(organization.monthly_retainer, start, end)
        if retainer_line is not None:
            lines.append(retainer_line)
        lines.extend(_work_order_line(work_order) for work_order in work_orders)

        invoice = models.Invoice(
            organization_id=organization.id,
            invoice_number=cls._allocate_number(organization),
            invoice_date=to_local_date(resolve_now(now)),
            period_start=start,
            period_end=end,
            amount_paid=ZERO,
            status=models.InvoiceStatus.DRAFT,
            created_by_id=user.id,
        )
        cls._append_lines(invoice, lines)
        cls._apply_totals(invoice)
        cls._link_work_orders(invoice, work_orders)

        db.add(invoice)
        db.add(organization)
        db.commit()
        db.refresh(invoice)
        LOGGER.info(
            "Created draft invoice %s for %s..%s with %s work order(s)",
            invoice.invoice_number,
            start,
            end,
            len(work_orders),
        )
        return invoice, True

    @classmethod
    def add_completed_work(
        cls, db: Session, user: models.User, invoice_id: str
    ) -> Tuple[int, models.Invoice]:
        """Append newly completed work orders inside the draft's window."""

        ensure(can_create_invoices, user, "You do not have permission to edit invoices")
        invoice = cls._get_draft(db, user, invoice_id)
        if invoice.period_start is None or invoice.period_end is None:
            raise InvoiceServiceError("Invoice has no billing period")

        work_orders = cls._billable_work_orders(
            db, invoice.organization_id, invoice.period_start, invoice.period_end
        )
        if not work_orders:
            return 0, invoice

        cls._append_lines(invoice, [_work_order_line(work_order) for work_order in work_orders])
        cls._apply_totals(invoice)
        cls._link_work_orders(invoice, work_orders)
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        LOGGER.info(
            "Added %s work order(s) to invoice %s", len(work_orders), invoice.invoice_number
        )
        return len(work_orders), invoice

    @classmethod
    def projected_amount(
        cls, db: Session, organization: models.Organization, start: date, end: date
    ) -> Tuple[Decimal, int]:
        """Return the expected billing for a window and the work orders behind it."""

        work_orders = cls._billable_work_orders(db, organization.id, start, end)
        projected = _money(Decimal(str(organization.monthly_retainer or 0)) / 2)
        for work_order in work_orders:
            projected += compute_line_amount(
                work_order.actual_hours or 0, work_order.hourly_rate_snapshot or 0
            )
        return projected, len(work_orders)

    @classmethod
    def _period_projection(
        cls, db: Session, organization: models.Organization, period: BillingPeriod
    ) -> dict:
        projected, count = cls.projected_amount(db, organization, period.start, period.end)
        invoice = (
            db.query(models.Invoice)
            .filter(
                models.Invoice.organization_id == organization.id,
                models.Invoice.period_start == period.start,
            )
            .order_by(models.Invoice.created_at.desc())
            .first()
        )
        return {
            "period": period,
            "projected": projected,
            "work_order_count": count,
            "invoice": invoice,
        }

    @classmethod
    def billing_period_overview(
        cls,
        db: Session,
        user: models.User,
        *,
        now: DateLike | Clock | None = None,
    ) -> dict:
        """Summarize the current and next billing periods for the dashboard."""

        ensure(can_view_invoices, user, "You do not have permission to view invoices")
        organization = cls._organization(db, user.organization_id)
        instant = resolve_now(now)
        return {
            "current": cls._period_projection(db, organization, current_period(instant)),
            "next": cls._period_projection(db, organization, next_period(instant)),
        }

    @classmethod
    def list_comments(
        cls, db: Session, user: models.User, invoice_id: str
    ) -> List[models.InvoiceComment]:
        invoice = cls.get_invoice(db, user, invoice_id)
        query = db.query(models.InvoiceComment).filter(
            models.InvoiceComment.invoice_id == invoice.id
        )
        if not can_see_internal_comments(user):
            query = query.filter(models.InvoiceComment.is_internal.is_(False))
        return query.order_by(models.InvoiceComment.created_at).all()

    @classmethod
    def add_comment(
        cls,
        db: Session,
        user: models.User,
        invoice_id: str,
        payload: schemas.InvoiceCommentCreate,
    ) -> models.InvoiceComment:
        invoice = cls.get_invoice(db, user, invoice_id)
        if payload.is_internal:
            ensure(
                can_see_internal_comments, user, "Only provider staff can post internal comments"
            )

        if payload.parent_id is not None:
            parent = (
                db.query(models.InvoiceComment)
                .filter(
                    models.InvoiceComment.id == payload.parent_id,
                    models.InvoiceComment.invoice_id == invoice.id,
                )
                .first()
            )
            if parent is None or (parent.is_internal and not can_see_internal_comments(user)):
                raise ResourceNotFoundError("Comment not found")
        if payload.line_item_id is not None and payload.line_item_id not in {
            item.id for item in invoice.line_items
        }:
            raise ResourceNotFoundError("Line item not found")

        comment = models.InvoiceComment(
            invoice_id=invoice.id,
            line_item_id=payload.line_item_id,
            parent_id=payload.parent_id,
            author_user_id=user.id,
            author_name=f"{user.first_name} {user.last_name}",
            content=payload.content,
            is_internal=payload.is_internal,
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment
