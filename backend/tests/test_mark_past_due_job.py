from __future__ import annotations

from contextlib import contextmanager
from datetime import date

from backend.app import models
from backend.app.scripts import mark_past_due_job


def _sent_invoice(db_session, organization, user, number: str, due: date) -> models.Invoice:
    invoice = models.Invoice(
        organization_id=organization.id,
        invoice_number=number,
        invoice_date=date(2026, 1, 1),
        due_date=due,
        subtotal=100,
        discount_amount=0,
        total=100,
        amount_paid=0,
        amount_due=100,
        status=models.InvoiceStatus.SENT,
        created_by_id=user.id,
    )
    db_session.add(invoice)
    db_session.commit()
    return invoice


def test_job_marks_overdue_invoices(db_session, organization, portal_users, monkeypatch):
    admin = portal_users["provider_admin"]
    overdue = _sent_invoice(db_session, organization, admin, "SEP-00001", date(2026, 1, 31))
    current = _sent_invoice(db_session, organization, admin, "SEP-00002", date(2026, 2, 1))

    @contextmanager
    def _scope():
        yield db_session

    monkeypatch.setattr(mark_past_due_job, "session_scope", _scope)

    assert mark_past_due_job.main(["--today", "2026-02-01"]) == 0

    db_session.expire_all()
    assert db_session.get(models.Invoice, overdue.id).status == models.InvoiceStatus.PAST_DUE
    assert db_session.get(models.Invoice, current.id).status == models.InvoiceStatus.SENT
