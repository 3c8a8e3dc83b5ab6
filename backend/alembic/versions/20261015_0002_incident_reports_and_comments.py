"""Add incident reports and invoice comments."""

from __future__ import annotations

from alembic import context, op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20261015_0002"
down_revision = "20261001_0001"
branch_labels = None
depends_on = None


INCIDENT_TYPES = ("camera", "internet", "platform", "audio", "other")
ROOT_CAUSES = (
    "parish_equipment",
    "isp_network",
    "platform_provider",
    "contractor_error",
    "unknown",
)
INCIDENT_OUTCOMES = (
    "livestream_partial",
    "livestream_unavailable_recording_delivered",
    "neither_available",
)


def _dialect_name() -> str:
    bind = op.get_bind()
    if bind is not None:
        return bind.dialect.name
    ctx = context.get_context()
    return ctx.dialect.name if ctx is not None else ""


def upgrade() -> None:
    uuid_type = sa.CHAR(length=36)
    if _dialect_name() == "postgresql":
        uuid_type = postgresql.UUID(as_uuid=True)

    op.create_table(
        "incident_reports",
        sa.Column("incident_report_id", uuid_type, primary_key=True),
        sa.Column(
            "work_order_id",
            uuid_type,
            sa.ForeignKey("work_orders.work_order_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "incident_type", sa.Enum(*INCIDENT_TYPES, name="incident_type_enum"), nullable=False
        ),
        sa.Column("incident_type_other", sa.String(length=255), nullable=True),
        sa.Column(
            "root_cause", sa.Enum(*ROOT_CAUSES, name="incident_root_cause_enum"), nullable=False
        ),
        sa.Column("mitigation", sa.Text(), nullable=False),
        sa.Column(
            "outcome", sa.Enum(*INCIDENT_OUTCOMES, name="incident_outcome_enum"), nullable=False
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("client_notified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("client_notified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reported_by_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("incident_reports_work_order_idx", "incident_reports", ["work_order_id"])

    op.create_table(
        "invoice_comments",
        sa.Column("comment_id", uuid_type, primary_key=True),
        sa.Column(
            "invoice_id",
            uuid_type,
            sa.ForeignKey("invoices.invoice_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "line_item_id",
            uuid_type,
            sa.ForeignKey("invoice_line_items.line_item_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "parent_id",
            uuid_type,
            sa.ForeignKey("invoice_comments.comment_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("author_user_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_invoice_comments_invoice_id", "invoice_comments", ["invoice_id"])


def downgrade() -> None:
    op.drop_table("invoice_comments")
    op.drop_table("incident_reports")

    if _dialect_name() == "postgresql":
        for enum_name in (
            "incident_outcome_enum",
            "incident_root_cause_enum",
            "incident_type_enum",
        ):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
