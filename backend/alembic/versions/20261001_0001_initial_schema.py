"""Initial client portal schema."""

from __future__ import annotations

from alembic import context, op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


USER_ROLES = ("provider_admin", "provider_staff", "client_admin", "client_approver", "client_viewer")
WORK_ORDER_STATUSES = (
    "draft",
    "pending_approval",
    "approved",
    "in_progress",
    "completed",
    "invoiced",
    "paid",
)
VENUES = ("church", "meaney_hall_gym", "library", "room_102_103", "other")
EVENT_TYPES = (
    "funeral",
    "mass_additional",
    "concert",
    "retreat",
    "christlife",
    "maintenance",
    "emergency",
    "other",
)
ESTIMATE_TYPES = ("range", "fixed", "not_to_exceed")
TIME_LOG_CATEGORIES = ("on_site", "remote", "post_production", "admin")
INVOICE_STATUSES = ("draft", "sent", "paid", "past_due")
DISCOUNT_TYPES = ("flat", "percentage")


def _dialect_name() -> str:
    bind = op.get_bind()
    if bind is not None:
        return bind.dialect.name
    ctx = context.get_context()
    return ctx.dialect.name if ctx is not None else ""


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    uuid_type = sa.CHAR(length=36)
    if _dialect_name() == "postgresql":
        uuid_type = postgresql.UUID(as_uuid=True)

    op.create_table(
        "organizations",
        sa.Column("organization_id", uuid_type, primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("invoice_prefix", sa.String(length=10), nullable=False, server_default="INV"),
        sa.Column("next_invoice_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("monthly_retainer", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column(
            "payment_terms", sa.String(length=100), nullable=False, server_default="Due on Receipt"
        ),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("next_invoice_number >= 1", name="ck_organizations_next_invoice_number"),
        sa.CheckConstraint("hourly_rate >= 0", name="ck_organizations_hourly_rate_non_negative"),
        sa.CheckConstraint(
            "monthly_retainer >= 0", name="ck_organizations_monthly_retainer_non_negative"
        ),
    )
    op.create_index("ix_organizations_slug", "organizations", ["slug"], unique=True)

    op.create_table(
        "users",
        sa.Column("user_id", uuid_type, primary_key=True),
        sa.Column(
            "organization_id",
            uuid_type,
            sa.ForeignKey("organizations.organization_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("role", sa.Enum(*USER_ROLES, name="user_role_enum"), nullable=False),
        sa.Column("can_pay", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_approver", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_organization_id", "users", ["organization_id"])

    op.create_table(
        "invoices",
        sa.Column("invoice_id", uuid_type, primary_key=True),
        sa.Column(
            "organization_id",
            uuid_type,
            sa.ForeignKey("organizations.organization_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("invoice_number", sa.String(length=50), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("period_start", sa.Date(), nullable=True),
        sa.Column("period_end", sa.Date(), nullable=True),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column(
            "discount_type", sa.Enum(*DISCOUNT_TYPES, name="discount_type_enum"), nullable=True
        ),
        sa.Column("discount_value", sa.Numeric(10, 2), nullable=True),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("amount_paid", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("amount_due", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum(*INVOICE_STATUSES, name="invoice_status_enum"),
            nullable=False,
            server_default="draft",
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("internal_notes", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "period_start IS NULL OR period_end IS NULL OR period_end >= period_start",
            name="ck_invoices_valid_period",
        ),
        sa.CheckConstraint("amount_paid >= 0", name="ck_invoices_amount_paid_non_negative"),
        sa.UniqueConstraint("organization_id", "invoice_number", name="uq_invoices_org_number"),
    )
    op.create_index("invoices_org_idx", "invoices", ["organization_id"])
    op.create_index("invoices_status_idx", "invoices", ["status"])
    op.create_index(
        "invoices_period_idx", "invoices", ["organization_id", "period_start", "period_end"]
    )

    op.create_table(
        "work_orders",
        sa.Column("work_order_id", uuid_type, primary_key=True),
        sa.Column(
            "organization_id",
            uuid_type,
            sa.ForeignKey("organizations.organization_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("event_name", sa.String(length=255), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("venue", sa.Enum(*VENUES, name="venue_enum"), nullable=False),
        sa.Column("venue_other", sa.String(length=255), nullable=True),
        sa.Column("event_type", sa.Enum(*EVENT_TYPES, name="event_type_enum"), nullable=False),
        sa.Column("event_type_other", sa.String(length=255), nullable=True),
        sa.Column("requested_by_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("requested_by_name", sa.String(length=255), nullable=True),
        sa.Column(
            "authorized_approver_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=True
        ),
        sa.Column(
            "estimate_type",
            sa.Enum(*ESTIMATE_TYPES, name="estimate_type_enum"),
            nullable=False,
            server_default="range",
        ),
        sa.Column("estimated_hours_min", sa.Numeric(5, 2), nullable=True),
        sa.Column("estimated_hours_max", sa.Numeric(5, 2), nullable=True),
        sa.Column("estimated_hours_fixed", sa.Numeric(5, 2), nullable=True),
        sa.Column("estimated_hours_nte", sa.Numeric(5, 2), nullable=True),
        sa.Column("custom_scope", sa.Text(), nullable=True),
        sa.Column("actual_hours", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("hourly_rate_snapshot", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("internal_notes", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*WORK_ORDER_STATUSES, name="work_order_status_enum"),
            nullable=False,
            server_default="draft",
        ),
        sa.Column(
            "invoice_id",
            uuid_type,
            sa.ForeignKey("invoices.invoice_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_by_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("actual_hours >= 0", name="ck_work_orders_actual_hours_non_negative"),
        sa.CheckConstraint(
            "hourly_rate_snapshot >= 0", name="ck_work_orders_hourly_rate_non_negative"
        ),
    )
    op.create_index("work_orders_org_idx", "work_orders", ["organization_id"])
    op.create_index("work_orders_status_idx", "work_orders", ["status"])
    op.create_index("work_orders_date_idx", "work_orders", ["event_date"])

    op.create_table(
        "time_logs",
        sa.Column("time_log_id", uuid_type, primary_key=True),
        sa.Column(
            "work_order_id",
            uuid_type,
            sa.ForeignKey("work_orders.work_order_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("hours", sa.Numeric(5, 2), nullable=False),
        sa.Column(
            "category", sa.Enum(*TIME_LOG_CATEGORIES, name="time_log_category_enum"), nullable=False
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("logged_by_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("hours > 0", name="ck_time_logs_hours_positive"),
    )
    op.create_index("ix_time_logs_work_order_id", "time_logs", ["work_order_id"])

    op.create_table(
        "invoice_line_items",
        sa.Column("line_item_id", uuid_type, primary_key=True),
        sa.Column(
            "invoice_id",
            uuid_type,
            sa.ForeignKey("invoices.invoice_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 2), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "work_order_id",
            uuid_type,
            sa.ForeignKey("work_orders.work_order_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("is_retainer", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_custom", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_invoice_line_items_invoice_id", "invoice_line_items", ["invoice_id"])

    op.create_table(
        "invoice_payments",
        sa.Column("payment_id", uuid_type, primary_key=True),
        sa.Column(
            "invoice_id",
            uuid_type,
            sa.ForeignKey("invoices.invoice_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", sa.String(length=50), nullable=True),
        sa.Column("reference", sa.String(length=255), nullable=True),
        sa.Column("paid_by_id", uuid_type, sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("amount > 0", name="ck_invoice_payments_amount_positive"),
    )
    op.create_index("ix_invoice_payments_invoice_id", "invoice_payments", ["invoice_id"])


def downgrade() -> None:
    op.drop_table("invoice_payments")
    op.drop_table("invoice_line_items")
    op.drop_table("time_logs")
    op.drop_table("work_orders")
    op.drop_table("invoices")
    op.drop_table("users")
    op.drop_table("organizations")

    if _dialect_name() == "postgresql":
        for enum_name in (
            "discount_type_enum",
            "invoice_status_enum",
            "time_log_category_enum",
            "estimate_type_enum",
            "event_type_enum",
            "venue_enum",
            "work_order_status_enum",
            "user_role_enum",
        ):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
