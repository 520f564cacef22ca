"""Initial PuantajPro schema

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
    ]


def _updated_at():
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(128), nullable=True),
        sa.Column("last_name", sa.String(128), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="USER"),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index("ix_users_email", ["email"], unique=True)
        batch_op.create_index("ix_users_status", ["status"], unique=False)

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("token_hash", sa.String(255), nullable=False),
        *_timestamps(),
        sa.Column("last_used_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("session_tokens", schema=None) as batch_op:
        batch_op.create_index("ix_session_tokens_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_session_tokens_token_hash", ["token_hash"], unique=True)
        batch_op.create_index("ix_session_tokens_expires_at", ["expires_at"], unique=False)
        batch_op.create_index("ix_session_tokens_user_expires", ["user_id", "expires_at"], unique=False)

    op.create_table(
        "customers",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("tax_number", sa.String(32), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        *_timestamps(),
        _updated_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("customers", schema=None) as batch_op:
        batch_op.create_index("ix_customers_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_customers_user_status", ["user_id", "status"], unique=False)

    op.create_table(
        "customer_quotes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("customer_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("has_vat", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("vat_rate", sa.Numeric(5, 2), nullable=False, server_default="20"),
        sa.Column("vat_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_with_vat", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("quote_date", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _updated_at(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("customer_quotes", schema=None) as batch_op:
        batch_op.create_index("ix_customer_quotes_customer_id", ["customer_id"], unique=False)
        batch_op.create_index("ix_customer_quotes_status", ["status"], unique=False)
        batch_op.create_index("ix_customer_quotes_customer_status", ["customer_id", "status"], unique=False)

    op.create_table(
        "customer_quote_items",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("quote_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False, server_default="1"),
        sa.Column("unit", sa.String(32), nullable=False, server_default="adet"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        _updated_at(),
        sa.ForeignKeyConstraint(["quote_id"], ["customer_quotes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("customer_quote_items", schema=None) as batch_op:
        batch_op.create_index("ix_customer_quote_items_quote_id", ["quote_id"], unique=False)

    op.create_table(
        "customer_tasks",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("customer_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False, server_default="1"),
        sa.Column("unit", sa.String(32), nullable=False, server_default="adet"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("has_vat", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("vat_rate", sa.Numeric(5, 2), nullable=False, server_default="20"),
        sa.Column("vat_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_with_vat", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("source_quote_id", sa.String(36), nullable=True),
        *_timestamps(),
        _updated_at(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["source_quote_id"], ["customer_quotes.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_quote_id", name="uq_customer_tasks_source_quote"),
    )

    with op.batch_alter_table("customer_tasks", schema=None) as batch_op:
        batch_op.create_index("ix_customer_tasks_customer_id", ["customer_id"], unique=False)
        batch_op.create_index("ix_customer_tasks_status", ["status"], unique=False)
        batch_op.create_index("ix_customer_tasks_customer_status", ["customer_id", "status"], unique=False)

    op.create_table(
        "customer_payments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("customer_id", sa.String(36), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payment_method", sa.String(32), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("customer_payments", schema=None) as batch_op:
        batch_op.create_index("ix_customer_payments_customer_id", ["customer_id"], unique=False)
        batch_op.create_index("ix_customer_payments_payment_date", ["payment_date"], unique=False)
        batch_op.create_index("ix_customer_payments_customer_date", ["customer_id", "payment_date"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source_payment_type", sa.String(16), nullable=True),
        sa.Column("source_payment_id", sa.String(36), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_payment_type", "source_payment_id", name="uq_transactions_source_payment"),
    )

    with op.batch_alter_table("transactions", schema=None) as batch_op:
        batch_op.create_index("ix_transactions_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_transactions_category", ["category"], unique=False)
        batch_op.create_index("ix_transactions_date", ["date"], unique=False)
        batch_op.create_index("ix_transactions_source_payment_id", ["source_payment_id"], unique=False)
        batch_op.create_index("ix_transactions_user_type_date", ["user_id", "type", "date"], unique=False)

    op.create_table(
        "contractors",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("contractors", schema=None) as batch_op:
        batch_op.create_index("ix_contractors_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_contractors_status", ["status"], unique=False)

    op.create_table(
        "contractor_payments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("contractor_id", sa.String(36), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payment_method", sa.String(32), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contractor_id"], ["contractors.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("contractor_payments", schema=None) as batch_op:
        batch_op.create_index("ix_contractor_payments_contractor_id", ["contractor_id"], unique=False)
        batch_op.create_index("ix_contractor_payments_payment_date", ["payment_date"], unique=False)

    op.create_table(
        "personnel",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("position", sa.String(128), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("personnel", schema=None) as batch_op:
        batch_op.create_index("ix_personnel_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_personnel_is_active", ["is_active"], unique=False)

    op.create_table(
        "timesheets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("personnel_id", sa.String(36), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("total_hours", sa.Numeric(5, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["personnel_id"], ["personnel.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("timesheets", schema=None) as batch_op:
        batch_op.create_index("ix_timesheets_personnel_id", ["personnel_id"], unique=False)
        batch_op.create_index("ix_timesheets_personnel_date", ["personnel_id", "date"], unique=False)

    op.create_table(
        "personnel_payments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("personnel_id", sa.String(36), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payment_type", sa.String(16), nullable=False, server_default="salary"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["personnel_id"], ["personnel.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("personnel_payments", schema=None) as batch_op:
        batch_op.create_index("ix_personnel_payments_personnel_id", ["personnel_id"], unique=False)
        batch_op.create_index("ix_personnel_payments_payment_date", ["payment_date"], unique=False)

    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("projects", schema=None) as batch_op:
        batch_op.create_index("ix_projects_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_projects_user_type_status", ["user_id", "type", "status"], unique=False)

    op.create_table(
        "notes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("notes", schema=None) as batch_op:
        batch_op.create_index("ix_notes_user_id", ["user_id"], unique=False)


def downgrade():
    for table in (
        "notes",
        "projects",
        "personnel_payments",
        "timesheets",
        "personnel",
        "contractor_payments",
        "contractors",
        "transactions",
        "customer_payments",
        "customer_tasks",
        "customer_quote_items",
        "customer_quotes",
        "customers",
        "session_tokens",
        "users",
    ):
        op.drop_table(table)
