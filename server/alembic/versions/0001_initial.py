"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

item_status = sa.Enum("in-store", "reserved", "sold", "returned-to-vendor", name="item_status")
installment_status = sa.Enum("pending", "paid", name="installment_status")


def upgrade() -> None:
    op.create_table(
        "vendors",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200)),
        sa.Column("phone", sa.String(length=50)),
        sa.Column("email", sa.String(length=255)),
        sa.Column("bank_account_number", sa.String(length=100)),
        sa.Column("bank_name", sa.String(length=100)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "clients",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200)),
        sa.Column("phone", sa.String(length=50)),
        sa.Column("email", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "brands",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "categories",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("vendor_id", sa.String(length=36), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("brand_id", sa.String(length=36), sa.ForeignKey("brands.id")),
        sa.Column("category_id", sa.String(length=36), sa.ForeignKey("categories.id")),
        sa.Column("title", sa.String(length=255)),
        sa.Column("model", sa.String(length=255)),
        sa.Column("serial_no", sa.String(length=100)),
        sa.Column("condition", sa.String(length=50)),
        sa.Column("acquisition_date", sa.Date()),
        sa.Column("min_cost", sa.Numeric(12, 2)),
        sa.Column("max_cost", sa.Numeric(12, 2)),
        sa.Column("min_sales_price", sa.Numeric(12, 2)),
        sa.Column("max_sales_price", sa.Numeric(12, 2)),
        sa.Column("status", item_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "payments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("item_id", sa.String(length=36), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("client_id", sa.String(length=36), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("method", sa.String(length=50), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_payments_item_id", "payments", ["item_id"])
    op.create_index("ix_payments_client_id", "payments", ["client_id"])
    op.create_index("ix_payments_paid_at", "payments", ["paid_at"])
    op.create_table(
        "payouts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("item_id", sa.String(length=36), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("vendor_id", sa.String(length=36), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_at", sa.DateTime(), nullable=False),
        sa.Column("bank_account", sa.String(length=100)),
        sa.Column("transfer_id", sa.String(length=100)),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("item_id", name="uq_payout_item"),
    )
    op.create_index("ix_payouts_vendor_id", "payouts", ["vendor_id"])
    op.create_table(
        "expenses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("item_id", sa.String(length=36), sa.ForeignKey("items.id")),
        sa.Column("expense_type", sa.String(length=50), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("incurred_at", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_expenses_item_id", "expenses", ["item_id"])
    op.create_table(
        "installment_plans",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("item_id", sa.String(length=36), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("client_id", sa.String(length=36), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", installment_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("installment_plans")
    op.drop_index("ix_expenses_item_id", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("ix_payouts_vendor_id", table_name="payouts")
    op.drop_table("payouts")
    op.drop_index("ix_payments_paid_at", table_name="payments")
    op.drop_index("ix_payments_client_id", table_name="payments")
    op.drop_index("ix_payments_item_id", table_name="payments")
    op.drop_table("payments")
    op.drop_table("items")
    op.drop_table("categories")
    op.drop_table("brands")
    op.drop_table("clients")
    op.drop_table("vendors")
    installment_status.drop(op.get_bind(), checkfirst=True)
    item_status.drop(op.get_bind(), checkfirst=True)
