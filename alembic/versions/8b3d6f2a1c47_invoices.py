"""invoices

Revision ID: 8b3d6f2a1c47
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
from alembic import context, op
import sqlalchemy as sa


revision = "8b3d6f2a1c47"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # The server creates this table on startup; adopt it when already present.
    if not context.is_offline_mode() and sa.inspect(op.get_bind()).has_table(
        "invoices"
    ):
        return
    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invoice_no", sa.String(length=50), nullable=False),
        sa.Column("date", sa.String(length=32), nullable=True),
        sa.Column("receiver_name", sa.String(length=255), nullable=False),
        sa.Column("consignee_name", sa.String(length=255), nullable=False),
        sa.Column("grand_total", sa.Float(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("invoice_no", name="uq_invoices_invoice_no"),
    )
    op.create_index("ix_invoices_date", "invoices", ["date"])


def downgrade() -> None:
    op.drop_index("ix_invoices_date", table_name="invoices")
    op.drop_table("invoices")
