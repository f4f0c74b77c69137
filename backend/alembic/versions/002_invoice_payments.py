"""Add payment tracking columns to fee_invoices.

Revision ID: 002_invoice_payments
Revises: 001_initial
Create Date: 2026-10-18

Invoices record when and how they were paid: paid_date, payment_method,
transaction_id and free-form remarks. All nullable, so existing rows stay valid.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "002_invoice_payments"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("fee_invoices", sa.Column("paid_date", sa.Date, nullable=True))
    op.add_column(
        "fee_invoices", sa.Column("payment_method", sa.String(50), nullable=True),
    )
    op.add_column(
        "fee_invoices", sa.Column("transaction_id", sa.String(100), nullable=True),
    )
    op.add_column("fee_invoices", sa.Column("remarks", sa.String(500), nullable=True))
    op.create_index(
        "ix_fee_invoices_student_due", "fee_invoices", ["student_id", "due_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_fee_invoices_student_due", table_name="fee_invoices")
    op.drop_column("fee_invoices", "remarks")
    op.drop_column("fee_invoices", "transaction_id")
    op.drop_column("fee_invoices", "payment_method")
    op.drop_column("fee_invoices", "paid_date")
