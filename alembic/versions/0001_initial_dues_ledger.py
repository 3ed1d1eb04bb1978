"""initial dues ledger schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("admin", "manager", "member", name="userroleenum", native_enum=False), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "member",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("father_name", sa.String(100), nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("alternate_phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("monthly_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("membership_type", sa.String(50), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("joining_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_member_user_id", "member", ["user_id"], unique=True)
    op.create_index("ix_member_name", "member", ["name"])

    op.create_table(
        "monthly_due",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("member_id", sa.Uuid(), sa.ForeignKey("member.id"), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("amount_due", sa.Numeric(12, 2), nullable=False),
        sa.Column("amount_paid", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.Enum("due", "partial", "paid", "overdue", name="duestatus", native_enum=False), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid_on", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("member_id", "month", "year", name="uq_monthly_due_member_period"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_monthly_due_month"),
    )
    op.create_index("ix_monthly_due_member_id", "monthly_due", ["member_id"])

    op.create_table(
        "payment_transaction",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("monthly_due_id", sa.Uuid(), sa.ForeignKey("monthly_due.id"), nullable=False),
        sa.Column("member_id", sa.Uuid(), sa.ForeignKey("member.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("method", sa.Enum("cash", "bank_transfer", "cheque", "online", name="paymentmethod", native_enum=False), nullable=False),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("receipt_number", sa.String(40), nullable=False),
        sa.Column("recorded_by", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_payment_transaction_amount_positive"),
    )
    op.create_index("ix_payment_transaction_monthly_due_id", "payment_transaction", ["monthly_due_id"])
    op.create_index("ix_payment_transaction_member_id", "payment_transaction", ["member_id"])
    op.create_index("ix_payment_transaction_receipt_number", "payment_transaction", ["receipt_number"], unique=True)

    op.create_table(
        "message_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("member_id", sa.Uuid(), sa.ForeignKey("member.id"), nullable=False),
        sa.Column("monthly_due_id", sa.Uuid(), nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("message_type", sa.String(20), nullable=False),
        sa.Column("message_content", sa.Text(), nullable=False),
        sa.Column("link", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )
    op.create_index("ix_message_log_member_id", "message_log", ["member_id"])


def downgrade() -> None:
    op.drop_table("message_log")
    op.drop_table("payment_transaction")
    op.drop_table("monthly_due")
    op.drop_table("member")
    op.drop_table("user")
