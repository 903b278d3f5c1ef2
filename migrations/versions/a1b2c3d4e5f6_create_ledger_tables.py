"""create ledger tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("document_number", sa.String(length=50), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("customer_id", sa.String(length=64), nullable=False),
        sa.Column("account_id", sa.String(length=64), nullable=True),
        sa.Column("amount", sa.Numeric(precision=20, scale=4), nullable=False),
        sa.Column("weight", sa.Numeric(precision=20, scale=6), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("weight_unit", sa.String(length=20), nullable=True),
        sa.Column("unit_price", sa.Numeric(precision=20, scale=4), nullable=True),
        sa.Column("product_type_id", sa.String(length=64), nullable=True),
        sa.Column("currency_id", sa.String(length=64), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("is_main_document", sa.Boolean(), nullable=False),
        sa.Column("parent_document_id", sa.String(length=64), nullable=True),
        sa.Column("linked_transaction_id", sa.String(length=64), nullable=True),
        sa.Column("role", sa.String(length=30), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_transactions_document_number", "transactions", ["document_number"])
    op.create_index("ix_transactions_customer_id", "transactions", ["customer_id"])
    op.create_index("ix_transactions_parent_document_id", "transactions", ["parent_document_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("customer_code", sa.String(length=50), nullable=True),
        sa.Column("group_id", sa.String(length=64), nullable=True),
        sa.Column("is_protected", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("customer_code"),
    )

    op.create_table(
        "product_types",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("product_code", sa.String(length=50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("measurement_type", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_code"),
    )

    op.create_table(
        "currencies",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("symbol", sa.String(length=10), nullable=False),
        sa.Column("is_base", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "bank_accounts",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("bank_name", sa.String(length=100), nullable=False),
        sa.Column("account_number", sa.String(length=50), nullable=False),
        sa.Column("account_holder", sa.String(length=255), nullable=False),
        sa.Column("initial_balance", sa.Numeric(precision=20, scale=4), nullable=False),
        sa.Column("currency_id", sa.String(length=64), nullable=False),
        sa.Column("group_id", sa.String(length=64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "ledger_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("base_currency_id", sa.String(length=64), nullable=True),
        sa.Column("base_weight_unit", sa.String(length=20), nullable=False),
        sa.Column("company_info", sa.JSON(), nullable=True),
        sa.Column("last_updated", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("ledger_settings")
    op.drop_table("bank_accounts")
    op.drop_table("currencies")
    op.drop_table("product_types")
    op.drop_table("customers")
    op.drop_index("ix_transactions_parent_document_id", table_name="transactions")
    op.drop_index("ix_transactions_customer_id", table_name="transactions")
    op.drop_index("ix_transactions_document_number", table_name="transactions")
    op.drop_table("transactions")
