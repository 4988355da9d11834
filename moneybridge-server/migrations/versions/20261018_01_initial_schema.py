"""initial mobile money and wallet ledger schema

Revision ID: 7c41d2e9b0a3
Revises: 
Create Date: 2026-10-18 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7c41d2e9b0a3"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100)),
        sa.Column("email", sa.String(length=100), unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), server_default="user"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)

    op.create_table(
        "wallets",
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), primary_key=True),
        sa.Column("balance_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="BDT"),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),
    )

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="BDT"),
        sa.Column("reference", sa.String(length=64)),
        sa.Column("description", sa.String(length=255)),
        sa.Column("balance_before_cents", sa.Integer(), nullable=False),
        sa.Column("balance_after_cents", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_wallet_transactions_account_id", "wallet_transactions", ["account_id"])
    op.create_index("ix_wallet_transactions_reference", "wallet_transactions", ["reference"])

    op.create_table(
        "fee_settings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("mobile_money_fee_percent", sa.Float(), nullable=False, server_default="0"),
        sa.Column("transfer_fee_percent", sa.Float(), nullable=False, server_default="0"),
        sa.Column("minimum_fee_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("maximum_fee_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_fee_settings_is_active", "fee_settings", ["is_active"])

    op.create_table(
        "mobile_money_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("requester_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("fulfiller_id", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("verified_by_id", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("provider", sa.String(length=10), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("fees_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="BDT"),
        sa.Column("recipient_number", sa.String(length=32), nullable=False),
        sa.Column("description", sa.String(length=255)),
        sa.Column("reference", sa.String(length=64), nullable=False, unique=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("transaction_id", sa.String(length=100)),
        sa.Column("sender_number", sa.String(length=32)),
        sa.Column("screenshot", sa.Text()),
        sa.Column("notes", sa.Text()),
        sa.Column("rejection_reason", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True)),
        sa.Column("fulfilled_at", sa.DateTime(timezone=True)),
        sa.Column("verified_at", sa.DateTime(timezone=True)),
        sa.Column("closed_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("amount_cents > 0", name="ck_mobile_money_requests_amount_positive"),
        sa.CheckConstraint("fees_cents >= 0", name="ck_mobile_money_requests_fees_non_negative"),
        sa.CheckConstraint(
            "fulfiller_id IS NULL OR fulfiller_id != requester_id",
            name="ck_mobile_money_requests_no_self_fulfillment",
        ),
    )
    op.create_index("ix_mobile_money_requests_requester_id", "mobile_money_requests", ["requester_id"])
    op.create_index("ix_mobile_money_requests_fulfiller_id", "mobile_money_requests", ["fulfiller_id"])
    op.create_index("ix_mobile_money_requests_provider", "mobile_money_requests", ["provider"])
    op.create_index("ix_mobile_money_requests_status", "mobile_money_requests", ["status"])
    op.create_index("ix_mobile_money_requests_created_at", "mobile_money_requests", ["created_at"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("entity", sa.String(length=64)),
        sa.Column("entity_id", sa.String(length=36)),
        sa.Column("description", sa.String(length=255)),
        sa.Column("metadata", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_activity_logs_account_id", "activity_logs", ["account_id"])
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_entity", "activity_logs", ["entity"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_entity", table_name="activity_logs")
    op.drop_index("ix_activity_logs_action", table_name="activity_logs")
    op.drop_index("ix_activity_logs_account_id", table_name="activity_logs")
    op.drop_table("activity_logs")

    op.drop_index("ix_mobile_money_requests_created_at", table_name="mobile_money_requests")
    op.drop_index("ix_mobile_money_requests_status", table_name="mobile_money_requests")
    op.drop_index("ix_mobile_money_requests_provider", table_name="mobile_money_requests")
    op.drop_index("ix_mobile_money_requests_fulfiller_id", table_name="mobile_money_requests")
    op.drop_index("ix_mobile_money_requests_requester_id", table_name="mobile_money_requests")
    op.drop_table("mobile_money_requests")

    op.drop_index("ix_fee_settings_is_active", table_name="fee_settings")
    op.drop_table("fee_settings")

    op.drop_index("ix_wallet_transactions_reference", table_name="wallet_transactions")
    op.drop_index("ix_wallet_transactions_account_id", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")

    op.drop_table("wallets")

    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")
