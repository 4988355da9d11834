"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from moneybridge.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100))
    email = Column(String(100), unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="user")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login_at = Column(DateTime(timezone=True))

    wallet = relationship("Wallet", back_populates="account", uselist=False)


class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),)

    account_id = Column(String(36), ForeignKey("accounts.id"), primary_key=True)
    balance_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="BDT")
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    account = relationship("Account", back_populates="wallet")


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"

    # autoincrement id gives the ledger its total order per account
    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    type = Column(String(32), nullable=False)  # MOBILE_MONEY_OUT, MOBILE_MONEY_REFUND, MOBILE_MONEY_IN, ADMIN_CREDIT, ADMIN_DEBIT
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="BDT")
    reference = Column(String(64), index=True)
    description = Column(String(255))
    balance_before_cents = Column(Integer, nullable=False)
    balance_after_cents = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class FeeSettings(Base):
    __tablename__ = "fee_settings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    mobile_money_fee_percent = Column(Float, nullable=False, default=0.0)
    transfer_fee_percent = Column(Float, nullable=False, default=0.0)
    minimum_fee_cents = Column(Integer, nullable=False, default=0)
    maximum_fee_cents = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class MobileMoneyRequest(Base):
    __tablename__ = "mobile_money_requests"
    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_mobile_money_requests_amount_positive"),
        CheckConstraint("fees_cents >= 0", name="ck_mobile_money_requests_fees_non_negative"),
        CheckConstraint(
            "fulfiller_id IS NULL OR fulfiller_id != requester_id",
            name="ck_mobile_money_requests_no_self_fulfillment",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    requester_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    fulfiller_id = Column(String(36), ForeignKey("accounts.id"), nullable=True, index=True)
    verified_by_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    provider = Column(String(10), nullable=False, index=True)
    amount_cents = Column(Integer, nullable=False)
    fees_cents = Column(Integer, nullable=False, default=0)
    total_amount_cents = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="BDT")
    recipient_number = Column(String(32), nullable=False)
    description = Column(String(255))
    reference = Column(String(64), unique=True, nullable=False)
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    transaction_id = Column(String(100))
    sender_number = Column(String(32))
    screenshot = Column(Text)
    notes = Column(Text)
    rejection_reason = Column(String(255))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    accepted_at = Column(DateTime(timezone=True))
    fulfilled_at = Column(DateTime(timezone=True))
    verified_at = Column(DateTime(timezone=True))
    closed_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    requester = relationship("Account", foreign_keys=[requester_id])
    fulfiller = relationship("Account", foreign_keys=[fulfiller_id])
    verified_by = relationship("Account", foreign_keys=[verified_by_id])


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True, index=True)
    action = Column(String(64), nullable=False, index=True)
    entity = Column(String(64), index=True)
    entity_id = Column(String(36))
    description = Column(String(255))
    meta = Column("metadata", Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
