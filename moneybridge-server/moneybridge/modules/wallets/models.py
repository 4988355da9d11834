"""Domain models for wallet operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    MOBILE_MONEY_OUT = "MOBILE_MONEY_OUT"
    MOBILE_MONEY_REFUND = "MOBILE_MONEY_REFUND"
    MOBILE_MONEY_IN = "MOBILE_MONEY_IN"
    ADMIN_CREDIT = "ADMIN_CREDIT"
    ADMIN_DEBIT = "ADMIN_DEBIT"


@dataclass(slots=True)
class WalletSnapshot:
    account_id: str
    balance_cents: int
    currency: str
    updated_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class TransactionMeta:
    type: TransactionType
    reference: Optional[str] = None
    description: Optional[str] = None


@dataclass(slots=True)
class WalletTransactionRecord:
    """One immutable ledger entry. ``amount_cents`` is signed: debits are negative."""

    id: int
    account_id: str
    type: str
    amount_cents: int
    currency: str
    reference: Optional[str]
    description: Optional[str]
    balance_before_cents: int
    balance_after_cents: int
    created_at: datetime


@dataclass(slots=True)
class LedgerCheck:
    """Outcome of replaying an account's ledger."""

    account_id: str
    entries: int
    balance_cents: int
    replayed_balance_cents: Optional[int]
    consistent: bool
    first_broken_entry_id: Optional[int] = None
    expected_before_cents: Optional[int] = None
    found_before_cents: Optional[int] = None
