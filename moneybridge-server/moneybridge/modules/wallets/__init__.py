"""Wallet domain exports"""

from .models import (
    LedgerCheck,
    TransactionMeta,
    TransactionType,
    WalletSnapshot,
    WalletTransactionRecord,
)
from .repository import LedgerStore
from .service import WalletService

__all__ = [
    "LedgerCheck",
    "LedgerStore",
    "TransactionMeta",
    "TransactionType",
    "WalletService",
    "WalletSnapshot",
    "WalletTransactionRecord",
]
