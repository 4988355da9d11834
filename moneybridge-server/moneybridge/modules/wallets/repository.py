"""Ledger store protocol: balances plus the append-only transaction log."""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol, Sequence, TypeVar

from .models import TransactionMeta, WalletSnapshot, WalletTransactionRecord

T = TypeVar("T")


class LedgerStore(Protocol):
    async def get_account(self, account_id: str) -> WalletSnapshot | None:
        ...

    async def adjust_balance(
        self,
        account_id: str,
        delta_cents: int,
        meta: TransactionMeta,
    ) -> WalletTransactionRecord:
        """Atomically apply ``delta_cents`` and append the matching ledger entry.

        Debits that would take the balance below zero raise ``InsufficientBalance``
        and leave the wallet untouched.
        """
        ...

    async def run_in_transaction(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` so that every write it makes commits together or not at all."""
        ...

    async def list_transactions(self, account_id: str, limit: int, offset: int) -> Sequence[WalletTransactionRecord]:
        ...

    async def count_transactions(self, account_id: str) -> int:
        ...

    async def ledger_entries(self, account_id: str) -> Sequence[WalletTransactionRecord]:
        """All entries for the account in commit order."""
        ...
