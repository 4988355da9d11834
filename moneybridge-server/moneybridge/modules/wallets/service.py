"""Wallet domain service"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.modules.accounts.models import Account
from moneybridge.modules.activity.models import ActivityAction
from moneybridge.modules.activity.repository import AuditLog
from moneybridge.modules.common.exceptions import ForbiddenError, NotFoundError, ValidationError
from moneybridge.modules.common.pagination import Page, PageRequest

from .models import LedgerCheck, TransactionMeta, TransactionType, WalletSnapshot, WalletTransactionRecord
from .repository import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletService:
    ledger: LedgerStore
    audit: AuditLog

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        from moneybridge.infrastructure.database.repositories.activity_log_repository import SqlActivityLog
        from moneybridge.infrastructure.database.repositories.wallet_repository import SqlLedgerStore

        return cls(SqlLedgerStore(session), SqlActivityLog(session))

    async def get_wallet(self, account_id: str) -> WalletSnapshot:
        wallet = await self.ledger.get_account(account_id)
        if wallet is None:
            raise NotFoundError(f"Wallet not found for account {account_id}", account_id=account_id)
        return wallet

    async def list_transactions(self, account_id: str, page: PageRequest) -> Page[WalletTransactionRecord]:
        rows = await self.ledger.list_transactions(account_id, page.limit, page.offset)
        total = await self.ledger.count_transactions(account_id)
        return Page(items=list(rows), page=page.page, limit=page.limit, total=total)

    async def adjust_balance(
        self,
        admin: Account,
        account_id: str,
        delta_cents: int,
        *,
        note: str | None = None,
    ) -> WalletTransactionRecord:
        """Manual credit (positive) or debit (negative) by an administrator."""
        if not admin.is_admin():
            raise ForbiddenError("Admin access required", account_id=admin.id)
        if delta_cents == 0:
            raise ValidationError("Adjustment amount cannot be zero")

        tx_type = TransactionType.ADMIN_CREDIT if delta_cents > 0 else TransactionType.ADMIN_DEBIT
        description = note or f"Balance {'credit' if delta_cents > 0 else 'debit'} by {admin.username}"

        async def _apply() -> WalletTransactionRecord:
            if await self.ledger.get_account(account_id) is None:
                raise NotFoundError(f"Wallet not found for account {account_id}", account_id=account_id)
            entry = await self.ledger.adjust_balance(
                account_id,
                delta_cents,
                TransactionMeta(type=tx_type, description=description),
            )
            await self.audit.append(
                account_id=admin.id,
                action=ActivityAction.WALLET_BALANCE_ADJUSTED,
                entity="wallet",
                entity_id=account_id,
                description=description,
                metadata={
                    "delta_cents": delta_cents,
                    "balance_before_cents": entry.balance_before_cents,
                    "balance_after_cents": entry.balance_after_cents,
                },
            )
            return entry

        entry = await self.ledger.run_in_transaction(_apply)
        logger.info(
            "Wallet %s adjusted by %s cents by admin %s (balance %s -> %s)",
            account_id,
            delta_cents,
            admin.id,
            entry.balance_before_cents,
            entry.balance_after_cents,
        )
        return entry

    async def verify_ledger(self, account_id: str) -> LedgerCheck:
        """Replay the ledger from its first ``balance_before`` and compare every snapshot."""
        wallet = await self.get_wallet(account_id)
        entries = await self.ledger.ledger_entries(account_id)
        if not entries:
            return LedgerCheck(
                account_id=account_id,
                entries=0,
                balance_cents=wallet.balance_cents,
                replayed_balance_cents=None,
                consistent=True,
            )

        running = entries[0].balance_before_cents
        for entry in entries:
            if entry.balance_before_cents != running or entry.balance_after_cents != running + entry.amount_cents:
                logger.warning("Ledger for %s breaks at entry %s", account_id, entry.id)
                return LedgerCheck(
                    account_id=account_id,
                    entries=len(entries),
                    balance_cents=wallet.balance_cents,
                    replayed_balance_cents=running,
                    consistent=False,
                    first_broken_entry_id=entry.id,
                    expected_before_cents=running,
                    found_before_cents=entry.balance_before_cents,
                )
            running = entry.balance_after_cents

        return LedgerCheck(
            account_id=account_id,
            entries=len(entries),
            balance_cents=wallet.balance_cents,
            replayed_balance_cents=running,
            consistent=running == wallet.balance_cents,
        )
