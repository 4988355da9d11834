"""SQLAlchemy implementation of the ledger store"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Sequence, TypeVar

from sqlalchemy import asc, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.db.models import Wallet, WalletTransaction, utcnow
from moneybridge.modules.common.clock import ensure_utc
from moneybridge.modules.common.exceptions import InsufficientBalance, NotFoundError, StorageError
from moneybridge.modules.wallets.models import TransactionMeta, WalletSnapshot, WalletTransactionRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlLedgerStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_account(self, account_id: str) -> WalletSnapshot | None:
        # column select bypasses the identity map, so balances are never stale
        stmt = select(Wallet.account_id, Wallet.balance_cents, Wallet.currency, Wallet.updated_at).where(
            Wallet.account_id == account_id
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        return WalletSnapshot(
            account_id=row.account_id,
            balance_cents=row.balance_cents,
            currency=row.currency,
            updated_at=ensure_utc(row.updated_at),
        )

    async def adjust_balance(
        self,
        account_id: str,
        delta_cents: int,
        meta: TransactionMeta,
    ) -> WalletTransactionRecord:
        stmt = update(Wallet).where(Wallet.account_id == account_id)
        if delta_cents < 0:
            stmt = stmt.where(Wallet.balance_cents >= -delta_cents)
        stmt = (
            stmt.values(balance_cents=Wallet.balance_cents + delta_cents, updated_at=utcnow())
            .returning(Wallet.balance_cents, Wallet.currency)
            .execution_options(synchronize_session=False)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            wallet = await self.get_account(account_id)
            if wallet is None:
                raise NotFoundError(f"Wallet not found for account {account_id}", account_id=account_id)
            raise InsufficientBalance(
                account_id=account_id,
                required_cents=-delta_cents,
                available_cents=wallet.balance_cents,
            )

        balance_after, currency = row
        tx = WalletTransaction(
            account_id=account_id,
            type=meta.type.value,
            amount_cents=delta_cents,
            currency=currency,
            reference=meta.reference,
            description=meta.description,
            balance_before_cents=balance_after - delta_cents,
            balance_after_cents=balance_after,
        )
        self.session.add(tx)
        await self.session.flush()
        return self._to_record(tx)

    async def run_in_transaction(self, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            result = await fn()
            await self.session.commit()
            return result
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Ledger transaction rolled back: %s", exc)
            raise StorageError("Transactional store failed, nothing was persisted", reason=type(exc).__name__) from exc
        except BaseException:
            await self.session.rollback()
            raise

    async def list_transactions(self, account_id: str, limit: int, offset: int) -> Sequence[WalletTransactionRecord]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.account_id == account_id)
            .order_by(desc(WalletTransaction.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_record(row) for row in result.scalars().all()]

    async def count_transactions(self, account_id: str) -> int:
        stmt = select(func.count()).select_from(WalletTransaction).where(WalletTransaction.account_id == account_id)
        return int(await self.session.scalar(stmt) or 0)

    async def ledger_entries(self, account_id: str) -> Sequence[WalletTransactionRecord]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.account_id == account_id)
            .order_by(asc(WalletTransaction.id))
        )
        result = await self.session.execute(stmt)
        return [self._to_record(row) for row in result.scalars().all()]

    @staticmethod
    def _to_record(model: WalletTransaction) -> WalletTransactionRecord:
        return WalletTransactionRecord(
            id=model.id,
            account_id=model.account_id,
            type=model.type,
            amount_cents=model.amount_cents,
            currency=model.currency,
            reference=model.reference,
            description=model.description,
            balance_before_cents=model.balance_before_cents,
            balance_after_cents=model.balance_after_cents,
            created_at=ensure_utc(model.created_at),
        )
