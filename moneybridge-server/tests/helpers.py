"""Small read helpers shared by the database-backed tests."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select

from moneybridge.db.models import ActivityLog, MobileMoneyRequest as RequestModel, WalletTransaction
from moneybridge.infrastructure.database.repositories import SqlLedgerStore
from moneybridge.modules.fees import FeeSettings

T0 = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


async def wallet_balance(session, account_id):
    wallet = await SqlLedgerStore(session).get_account(account_id)
    return wallet.balance_cents


async def ledger_entries(session, account_id):
    return list(await SqlLedgerStore(session).ledger_entries(account_id))


async def request_count(session):
    result = await session.execute(select(RequestModel.id))
    return len(result.scalars().all())


async def audit_entries(session, request_id):
    result = await session.execute(
        select(ActivityLog).where(ActivityLog.entity_id == request_id).order_by(ActivityLog.id)
    )
    return result.scalars().all()


async def transactions_by_reference(session, reference):
    result = await session.execute(select(WalletTransaction).where(WalletTransaction.reference == reference))
    return result.scalars().all()


def fixed_fee(percent="1.8", minimum=0, maximum=0):
    return FeeSettings(
        mobile_money_fee_percent=Decimal(percent),
        minimum_fee_cents=minimum,
        maximum_fee_cents=maximum,
    )
