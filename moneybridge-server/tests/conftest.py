"""
Shared fixtures: a file-backed SQLite database per test, account and fee
factories, and a service builder with injectable settings and clock.
"""

import logging

import pytest
import pytest_asyncio

from moneybridge.core.config import MobileMoneySettings
from moneybridge.infrastructure.database import build_engine, build_session_factory, init_db
from moneybridge.infrastructure.database.repositories import SqlFeeSettingsProvider, SqlLedgerStore
from moneybridge.modules.accounts import AccountCreateInput, AccountService
from moneybridge.modules.mobile_money import MobileMoneyService, Provider
from moneybridge.modules.mobile_money.models import MobileMoneyRequest, RequestStatus
from moneybridge.modules.wallets import TransactionMeta, TransactionType
from tests.helpers import T0

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'moneybridge-test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def account_factory(session):
    async def _create(username, *, role="user", balance_cents=0, is_active=True, name=None, email=None):
        service = AccountService.with_session(session)
        account = await service.create_account(
            AccountCreateInput(
                username=username,
                password="secret123",
                name=name or f"{username.title()} Rahman",
                email=email or f"{username}@example.com",
                role=role,
                is_active=is_active,
            )
        )
        if balance_cents:
            await SqlLedgerStore(session).adjust_balance(
                account.id,
                balance_cents,
                TransactionMeta(type=TransactionType.ADMIN_CREDIT, description="opening balance"),
            )
        await session.commit()
        return account

    return _create


@pytest.fixture
def fee_settings_factory(session):
    async def _activate(percent="2", minimum_fee_cents=0, maximum_fee_cents=0):
        settings = await SqlFeeSettingsProvider(session).activate(
            mobile_money_fee_percent=percent,
            minimum_fee_cents=minimum_fee_cents,
            maximum_fee_cents=maximum_fee_cents,
        )
        await session.commit()
        return settings

    return _activate


@pytest.fixture
def service_factory(session):
    def _build(target_session=None, *, clock=None, **overrides):
        service = MobileMoneyService.with_session(
            target_session or session,
            settings=MobileMoneySettings(**overrides),
        )
        if clock is not None:
            service.clock = clock
        return service

    return _build


@pytest.fixture
def service(service_factory):
    return service_factory()


@pytest.fixture
def make_request():
    """Plain domain request for the storage-free tests."""

    def _make(status="PENDING", *, requester_id="requester", fulfiller_id=None, created_at=T0, **fields):
        values = dict(
            id="req-1",
            requester_id=requester_id,
            provider=Provider.BKASH,
            amount_cents=50000,
            fees_cents=1000,
            total_amount_cents=51000,
            currency="BDT",
            recipient_number="01712345678",
            reference="BKTEST123456",
            status=RequestStatus(status),
            created_at=created_at,
            fulfiller_id=fulfiller_id,
        )
        values.update(fields)
        return MobileMoneyRequest(**values)

    return _make

