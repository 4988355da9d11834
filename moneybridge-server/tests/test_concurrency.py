"""Races between independent sessions, each standing in for a separate handler."""

import asyncio

import pytest

from moneybridge.infrastructure.database.repositories import SqlMobileMoneyRequestRepository
from moneybridge.modules.common.exceptions import ConflictError, InsufficientBalance
from moneybridge.modules.mobile_money import RequestStatus
from tests.helpers import ledger_entries, request_count, wallet_balance


@pytest.fixture
async def pending_request(service, account_factory, fee_settings_factory):
    await fee_settings_factory("2")
    requester = await account_factory("rahim", balance_cents=100000)
    request = await service.create_request(
        requester,
        amount_cents=50000,
        provider="BKASH",
        recipient_number="01712345678",
    )
    return requester, request


async def test_stale_compare_and_swap_loses(session_factory, pending_request, account_factory):
    _, request = pending_request
    first = await account_factory("karim")
    second = await account_factory("salma")

    async with session_factory() as session_a, session_factory() as session_b:
        repo_a = SqlMobileMoneyRequestRepository(session_a)
        repo_b = SqlMobileMoneyRequestRepository(session_b)
        seen_a = await repo_a.find_by_id(request.id)
        seen_b = await repo_b.find_by_id(request.id)
        assert seen_a.status is seen_b.status is RequestStatus.PENDING

        assert await repo_a.conditional_update(
            request.id,
            RequestStatus.PENDING,
            {"status": RequestStatus.ACCEPTED, "fulfiller_id": first.id},
            require_unassigned=True,
        )
        await session_a.commit()

        # b still believes the request is PENDING
        assert not await repo_b.conditional_update(
            request.id,
            seen_b.status,
            {"status": RequestStatus.ACCEPTED, "fulfiller_id": second.id},
            require_unassigned=True,
        )
        await session_b.rollback()

        final = await repo_b.find_by_id(request.id)
        assert final.fulfiller_id == first.id


async def test_single_acceptor(session_factory, service_factory, pending_request, account_factory):
    _, request = pending_request
    acceptors = [await account_factory(f"acceptor{index}") for index in range(6)]

    async def _accept(actor):
        async with session_factory() as own_session:
            return await service_factory(own_session).accept_request(actor, request.id)

    results = await asyncio.gather(*(_accept(actor) for actor in acceptors), return_exceptions=True)

    winners = [result for result in results if not isinstance(result, BaseException)]
    losers = [result for result in results if isinstance(result, BaseException)]
    assert len(winners) == 1
    assert len(losers) == 5
    assert all(isinstance(error, ConflictError) for error in losers)

    async with session_factory() as check:
        final = await SqlMobileMoneyRequestRepository(check).find_by_id(request.id)
    assert final.status is RequestStatus.ACCEPTED
    assert final.fulfiller_id == winners[0].fulfiller_id


async def test_concurrent_creates_never_overdraw(session, session_factory, service_factory, account_factory, fee_settings_factory):
    await fee_settings_factory("2")
    requester = await account_factory("rahim", balance_cents=30600)

    async def _create():
        async with session_factory() as own_session:
            return await service_factory(own_session).create_request(
                requester,
                amount_cents=10000,
                provider="NAGAD",
                recipient_number="01712345678",
            )

    results = await asyncio.gather(*(_create() for _ in range(6)), return_exceptions=True)

    created = [result for result in results if not isinstance(result, BaseException)]
    refused = [result for result in results if isinstance(result, BaseException)]
    # each request costs 10200, the wallet covers exactly three
    assert len(created) == 3
    assert all(isinstance(error, InsufficientBalance) for error in refused)
    assert await wallet_balance(session, requester.id) == 0
    assert await request_count(session) == 3
    assert len(await ledger_entries(session, requester.id)) == 4
