import random
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from moneybridge.modules.common.exceptions import (
    ConfigurationError,
    ForbiddenError,
    InsufficientBalance,
    InvalidStateTransition,
    StorageError,
    ValidationError,
)
from moneybridge.modules.common.pagination import PageRequest
from moneybridge.modules.mobile_money import (
    FulfillmentEvidence,
    Provider,
    RequestFilters,
    RequestNotFoundError,
    RequestStatus,
    refund_reference,
)
from moneybridge.modules.wallets import TransactionType
from tests.helpers import (
    T0,
    audit_entries,
    ledger_entries,
    request_count,
    transactions_by_reference,
    wallet_balance,
)

EVIDENCE = FulfillmentEvidence(transaction_id="8N7A6B5C4D", sender_number="01811111111")


@pytest.fixture
async def parties(account_factory, fee_settings_factory):
    await fee_settings_factory("2")
    requester = await account_factory("rahim", balance_cents=100000)
    fulfiller = await account_factory("karim")
    stranger = await account_factory("salma")
    admin = await account_factory("admin", role="admin")
    return requester, fulfiller, stranger, admin


async def _create(service, requester, amount_cents=50000, provider="BKASH"):
    return await service.create_request(
        requester,
        amount_cents=amount_cents,
        provider=provider,
        recipient_number="01712345678",
    )


async def test_create_debits_total_once(session, service, parties):
    requester, *_ = parties

    request = await _create(service, requester)

    assert request.status is RequestStatus.PENDING
    assert request.provider is Provider.BKASH
    assert (request.amount_cents, request.fees_cents, request.total_amount_cents) == (50000, 1000, 51000)
    assert request.reference.startswith("BK")
    assert request.fulfiller_id is None
    assert await wallet_balance(session, requester.id) == 49000

    debits = await transactions_by_reference(session, request.reference)
    assert len(debits) == 1
    assert debits[0].type == TransactionType.MOBILE_MONEY_OUT.value
    assert debits[0].amount_cents == -51000
    assert (debits[0].balance_before_cents, debits[0].balance_after_cents) == (100000, 49000)


async def test_create_records_audit_entry(session, service, parties):
    requester, *_ = parties
    request = await _create(service, requester)

    entries = await audit_entries(session, request.id)
    assert [entry.action for entry in entries] == ["MOBILE_MONEY_REQUEST_CREATED"]
    assert entries[0].account_id == requester.id


async def test_insufficient_balance_persists_nothing(session, service, parties):
    requester, *_ = parties

    with pytest.raises(InsufficientBalance) as excinfo:
        await _create(service, requester, amount_cents=99000)

    # 99000 + 1980 fee against a 100000 balance
    assert excinfo.value.shortfall_cents == 980
    assert excinfo.value.details["available_cents"] == 100000
    assert await wallet_balance(session, requester.id) == 100000
    assert await request_count(session) == 0
    assert len(await ledger_entries(session, requester.id)) == 1


def _failing(statement):
    async def _raise(*args, **kwargs):
        raise OperationalError(statement, {}, Exception("disk I/O error"))

    return _raise


async def test_storage_failure_after_debit_rolls_back_create(session, service, parties, monkeypatch):
    requester, *_ = parties
    monkeypatch.setattr(service.requests, "insert", _failing("INSERT INTO mobile_money_requests"))

    with pytest.raises(StorageError):
        await _create(service, requester)

    assert await wallet_balance(session, requester.id) == 100000
    entries = await ledger_entries(session, requester.id)
    assert [entry.type for entry in entries] == [TransactionType.ADMIN_CREDIT.value]
    assert await request_count(session) == 0


async def test_storage_failure_after_refund_rolls_back_cancel(session, service, parties, monkeypatch):
    requester, *_ = parties
    request = await _create(service, requester)
    monkeypatch.setattr(service.audit, "append", _failing("INSERT INTO activity_logs"))

    with pytest.raises(StorageError):
        await service.cancel_request(requester, request.id)

    assert await wallet_balance(session, requester.id) == 49000
    assert len(await transactions_by_reference(session, refund_reference(request.reference))) == 0
    monkeypatch.undo()
    reloaded = await service.get_request(requester, request.id)
    assert reloaded.status is RequestStatus.PENDING
    assert reloaded.closed_at is None


async def test_unreadable_insert_is_storage_error(session, service, parties, monkeypatch):
    requester, *_ = parties

    async def _vanished(request_id):
        return None

    monkeypatch.setattr(service.requests, "find_by_id", _vanished)

    with pytest.raises(StorageError):
        await _create(service, requester)

    assert await wallet_balance(session, requester.id) == 100000
    assert await request_count(session) == 0


async def test_missing_fee_settings_is_configuration_error(session, account_factory, service):
    requester = await account_factory("rahim", balance_cents=100000)

    with pytest.raises(ConfigurationError):
        await _create(service, requester)

    assert await wallet_balance(session, requester.id) == 100000
    assert await request_count(session) == 0


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"amount_cents": 50, "provider": "BKASH", "recipient_number": "01712345678"}, "minimum_amount_cents"),
        ({"amount_cents": 5000, "provider": "PAYPAL", "recipient_number": "01712345678"}, "provider"),
        ({"amount_cents": 5000, "provider": 1, "recipient_number": "01712345678"}, "provider"),
        ({"amount_cents": 5000, "provider": "NAGAD", "recipient_number": "  "}, "missing_fields"),
        ({"amount_cents": 5000, "provider": "NAGAD", "recipient_number": "call me"}, "recipient_number"),
    ],
)
async def test_create_validates_input(session, service, parties, kwargs, field):
    requester, *_ = parties
    with pytest.raises(ValidationError) as excinfo:
        await service.create_request(requester, **kwargs)
    assert field in excinfo.value.details
    assert await request_count(session) == 0


async def test_recipient_number_is_normalised(service, parties):
    requester, *_ = parties
    request = await service.create_request(
        requester,
        amount_cents=1000,
        provider="rocket",
        recipient_number=" 017-1234 5678 ",
    )
    assert request.provider is Provider.ROCKET
    assert request.recipient_number == "01712345678"


async def test_cancel_refunds_total(session, service, parties):
    requester, *_ = parties
    request = await _create(service, requester)

    cancelled = await service.cancel_request(requester, request.id)

    assert cancelled.status is RequestStatus.CANCELLED
    assert cancelled.closed_at is not None
    assert await wallet_balance(session, requester.id) == 100000
    refunds = await transactions_by_reference(session, refund_reference(request.reference))
    assert len(refunds) == 1
    assert refunds[0].type == TransactionType.MOBILE_MONEY_REFUND.value
    assert refunds[0].amount_cents == 51000


async def test_cancel_twice_does_not_refund_twice(session, service, parties):
    requester, *_ = parties
    request = await _create(service, requester)
    await service.cancel_request(requester, request.id)

    with pytest.raises(InvalidStateTransition):
        await service.cancel_request(requester, request.id)
    assert await wallet_balance(session, requester.id) == 100000


async def test_cancel_by_stranger_is_forbidden(session, service, parties):
    requester, _, stranger, _ = parties
    request = await _create(service, requester)

    with pytest.raises(ForbiddenError):
        await service.cancel_request(stranger, request.id)
    assert await wallet_balance(session, requester.id) == 49000


async def test_cancel_accepted_request_releases_fulfiller(session, service, parties):
    requester, fulfiller, _, admin = parties
    request = await _create(service, requester)
    await service.accept_request(fulfiller, request.id)

    cancelled = await service.cancel_request(admin, request.id)

    assert cancelled.status is RequestStatus.CANCELLED
    assert cancelled.fulfiller_id is None
    assert await wallet_balance(session, requester.id) == 100000
    entries = await audit_entries(session, request.id)
    assert entries[-1].account_id == admin.id


async def test_full_lifecycle(session, service, parties):
    requester, fulfiller, _, admin = parties
    request = await _create(service, requester)

    accepted = await service.accept_request(fulfiller, request.id)
    assert accepted.status is RequestStatus.ACCEPTED
    assert accepted.fulfiller_id == fulfiller.id
    assert accepted.accepted_at is not None

    fulfilled = await service.fulfill_request(fulfiller, request.id, EVIDENCE)
    assert fulfilled.status is RequestStatus.FULFILLED
    assert fulfilled.transaction_id == "8N7A6B5C4D"
    assert fulfilled.fulfilled_at is not None

    verified = await service.verify_request(admin, request.id, "approve")
    assert verified.status is RequestStatus.VERIFIED
    assert verified.verified_by_id == admin.id
    assert verified.fulfiller.id == fulfiller.id

    # money moved once, at creation
    assert await wallet_balance(session, requester.id) == 49000
    assert await wallet_balance(session, fulfiller.id) == 0

    actions = [entry.action for entry in await audit_entries(session, request.id)]
    assert actions == [
        "MOBILE_MONEY_REQUEST_CREATED",
        "MOBILE_MONEY_REQUEST_ACCEPTED",
        "MOBILE_MONEY_REQUEST_FULFILLED",
        "MOBILE_MONEY_REQUEST_VERIFIED",
    ]


async def test_audit_entry_records_status_change(session, service, parties):
    requester, fulfiller, *_ = parties
    request = await _create(service, requester)
    await service.accept_request(fulfiller, request.id)

    entries = await audit_entries(session, request.id)
    assert entries[-1].account_id == fulfiller.id
    assert '"before": "PENDING"' in entries[-1].meta
    assert '"after": "ACCEPTED"' in entries[-1].meta


async def test_accept_own_request_is_forbidden(service, parties):
    requester, *_ = parties
    request = await _create(service, requester)
    with pytest.raises(ForbiddenError):
        await service.accept_request(requester, request.id)


async def test_unknown_request(service, parties):
    _, fulfiller, *_ = parties
    with pytest.raises(RequestNotFoundError):
        await service.accept_request(fulfiller, "does-not-exist")


async def test_verify_pending_request_is_invalid(service, parties):
    requester, _, _, admin = parties
    request = await _create(service, requester)
    with pytest.raises(InvalidStateTransition):
        await service.verify_request(admin, request.id)


async def test_verify_by_non_admin_is_forbidden(service, parties):
    requester, fulfiller, stranger, _ = parties
    request = await _create(service, requester)
    await service.accept_request(fulfiller, request.id)
    await service.fulfill_request(fulfiller, request.id, EVIDENCE)

    with pytest.raises(ForbiddenError):
        await service.verify_request(stranger, request.id)


async def test_fulfiller_credit_on_verify(session, service_factory, parties):
    requester, fulfiller, _, admin = parties
    service = service_factory(credit_fulfiller_on_verify=True)
    request = await _create(service, requester)
    await service.accept_request(fulfiller, request.id)
    await service.fulfill_request(fulfiller, request.id, EVIDENCE)

    await service.verify_request(admin, request.id)

    assert await wallet_balance(session, fulfiller.id) == 50000
    payouts = [entry for entry in await ledger_entries(session, fulfiller.id)]
    assert [entry.type for entry in payouts] == [TransactionType.MOBILE_MONEY_IN.value]


async def test_rejection_disabled_by_default(session, service, parties):
    requester, fulfiller, _, admin = parties
    request = await _create(service, requester)
    await service.accept_request(fulfiller, request.id)
    await service.fulfill_request(fulfiller, request.id, EVIDENCE)

    with pytest.raises(ValidationError):
        await service.verify_request(admin, request.id, "reject", reason="fake screenshot")

    current = await service.get_request(admin, request.id)
    assert current.status is RequestStatus.FULFILLED
    assert await wallet_balance(session, requester.id) == 49000


async def test_rejection_with_refund_policy(session, service_factory, parties):
    requester, fulfiller, _, admin = parties
    service = service_factory(rejection_policy="refund")
    request = await _create(service, requester)
    await service.accept_request(fulfiller, request.id)
    await service.fulfill_request(fulfiller, request.id, EVIDENCE)

    rejected = await service.verify_request(admin, request.id, "reject", reason="fake screenshot")

    assert rejected.status is RequestStatus.CANCELLED
    assert rejected.rejection_reason == "fake screenshot"
    assert rejected.fulfiller_id is None
    assert await wallet_balance(session, requester.id) == 100000
    assert (await audit_entries(session, request.id))[-1].action == "MOBILE_MONEY_REQUEST_REJECTED"


async def test_unknown_decision(service, parties):
    requester, _, _, admin = parties
    request = await _create(service, requester)
    with pytest.raises(ValidationError):
        await service.verify_request(admin, request.id, "maybe")


async def test_balance_conservation(session, service_factory, account_factory, fee_settings_factory):
    await fee_settings_factory("1.8", minimum_fee_cents=500)
    requester = await account_factory("rahim", balance_cents=1_000_000)
    service = service_factory()
    rng = random.Random(7)

    kept = 0
    for _ in range(12):
        request = await _create(service, requester, amount_cents=rng.randrange(1000, 60000))
        if rng.random() < 0.5:
            await service.cancel_request(requester, request.id)
        else:
            kept += request.total_amount_cents

    assert await wallet_balance(session, requester.id) == 1_000_000 - kept


async def test_expire_stale_requests_refunds(session, service_factory, parties):
    requester, *_ = parties
    old_service = service_factory(clock=lambda: T0)
    stale = await _create(old_service, requester, amount_cents=20000)
    fresh_service = service_factory(clock=lambda: T0 + timedelta(hours=23))
    fresh = await _create(fresh_service, requester, amount_cents=20000)
    assert await wallet_balance(session, requester.id) == 100000 - 2 * 20400

    expired = await fresh_service.expire_stale_requests(now=T0 + timedelta(hours=25))

    assert [request.id for request in expired] == [stale.id]
    assert expired[0].status is RequestStatus.EXPIRED
    assert await wallet_balance(session, requester.id) == 100000 - 20400
    current = await fresh_service.get_request(requester, fresh.id)
    assert current.status is RequestStatus.PENDING


async def test_expire_young_request_is_invalid(service_factory, parties):
    requester, *_ = parties
    service = service_factory(clock=lambda: T0)
    request = await _create(service, requester)
    with pytest.raises(InvalidStateTransition):
        await service.expire_request(request.id, now=T0 + timedelta(minutes=5))


async def test_browser_sees_masked_number_until_accepting(service, parties):
    requester, fulfiller, stranger, _ = parties
    request = await _create(service, requester)

    before = await service.get_request(fulfiller, request.id)
    assert before.masked
    assert before.recipient_number == "017******78"

    await service.accept_request(fulfiller, request.id)
    after = await service.get_request(fulfiller, request.id)
    assert not after.masked
    assert after.recipient_number == "01712345678"

    # no longer in the browse set for everyone else
    with pytest.raises(RequestNotFoundError):
        await service.get_request(stranger, request.id)


async def test_list_requests_applies_visibility_and_filters(service, parties, account_factory):
    requester, fulfiller, stranger, admin = parties
    other = await account_factory("nadia", balance_cents=100000)
    first = await _create(service, requester, amount_cents=10000)
    second = await _create(service, requester, amount_cents=20000, provider="NAGAD")
    third = await _create(service, other, amount_cents=30000)
    await service.accept_request(fulfiller, third.id)

    stranger_page = await service.list_requests(stranger)
    assert {item.id for item in stranger_page.items} == {first.id, second.id}
    assert all(item.masked for item in stranger_page.items)

    fulfiller_page = await service.list_requests(fulfiller)
    assert {item.id for item in fulfiller_page.items} == {first.id, second.id, third.id}

    nagad = await service.list_requests(admin, RequestFilters(provider=Provider.NAGAD))
    assert [item.id for item in nagad.items] == [second.id]

    accepted = await service.list_requests(admin, RequestFilters(status=RequestStatus.ACCEPTED))
    assert [item.id for item in accepted.items] == [third.id]

    paged = await service.list_requests(admin, page=PageRequest(page=1, limit=2))
    assert paged.total == 3
    assert len(paged.items) == 2
    assert paged.pages == 2


async def test_list_is_newest_first(service_factory, parties):
    requester, *_ = parties
    ids = []
    for hours in range(3):
        service = service_factory(clock=lambda hours=hours: T0 + timedelta(hours=hours))
        ids.append((await _create(service, requester, amount_cents=1000)).id)

    page = await service_factory().list_requests(requester)
    assert [item.id for item in page.items] == list(reversed(ids))


async def test_dashboard_counts(service_factory, parties):
    requester, fulfiller, _, admin = parties
    service = service_factory(clock=lambda: T0)
    done = await _create(service, requester, amount_cents=10000)
    await service.accept_request(fulfiller, done.id)
    await service.fulfill_request(fulfiller, done.id, EVIDENCE)
    await service.verify_request(admin, done.id)
    await _create(service, requester, amount_cents=20000)
    cancelled = await _create(service, requester, amount_cents=5000)
    await service.cancel_request(requester, cancelled.id)

    stats = await service.dashboard(requester, now=T0 + timedelta(days=2))

    assert stats.total_requests == 3
    assert stats.pending_requests == 1
    assert stats.completed_requests == 1
    assert stats.completed_amount_cents == 10000
    assert stats.this_month_amount_cents == 10000
    assert stats.by_status == {"VERIFIED": 1, "PENDING": 1, "CANCELLED": 1}
    assert len(stats.recent) == 3


async def test_fee_quote(service, parties):
    result = await service.quote_fee(50000)
    assert (result.fee_cents, result.total_cents) == (1000, 51000)
    with pytest.raises(ValidationError):
        await service.quote_fee(10)
