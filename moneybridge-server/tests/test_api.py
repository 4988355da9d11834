import httpx
import pytest

from moneybridge.core.security import create_access_token
from moneybridge.interfaces.http.deps.database import get_db_session
from moneybridge.main import app


@pytest.fixture
async def client(session_factory):
    async def _session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth(account):
    token = create_access_token(account.id, account.username, account.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def users(account_factory, fee_settings_factory):
    await fee_settings_factory("2")
    requester = await account_factory("rahim", balance_cents=100000)
    fulfiller = await account_factory("karim")
    admin = await account_factory("admin", role="admin")
    return requester, fulfiller, admin


async def _create(client, requester, amount_cents=50000):
    return await client.post(
        "/api/mobile-money/requests",
        json={"amount_cents": amount_cents, "provider": "bkash", "recipient_number": "01712345678"},
        headers=auth(requester),
    )


async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_register_login_and_me(client):
    registered = await client.post(
        "/api/auth/register",
        json={"username": "nadia", "password": "secret123", "name": "Nadia Islam"},
    )
    assert registered.status_code == 201
    assert registered.json()["role"] == "user"

    login = await client.post("/api/auth/login", json={"username": "nadia", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "nadia"

    wallet = await client.get("/api/wallet", headers={"Authorization": f"Bearer {token}"})
    assert wallet.json()["balance_cents"] == 0
    assert wallet.json()["currency"] == "BDT"


async def test_duplicate_registration(client):
    payload = {"username": "nadia", "password": "secret123"}
    await client.post("/api/auth/register", json=payload)
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["code"] == "account_exists"


async def test_bad_login(client, users):
    response = await client.post("/api/auth/login", json={"username": "rahim", "password": "wrongpass"})
    assert response.status_code == 401


async def test_create_request(client, users):
    requester, *_ = users
    response = await _create(client, requester)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["provider"] == "BKASH"
    assert (body["fees_cents"], body["total_amount_cents"]) == (1000, 51000)
    assert body["viewer_relation"] == "requester"

    wallet = await client.get("/api/wallet", headers=auth(requester))
    assert wallet.json()["balance_cents"] == 49000
    transactions = await client.get("/api/wallet/transactions", headers=auth(requester))
    assert transactions.json()["transactions"][0]["type"] == "MOBILE_MONEY_OUT"


async def test_insufficient_balance_maps_to_400(client, users):
    requester, *_ = users
    response = await _create(client, requester, amount_cents=200000)
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "insufficient_balance"
    assert body["details"]["shortfall_cents"] == 104000


async def test_invalid_provider_maps_to_400(client, users):
    requester, *_ = users
    response = await client.post(
        "/api/mobile-money/requests",
        json={"amount_cents": 1000, "provider": "upay", "recipient_number": "01712345678"},
        headers=auth(requester),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


async def test_missing_fee_settings_maps_to_500(client, account_factory):
    requester = await account_factory("rahim", balance_cents=100000)
    response = await _create(client, requester)
    assert response.status_code == 500
    assert response.json()["code"] == "configuration_error"


async def test_accept_own_request_is_403(client, users):
    requester, *_ = users
    request_id = (await _create(client, requester)).json()["id"]
    response = await client.post(f"/api/mobile-money/requests/{request_id}/accept", headers=auth(requester))
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


async def test_second_accept_is_409(client, users, account_factory):
    requester, fulfiller, _ = users
    latecomer = await account_factory("salma")
    request_id = (await _create(client, requester)).json()["id"]

    first = await client.post(f"/api/mobile-money/requests/{request_id}/accept", headers=auth(fulfiller))
    second = await client.post(f"/api/mobile-money/requests/{request_id}/accept", headers=auth(latecomer))

    assert first.status_code == 200
    assert first.json()["recipient_number"] == "01712345678"
    assert second.status_code == 409
    assert second.json()["code"] == "conflict"


async def test_unknown_request_is_404(client, users):
    _, fulfiller, _ = users
    response = await client.get("/api/mobile-money/requests/nope", headers=auth(fulfiller))
    assert response.status_code == 404
    assert response.json()["details"]["request_id"] == "nope"


async def test_browse_list_is_masked(client, users):
    requester, fulfiller, _ = users
    await _create(client, requester)

    response = await client.get("/api/mobile-money/requests", params={"status": "pending"}, headers=auth(fulfiller))

    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["recipient_number"] == "017******78"
    assert body["items"][0]["masked"] is True


async def test_lifecycle_over_http(client, users):
    requester, fulfiller, admin = users
    request_id = (await _create(client, requester)).json()["id"]
    base = f"/api/mobile-money/requests/{request_id}"

    assert (await client.post(f"{base}/accept", headers=auth(fulfiller))).status_code == 200
    fulfilled = await client.post(
        f"{base}/fulfill",
        json={"transaction_id": "8N7A6B5C4D", "sender_number": "01811111111"},
        headers=auth(fulfiller),
    )
    assert fulfilled.json()["status"] == "FULFILLED"

    forbidden = await client.post(f"{base}/verify", json={"decision": "approve"}, headers=auth(requester))
    assert forbidden.status_code == 403

    verified = await client.post(f"{base}/verify", json={"decision": "approve"}, headers=auth(admin))
    assert verified.status_code == 200
    assert verified.json()["status"] == "VERIFIED"

    cancel = await client.post(f"{base}/cancel", headers=auth(requester))
    assert cancel.status_code == 409
    assert cancel.json()["code"] == "invalid_state_transition"

    dashboard = await client.get("/api/mobile-money/dashboard", headers=auth(requester))
    assert dashboard.json()["completed_requests"] == 1

    logs = await client.get("/api/activity-logs", headers=auth(fulfiller))
    assert {item["action"] for item in logs.json()["items"]} == {
        "MOBILE_MONEY_REQUEST_ACCEPTED",
        "MOBILE_MONEY_REQUEST_FULFILLED",
    }


async def test_cancel_refunds_over_http(client, users):
    requester, *_ = users
    request_id = (await _create(client, requester)).json()["id"]

    response = await client.post(f"/api/mobile-money/requests/{request_id}/cancel", headers=auth(requester))

    assert response.json()["status"] == "CANCELLED"
    wallet = await client.get("/api/wallet", headers=auth(requester))
    assert wallet.json()["balance_cents"] == 100000


async def test_fee_settings_and_quote(client, users):
    settings = await client.get("/api/fee-settings")
    assert settings.status_code == 200
    assert float(settings.json()["mobile_money_fee_percent"]) == 2.0

    quote = await client.get("/api/fee-settings/quote", params={"amount_cents": 50000})
    assert quote.json() == {"amount_cents": 50000, "fee_cents": 1000, "total_cents": 51000}


async def test_admin_endpoints(client, users):
    requester, fulfiller, admin = users

    credit = await client.post(
        f"/api/admin/users/{fulfiller.id}/balance",
        json={"delta_cents": 7500, "note": "agent float"},
        headers=auth(admin),
    )
    assert credit.status_code == 200
    assert credit.json()["balance_after_cents"] == 7500

    check = await client.get(f"/api/admin/users/{fulfiller.id}/ledger/verify", headers=auth(admin))
    assert check.json()["consistent"] is True

    updated = await client.put(
        "/api/admin/fee-settings",
        json={"mobile_money_fee_percent": "1.5", "minimum_fee_cents": 500},
        headers=auth(admin),
    )
    assert updated.status_code == 200
    quote = await client.get("/api/fee-settings/quote", params={"amount_cents": 10000})
    assert quote.json()["fee_cents"] == 500

    expired = await client.post("/api/admin/mobile-money/expire", headers=auth(admin))
    assert expired.json() == {"expired": 0, "request_ids": []}

    not_admin = await client.post("/api/admin/mobile-money/expire", headers=auth(requester))
    assert not_admin.status_code == 403


async def test_admin_user_management(client, users):
    requester, fulfiller, admin = users

    listing = await client.get("/api/admin/users", params={"search": "rahim"}, headers=auth(admin))
    assert listing.status_code == 200
    body = listing.json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == requester.id

    toggled = await client.post(f"/api/admin/users/{requester.id}/toggle-status", headers=auth(admin))
    assert toggled.status_code == 200
    assert toggled.json()["is_active"] is False

    blocked = await _create(client, requester)
    assert blocked.status_code == 401

    admin_target = await client.post(f"/api/admin/users/{admin.id}/toggle-status", headers=auth(admin))
    assert admin_target.status_code == 400

    not_admin = await client.post(f"/api/admin/users/{requester.id}/toggle-status", headers=auth(fulfiller))
    assert not_admin.status_code == 403

    restored = await client.post(f"/api/admin/users/{requester.id}/toggle-status", headers=auth(admin))
    assert restored.json()["is_active"] is True
    assert (await _create(client, requester)).status_code == 201
