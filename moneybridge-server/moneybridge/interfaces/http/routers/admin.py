"""Administrative endpoints for accounts, balances, ledgers, fees and request expiry."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from moneybridge.core.security import get_current_admin
from moneybridge.interfaces.http.deps import (
    get_account_service,
    get_fee_settings_service,
    get_mobile_money_service,
    get_wallet_service,
)
from moneybridge.modules.accounts import Account as AccountDomain, AccountService
from moneybridge.modules.common.pagination import PageRequest
from moneybridge.modules.fees import FeeSettingsService
from moneybridge.modules.mobile_money import MobileMoneyService
from moneybridge.modules.wallets import WalletService
from moneybridge.schemas import (
    AccountListResponse,
    AccountResponse,
    BalanceAdjustmentRequest,
    ExpireResponse,
    FeeSettingsResponse,
    FeeSettingsUpdate,
    LedgerCheckResponse,
    WalletTransactionResponse,
)

router = APIRouter()


@router.get("/users", response_model=AccountListResponse, summary="List regular accounts")
async def list_users(
    search: Optional[str] = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    _: AccountDomain = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
) -> AccountListResponse:
    result = await account_service.list_accounts(PageRequest(page=page, limit=limit), search=search)
    return AccountListResponse(
        items=[AccountResponse.model_validate(item) for item in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
    )


@router.get("/users/{account_id}", response_model=AccountResponse, summary="Account detail")
async def get_user(
    account_id: str,
    _: AccountDomain = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.model_validate(await account_service.require(account_id))


@router.post("/users/{account_id}/toggle-status", response_model=AccountResponse, summary="Enable or disable an account")
async def toggle_user_status(
    account_id: str,
    admin: AccountDomain = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.model_validate(await account_service.toggle_status(admin, account_id))


@router.post("/users/{account_id}/balance", response_model=WalletTransactionResponse, summary="Credit or debit a wallet")
async def adjust_balance(
    account_id: str,
    payload: BalanceAdjustmentRequest,
    admin: AccountDomain = Depends(get_current_admin),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletTransactionResponse:
    entry = await wallet_service.adjust_balance(admin, account_id, payload.delta_cents, note=payload.note)
    return WalletTransactionResponse.model_validate(entry)


@router.get("/users/{account_id}/ledger/verify", response_model=LedgerCheckResponse, summary="Replay a wallet ledger")
async def verify_ledger(
    account_id: str,
    _: AccountDomain = Depends(get_current_admin),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> LedgerCheckResponse:
    return LedgerCheckResponse.model_validate(await wallet_service.verify_ledger(account_id))


@router.put("/fee-settings", response_model=FeeSettingsResponse, summary="Replace the active fee settings")
async def update_fee_settings(
    payload: FeeSettingsUpdate,
    admin: AccountDomain = Depends(get_current_admin),
    service: FeeSettingsService = Depends(get_fee_settings_service),
) -> FeeSettingsResponse:
    settings = await service.update(
        admin,
        mobile_money_fee_percent=payload.mobile_money_fee_percent,
        minimum_fee_cents=payload.minimum_fee_cents,
        maximum_fee_cents=payload.maximum_fee_cents,
        transfer_fee_percent=payload.transfer_fee_percent,
    )
    return FeeSettingsResponse.model_validate(settings)


@router.post("/mobile-money/expire", response_model=ExpireResponse, summary="Expire stale PENDING requests")
async def expire_stale_requests(
    _: AccountDomain = Depends(get_current_admin),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> ExpireResponse:
    expired = await service.expire_stale_requests()
    return ExpireResponse(expired=len(expired), request_ids=[request.id for request in expired])
