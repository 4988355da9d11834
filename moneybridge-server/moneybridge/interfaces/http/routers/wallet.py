"""Wallet endpoints for the signed-in account."""
from fastapi import APIRouter, Depends, Query

from moneybridge.core.security import get_current_account
from moneybridge.interfaces.http.deps import get_wallet_service
from moneybridge.modules.accounts import Account as AccountDomain
from moneybridge.modules.common.pagination import PageRequest
from moneybridge.modules.wallets import WalletService
from moneybridge.schemas import (
    WalletSnapshotResponse,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)

router = APIRouter()


@router.get("", response_model=WalletSnapshotResponse, summary="Wallet balance")
async def get_wallet(
    account: AccountDomain = Depends(get_current_account),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletSnapshotResponse:
    return WalletSnapshotResponse.model_validate(await wallet_service.get_wallet(account.id))


@router.get("/transactions", response_model=WalletTransactionListResponse, summary="Ledger entries, newest first")
async def list_transactions(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    account: AccountDomain = Depends(get_current_account),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletTransactionListResponse:
    result = await wallet_service.list_transactions(account.id, PageRequest(page=page, limit=limit))
    return WalletTransactionListResponse(
        transactions=[WalletTransactionResponse.model_validate(record) for record in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )
